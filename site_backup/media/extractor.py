"""
Media reference extraction.

The content tree has no fixed schema, so media references are found by
walking every mapping and sequence and matching string values that sit
under a conventional media field name and look like a storage URL.

MEDIA_FIELD_NAMES is a heuristic, not a schema contract: a media URL
stored under an unconventional field name is not discovered.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from site_backup.models.config import DEFAULT_STORAGE_MARKERS

MEDIA_FIELD_NAMES = frozenset({
    "url",
    "imageUrl",
    "image",
    "backgroundImage",
    "src",
    "imageSrc",
    "logo",
    "icon",
    "avatar",
    "thumbnail",
    "cover",
    "banner",
    "heroImage",
})

UNKNOWN_FILENAME = "unknown"

_PUBLIC_OBJECT_PATH = re.compile(r"/storage/v1/object/public/[^/]+/(.+)")


def is_storage_url(value: Any, markers: Optional[Sequence[str]] = None) -> bool:
    """Check whether a value is a URL pointing into the object storage."""
    if not value or not isinstance(value, str):
        return False
    markers = markers if markers is not None else DEFAULT_STORAGE_MARKERS
    return any(marker and marker in value for marker in markers)


def extract_media_references(
    content: Any,
    markers: Optional[Sequence[str]] = None,
    field_names: Iterable[str] = MEDIA_FIELD_NAMES
) -> List[str]:
    """
    Extract every unique media URL referenced by a content tree.
    
    Args:
        content: Content tree (any JSON value)
        markers: Substrings identifying storage URLs
        field_names: Field names whose string values may hold media URLs
        
    Returns:
        Unique URLs in the order they were first found
    """
    field_names = frozenset(field_names)
    found: Dict[str, None] = {}

    def traverse(node: Any) -> None:
        if isinstance(node, list):
            for item in node:
                traverse(item)
            return
        if not isinstance(node, dict):
            return

        for key, value in node.items():
            if key in field_names and isinstance(value, str) and is_storage_url(value, markers):
                found.setdefault(value, None)
            if isinstance(value, (dict, list)):
                traverse(value)

    traverse(content)
    return list(found)


def filename_from_url(url: str) -> str:
    """Get the decoded final path segment of a URL."""
    try:
        path = urlparse(url).path
    except (TypeError, ValueError, AttributeError):
        return UNKNOWN_FILENAME
    name = unquote(path.rstrip("/").rsplit("/", 1)[-1]) if path else ""
    # The archive is flat; a decoded slash must not create a subdirectory.
    name = name.replace("/", "_").replace("\\", "_")
    return name or UNKNOWN_FILENAME


def storage_path_from_url(url: str) -> Optional[str]:
    """
    Get the object path within its bucket.
    
    Example: .../storage/v1/object/public/user-media/c1/gallery/a.jpg
    returns "c1/gallery/a.jpg".
    """
    try:
        path = urlparse(url).path
    except (TypeError, ValueError, AttributeError):
        return None
    match = _PUBLIC_OBJECT_PATH.search(path)
    if match:
        return unquote(match.group(1))
    return None


def group_urls_by_folder(urls: Iterable[str]) -> Dict[str, List[str]]:
    """Group storage URLs by the folder part of their object path."""
    grouped: Dict[str, List[str]] = {}

    for url in urls:
        path = storage_path_from_url(url)
        if not path:
            continue
        folder = path.rsplit("/", 1)[0] if "/" in path else "root"
        grouped.setdefault(folder, []).append(url)

    return grouped
