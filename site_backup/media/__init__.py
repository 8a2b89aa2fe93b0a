"""Media reference discovery and rewriting over schema-free content trees."""

from site_backup.media.extractor import (
    MEDIA_FIELD_NAMES,
    extract_media_references,
    filename_from_url,
    group_urls_by_folder,
    is_storage_url,
    storage_path_from_url,
)
from site_backup.media.rewriter import replace_media_urls

__all__ = [
    "MEDIA_FIELD_NAMES",
    "extract_media_references",
    "filename_from_url",
    "group_urls_by_folder",
    "is_storage_url",
    "storage_path_from_url",
    "replace_media_urls",
]
