"""Rewrite media URLs inside a content tree."""

import copy
from typing import Any, Mapping

from site_backup.media.extractor import filename_from_url


def replace_media_urls(content: Any, url_map: Mapping[str, str]) -> Any:
    """
    Return a copy of a content tree with mapped URLs replaced.

    Keys of url_map may be full URLs or archive filenames; a string value is
    replaced when it equals a key, or when it is a URL whose filename equals a
    key. The input tree is not modified.
    """
    if not url_map:
        return copy.deepcopy(content)

    def replace(value: Any) -> Any:
        if isinstance(value, list):
            return [replace(item) for item in value]
        if isinstance(value, dict):
            return {key: replace(item) for key, item in value.items()}
        if isinstance(value, str):
            if value in url_map:
                return url_map[value]
            if "://" in value:
                name = filename_from_url(value)
                if name in url_map:
                    return url_map[name]
        return value

    return replace(content)
