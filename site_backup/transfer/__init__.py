"""
Media transfer between the object storage and backup archives.
"""

from site_backup.transfer.base import MediaTransfer, ObjectStorage, UrlCheckReport
from site_backup.transfer.http_storage import HttpObjectStorage

__all__ = [
    "MediaTransfer",
    "ObjectStorage",
    "UrlCheckReport",
    "HttpObjectStorage",
]
