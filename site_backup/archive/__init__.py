"""
Backup archive format.

An archive is a ZIP container with a manifest document, a content
document and a flat media directory.
"""

from site_backup.archive.reader import ArchiveReader
from site_backup.archive.validator import BackupValidator
from site_backup.archive.writer import (
    COMPRESSION_LEVEL,
    CONTENT_NAME,
    MANIFEST_NAME,
    MEDIA_DIR,
    ArchiveWriter,
)

__all__ = [
    "ArchiveReader",
    "ArchiveWriter",
    "BackupValidator",
    "COMPRESSION_LEVEL",
    "CONTENT_NAME",
    "MANIFEST_NAME",
    "MEDIA_DIR",
]
