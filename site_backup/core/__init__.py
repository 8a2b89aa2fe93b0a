"""Core exception taxonomy for the site backup pipeline."""

from site_backup.core.exceptions import (
    ArchiveError,
    BackupValidationError,
    ConfigurationError,
    ContentStoreError,
    SiteBackupError,
    TransferError,
)

__all__ = [
    "SiteBackupError",
    "ConfigurationError",
    "TransferError",
    "ArchiveError",
    "ContentStoreError",
    "BackupValidationError",
]
