"""Data and configuration models for the site backup pipeline."""

from site_backup.models.backup import (
    BACKUP_FORMAT_VERSION,
    BackupManifest,
    BackupStats,
    ContentRecord,
    ExportResult,
    ImportResult,
    MediaEntry,
    ProgressStep,
    TransferProgress,
    ValidationResult,
)
from site_backup.models.config import (
    BackupConfig,
    ContentStoreConfig,
    SiteBackupConfig,
    StorageConfig,
    load_config,
)

__all__ = [
    "BACKUP_FORMAT_VERSION",
    "BackupManifest",
    "BackupStats",
    "ContentRecord",
    "ExportResult",
    "ImportResult",
    "MediaEntry",
    "ProgressStep",
    "TransferProgress",
    "ValidationResult",
    "BackupConfig",
    "ContentStoreConfig",
    "SiteBackupConfig",
    "StorageConfig",
    "load_config",
]
