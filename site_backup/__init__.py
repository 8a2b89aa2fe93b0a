"""
Site Backup

Exports a customer's website content tree together with every media file
it references into a portable ZIP archive, validates such archives, and
restores them into the content store.
"""

__version__ = "0.1.0"
__author__ = "Site Backup Team"

from site_backup.models.backup import (
    BackupManifest,
    BackupStats,
    ExportResult,
    ImportResult,
    TransferProgress,
    ValidationResult,
)
from site_backup.orchestrator.pipeline import export_backup, import_backup, validate_backup

__all__ = [
    "BackupManifest",
    "BackupStats",
    "ExportResult",
    "ImportResult",
    "TransferProgress",
    "ValidationResult",
    "export_backup",
    "import_backup",
    "validate_backup",
]
