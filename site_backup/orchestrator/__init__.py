"""
Export and import orchestration for website backups.
"""

from site_backup.orchestrator.exporter import BackupExporter, backup_filename
from site_backup.orchestrator.importer import BackupImporter
from site_backup.orchestrator.pipeline import (
    export_backup,
    import_backup,
    read_archive,
    validate_backup,
)

__all__ = [
    "BackupExporter",
    "BackupImporter",
    "backup_filename",
    "export_backup",
    "import_backup",
    "read_archive",
    "validate_backup",
]
