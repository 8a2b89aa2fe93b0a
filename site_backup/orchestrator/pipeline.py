"""
Pipeline entry points.

export_backup, validate_backup and import_backup each return a result
object and never raise. Collaborators that are not injected are built
from configuration and closed when the call finishes.
"""

from contextlib import AsyncExitStack
from pathlib import Path
from typing import Optional, Tuple, Union

from site_backup.archive.validator import BackupValidator
from site_backup.core.exceptions import ArchiveError, SiteBackupError
from site_backup.models.backup import ExportResult, ImportResult, ValidationResult
from site_backup.models.config import SiteBackupConfig, load_config
from site_backup.monitoring.progress import ProgressCallback
from site_backup.orchestrator.exporter import BackupExporter
from site_backup.orchestrator.importer import BackupImporter
from site_backup.store.base import ContentStore
from site_backup.store.rest import RestContentStore
from site_backup.transfer.base import MediaTransfer, ObjectStorage
from site_backup.transfer.http_storage import HttpObjectStorage
from site_backup.utils.logging import get_logger

logger = get_logger("orchestrator.pipeline")

ArchiveSource = Union[bytes, bytearray, str, Path]


def read_archive(archive: ArchiveSource) -> bytes:
    """Return archive bytes from bytes or a file path."""
    if isinstance(archive, (bytes, bytearray)):
        return bytes(archive)
    try:
        return Path(archive).read_bytes()
    except OSError as e:
        raise ArchiveError(f"Could not read backup file {archive}: {e}")


async def _collaborators(
    stack: AsyncExitStack,
    config: Optional[SiteBackupConfig],
    store: Optional[ContentStore],
    storage: Optional[ObjectStorage]
) -> Tuple[SiteBackupConfig, ContentStore, MediaTransfer]:
    if config is None:
        config = load_config()
    if store is None:
        store = await stack.enter_async_context(RestContentStore(config.store))
    if storage is None:
        storage = await stack.enter_async_context(HttpObjectStorage(config.storage))
    return config, store, MediaTransfer(storage)


async def export_backup(
    customer_id: str,
    description: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
    *,
    config: Optional[SiteBackupConfig] = None,
    store: Optional[ContentStore] = None,
    storage: Optional[ObjectStorage] = None
) -> ExportResult:
    """Export a customer's website into a backup archive."""
    try:
        async with AsyncExitStack() as stack:
            config, store, transfer = await _collaborators(stack, config, store, storage)
            exporter = BackupExporter(store, transfer, config.backup)
            return await exporter.export(customer_id, description, on_progress)
    except SiteBackupError as e:
        logger.error(f"Backup export could not start: {e.message}")
        return ExportResult(success=False, error=e.message)


async def validate_backup(archive: ArchiveSource, expected_customer_id: str) -> ValidationResult:
    """Validate a backup archive before importing it."""
    try:
        archive_bytes = read_archive(archive)
    except SiteBackupError as e:
        result = ValidationResult()
        result.add_error(e.message)
        return result
    return BackupValidator().validate(archive_bytes, expected_customer_id)


async def import_backup(
    archive: ArchiveSource,
    customer_id: str,
    on_progress: Optional[ProgressCallback] = None,
    *,
    config: Optional[SiteBackupConfig] = None,
    store: Optional[ContentStore] = None,
    storage: Optional[ObjectStorage] = None
) -> ImportResult:
    """Import a backup archive into a customer's website."""
    try:
        archive_bytes = read_archive(archive)
        async with AsyncExitStack() as stack:
            config, store, transfer = await _collaborators(stack, config, store, storage)
            importer = BackupImporter(store, transfer, config.backup)
            return await importer.import_backup(archive_bytes, customer_id, on_progress)
    except SiteBackupError as e:
        logger.error(f"Backup import could not start: {e.message}")
        return ImportResult(success=False, error=e.message)
