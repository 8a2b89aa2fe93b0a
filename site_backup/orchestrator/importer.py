"""
Backup import orchestration.

Sequence: validate -> read manifest and content -> upload media one at a
time into "<customer>/<restored_folder>" -> commit the content tree ->
record restored media in the catalog. Progress bands: preparing 0,
extracting 10, uploading 20-80, updating store 85, complete 100.

The content tree is committed as archived. Its media URLs still point at
the original objects unless BackupConfig.rewrite_media_urls is enabled.
"""

from typing import Dict, List, Optional, Tuple

from site_backup.archive.reader import ArchiveReader
from site_backup.archive.validator import BackupValidator
from site_backup.archive.writer import MEDIA_DIR
from site_backup.core.exceptions import (
    ArchiveError,
    BackupValidationError,
    ContentStoreError,
    SiteBackupError,
    TransferError,
)
from site_backup.media.rewriter import replace_media_urls
from site_backup.models.backup import ImportResult, ProgressStep
from site_backup.models.config import BackupConfig
from site_backup.monitoring.progress import ProgressCallback, ProgressReporter, band
from site_backup.store.base import ContentStore, restored_media_entry
from site_backup.transfer.base import MediaTransfer
from site_backup.utils.logging import get_logger

logger = get_logger("orchestrator.import")

UPLOAD_BAND = (20.0, 80.0)


class BackupImporter:
    """Restores a customer's content tree and media from an archive."""
    
    def __init__(
        self,
        store: ContentStore,
        transfer: MediaTransfer,
        config: Optional[BackupConfig] = None,
        validator: Optional[BackupValidator] = None
    ):
        self.store = store
        self.transfer = transfer
        self.config = config or BackupConfig()
        self.validator = validator or BackupValidator()
    
    def restored_namespace(self, customer_id: str) -> str:
        return f"{customer_id}/{self.config.restored_folder}"
    
    async def import_backup(
        self,
        archive_bytes: bytes,
        customer_id: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> ImportResult:
        """
        Import a backup archive into a customer's website.
        
        Args:
            archive_bytes: Archive content
            customer_id: Customer to import into
            on_progress: Optional progress sink
            
        Returns:
            ImportResult; failures are reported in ``error``, never raised
        """
        progress = ProgressReporter(on_progress)
        
        try:
            progress.report(ProgressStep.PREPARING, 0, "Validating backup...")
            
            validation = self.validator.validate(archive_bytes, customer_id)
            if not validation.is_valid:
                raise BackupValidationError(
                    f"Backup validation failed: {', '.join(validation.errors)}",
                    failed_checks=validation.errors
                )
            
            progress.report(ProgressStep.EXTRACTING_MEDIA, 10, "Extracting backup files...")
            
            with ArchiveReader(archive_bytes) as reader:
                manifest = reader.read_manifest()
                content = reader.read_content()
                names = reader.media_names()
                
                progress.report(
                    ProgressStep.UPLOADING_MEDIA,
                    UPLOAD_BAND[0],
                    f"Uploading {len(names)} media files...",
                    total_items=len(names),
                    processed_items=0
                )
                url_map, failed_files = await self._upload_media(reader, names, customer_id, progress)
            
            if url_map:
                if self.config.rewrite_media_urls:
                    content = replace_media_urls(content, url_map)
                else:
                    logger.warning(
                        f"{len(url_map)} media files were restored to new URLs; "
                        f"the imported content still references the original URLs"
                    )
            
            progress.report(ProgressStep.UPDATING_STORE, 85, "Updating website content...")
            await self.store.put(customer_id, content)
            
            if self.config.register_restored_media and url_map:
                await self._register_media(customer_id, list(url_map.values()))
            
            progress.report(ProgressStep.COMPLETE, 100, "Import completed successfully")
            
            logger.info(
                f"Imported backup {manifest.backup_id} into customer {customer_id}: "
                f"{len(url_map)} media files restored, {len(failed_files)} failed"
            )
            
            return ImportResult(
                success=True,
                manifest=manifest,
                media_files_restored=len(url_map),
                warnings=validation.warnings,
                url_map=url_map,
                failed_files=failed_files
            )
        
        except BackupValidationError as e:
            logger.error(e.message)
            return ImportResult(success=False, error=e.message, warnings=validation.warnings)
        except SiteBackupError as e:
            logger.error(f"Backup import failed for customer {customer_id}: {e.message}")
            return ImportResult(success=False, error=e.message)
        except Exception as e:
            logger.error(f"Backup import failed for customer {customer_id}: {e}", exc_info=True)
            return ImportResult(success=False, error=str(e) or e.__class__.__name__)
    
    async def _upload_media(
        self,
        reader: ArchiveReader,
        names: List[str],
        customer_id: str,
        progress: ProgressReporter
    ) -> Tuple[Dict[str, str], List[str]]:
        """Upload archived media sequentially; a failed file is logged and skipped."""
        namespace = self.restored_namespace(customer_id)
        url_map: Dict[str, str] = {}
        failed: List[str] = []
        
        for index, name in enumerate(names, start=1):
            # Keyed by path under media/ so nested members with one basename stay distinct.
            relative_name = name[len(MEDIA_DIR):]
            try:
                filename, data = reader.read_media(name)
                url_map[relative_name] = await self.transfer.upload(data, namespace, filename)
            except (ArchiveError, TransferError) as e:
                logger.warning(f"Failed to upload {relative_name}: {e.message}")
                failed.append(relative_name)
            
            progress.report(
                ProgressStep.UPLOADING_MEDIA,
                band(*UPLOAD_BAND, index, len(names)),
                f"Uploading media files... ({index}/{len(names)})",
                current_item=relative_name,
                total_items=len(names),
                processed_items=index
            )
        
        return url_map, failed
    
    async def _register_media(self, customer_id: str, urls: List[str]):
        entries = [
            restored_media_entry(url, customer_id, self.config.restored_folder)
            for url in urls
        ]
        try:
            await self.store.record_media(entries)
        except ContentStoreError as e:
            # The files are uploaded; only the catalog entries are missing.
            logger.warning(f"Failed to record {len(entries)} restored media files: {e.message}")
