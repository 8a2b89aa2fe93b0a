"""
Backup export orchestration.

Sequence: fetch content -> extract media references -> download media one
at a time -> compute stats and manifest -> write the archive. Progress
bands: preparing 0, extracting 10, downloading 20-80, packaging 80-95,
complete 100.
"""

import copy
import uuid
from datetime import datetime, UTC
from typing import Callable, Dict, List, Optional, Tuple

from site_backup.archive.writer import ArchiveWriter
from site_backup.core.exceptions import SiteBackupError, TransferError
from site_backup.media.extractor import extract_media_references, filename_from_url
from site_backup.models.backup import (
    BACKUP_FORMAT_VERSION,
    BackupManifest,
    BackupStats,
    ExportResult,
    ProgressStep,
)
from site_backup.models.config import BackupConfig
from site_backup.monitoring.progress import ProgressCallback, ProgressReporter, band
from site_backup.store.base import ContentStore
from site_backup.transfer.base import MediaTransfer
from site_backup.utils.logging import get_logger

logger = get_logger("orchestrator.export")

DOWNLOAD_BAND = (20.0, 80.0)


def backup_filename(customer_id: str, when: datetime) -> str:
    """Suggested archive filename; not unique across same-day exports."""
    return f"backup_{customer_id}_{when.strftime('%Y-%m-%d')}.zip"


class BackupExporter:
    """Exports a customer's content tree and media into an archive."""
    
    def __init__(
        self,
        store: ContentStore,
        transfer: MediaTransfer,
        config: Optional[BackupConfig] = None,
        now: Callable[[], datetime] = lambda: datetime.now(UTC)
    ):
        self.store = store
        self.transfer = transfer
        self.config = config or BackupConfig()
        self._now = now
    
    async def export(
        self,
        customer_id: str,
        description: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> ExportResult:
        """
        Export a complete website backup.
        
        Args:
            customer_id: Customer to export
            description: Optional human-readable note stored in the manifest
            on_progress: Optional progress sink
            
        Returns:
            ExportResult; failures are reported in ``error``, never raised
        """
        progress = ProgressReporter(on_progress)
        
        try:
            progress.report(ProgressStep.PREPARING, 0, "Preparing backup...")
            
            record = await self.store.get(customer_id)
            content = copy.deepcopy(record.content) if record.content is not None else {}
            
            progress.report(ProgressStep.EXTRACTING_MEDIA, 10, "Extracting media references...")
            urls = extract_media_references(content, markers=self.config.storage_markers)
            logger.info(f"Found {len(urls)} media references for customer {customer_id}")
            
            progress.report(
                ProgressStep.DOWNLOADING_MEDIA,
                DOWNLOAD_BAND[0],
                f"Downloading {len(urls)} media files...",
                total_items=len(urls),
                processed_items=0
            )
            media, failed_urls = await self._download_media(urls, progress)
            
            progress.report(ProgressStep.CREATING_ARCHIVE, 80, "Creating archive...")
            
            created_at = self._now()
            manifest = BackupManifest(
                backup_id=str(uuid.uuid4()),
                customer_id=customer_id,
                domain=record.domain,
                created_at=created_at.isoformat(),
                version=BACKUP_FORMAT_VERSION,
                description=description,
                stats=BackupStats.from_content(
                    content,
                    media_file_count=len(media),
                    media_size_bytes=sum(len(data) for data in media.values())
                )
            )
            
            writer = ArchiveWriter(self.config.compression_level)
            archive_bytes = writer.write(manifest, content, media)
            
            progress.report(ProgressStep.CREATING_ARCHIVE, 95, "Finalizing archive...")
            filename = backup_filename(customer_id, created_at)
            progress.report(ProgressStep.COMPLETE, 100, "Backup created successfully")
            
            logger.info(
                f"Exported backup {manifest.backup_id} for customer {customer_id}: "
                f"{manifest.stats.page_count} pages, {len(media)} media files, "
                f"{len(failed_urls)} downloads failed"
            )
            
            return ExportResult(
                success=True,
                archive_bytes=archive_bytes,
                filename=filename,
                manifest=manifest,
                failed_urls=failed_urls
            )
        
        except SiteBackupError as e:
            logger.error(f"Backup export failed for customer {customer_id}: {e.message}")
            return ExportResult(success=False, error=e.message)
        except Exception as e:
            logger.error(f"Backup export failed for customer {customer_id}: {e}", exc_info=True)
            return ExportResult(success=False, error=str(e) or e.__class__.__name__)
    
    async def _download_media(
        self,
        urls: List[str],
        progress: ProgressReporter
    ) -> Tuple[Dict[str, bytes], List[str]]:
        """Download media sequentially; a failed URL is logged and skipped."""
        media: Dict[str, bytes] = {}
        failed: List[str] = []
        
        for index, url in enumerate(urls, start=1):
            try:
                media[url] = await self.transfer.download(url)
            except TransferError as e:
                logger.warning(f"Failed to download {url}: {e.message}")
                failed.append(url)
            
            progress.report(
                ProgressStep.DOWNLOADING_MEDIA,
                band(*DOWNLOAD_BAND, index, len(urls)),
                f"Downloading media files... ({index}/{len(urls)})",
                current_item=filename_from_url(url),
                total_items=len(urls),
                processed_items=index
            )
        
        return media, failed
