"""
Archive writer.

Packs a manifest, the content tree and the downloaded media into a single
DEFLATE-compressed ZIP archive.
"""

import io
import json
import zipfile
from typing import Any, Dict, List, Mapping, Tuple

from site_backup.media.extractor import filename_from_url
from site_backup.models.backup import BackupManifest
from site_backup.utils.logging import get_logger

logger = get_logger("archive.writer")

MANIFEST_NAME = "backup_info.json"
CONTENT_NAME = "website.json"
MEDIA_DIR = "media/"
COMPRESSION_LEVEL = 6


class ArchiveWriter:
    """Writes backup archives."""
    
    def __init__(self, compression_level: int = COMPRESSION_LEVEL):
        self.compression_level = compression_level
        # (kept filename, URL whose blob was overwritten)
        self.collisions: List[Tuple[str, str]] = []
    
    def write(
        self,
        manifest: BackupManifest,
        content: Any,
        media: Mapping[str, bytes]
    ) -> bytes:
        """
        Build an archive in memory.
        
        Args:
            manifest: Backup manifest
            content: Content tree
            media: Downloaded media keyed by source URL
            
        Returns:
            ZIP archive bytes
        """
        self.collisions = []
        members = self._media_members(media)
        
        buffer = io.BytesIO()
        with zipfile.ZipFile(
            buffer,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level
        ) as archive:
            archive.writestr(MANIFEST_NAME, manifest.to_json())
            archive.writestr(CONTENT_NAME, json.dumps(content, indent=2, ensure_ascii=False))
            archive.writestr(zipfile.ZipInfo(MEDIA_DIR), b"")
            for filename, data in members.items():
                archive.writestr(f"{MEDIA_DIR}{filename}", data)
        
        logger.debug(f"Wrote archive with {len(members)} media files ({buffer.tell()} bytes)")
        return buffer.getvalue()
    
    def _media_members(self, media: Mapping[str, bytes]) -> Dict[str, bytes]:
        members: Dict[str, bytes] = {}
        sources: Dict[str, str] = {}
        
        for url, data in media.items():
            filename = filename_from_url(url)
            if filename in members:
                # Same basename from a different URL: the later blob wins.
                logger.warning(
                    f"Media filename collision for {filename}: {sources[filename]} replaced by {url}"
                )
                self.collisions.append((filename, sources[filename]))
            members[filename] = data
            sources[filename] = url
        
        return members
