"""
Base classes for media transfer operations.

This module defines the abstract object storage interface and the
MediaTransfer helper that downloads referenced media during export and
re-uploads archived media during import.
"""

import mimetypes
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from site_backup.core.exceptions import SiteBackupError, TransferError
from site_backup.media.extractor import filename_from_url
from site_backup.utils.logging import get_logger

logger = get_logger("transfer")


class ObjectStorage(ABC):
    """
    Abstract base class for object storage backends.
    
    Implementations raise TransferError for any failed request.
    """
    
    @abstractmethod
    async def get(self, url: str) -> bytes:
        """
        Fetch an object by its public URL.
        
        Args:
            url: Public object URL
            
        Returns:
            Object content
        """
        pass
    
    @abstractmethod
    async def put(
        self,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False
    ) -> str:
        """
        Store an object and return its public URL.
        
        Args:
            path: Object path within the bucket
            data: Object content
            content_type: MIME type sent with the upload
            upsert: Whether an existing object may be overwritten
            
        Returns:
            Publicly addressable URL of the stored object
        """
        pass
    
    @abstractmethod
    async def head(self, url: str) -> int:
        """Return the HTTP status of a HEAD request for a URL."""
        pass
    
    async def close(self) -> None:
        """Release any held resources."""
        pass
    
    async def __aenter__(self) -> "ObjectStorage":
        return self
    
    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


@dataclass
class UrlCheckReport:
    """Reachability of a set of media URLs."""
    valid: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    
    @property
    def all_valid(self) -> bool:
        return not self.invalid


class MediaTransfer:
    """Downloads and uploads individual media files through an ObjectStorage."""
    
    def __init__(
        self,
        storage: ObjectStorage,
        clock: Callable[[], float] = time.time
    ):
        self.storage = storage
        self._clock = clock
    
    async def download(self, url: str) -> bytes:
        """
        Download a media file.
        
        Raises:
            TransferError: If the object cannot be fetched
        """
        try:
            return await self.storage.get(url)
        except TransferError:
            raise
        except SiteBackupError as e:
            raise TransferError(f"Failed to download {url}: {e.message}", details={"url": url})
    
    def build_destination_path(self, namespace: str, filename: str) -> str:
        """Build a collision-resistant object path: namespace/<ms>_<filename>."""
        timestamp_ms = int(self._clock() * 1000)
        return f"{namespace.strip('/')}/{timestamp_ms}_{filename}"
    
    async def upload(self, data: bytes, namespace: str, original_url: str) -> str:
        """
        Upload a media file to a fresh path under a namespace.
        
        Args:
            data: File content
            namespace: Destination folder, e.g. "<customer>/restored"
            original_url: Original URL or filename, used to name the new object
            
        Returns:
            Public URL of the uploaded object
            
        Raises:
            TransferError: If the upload fails or the path already exists
        """
        filename = filename_from_url(original_url) if "://" in original_url else original_url
        path = self.build_destination_path(namespace, filename)
        
        try:
            return await self.storage.put(
                path,
                data,
                content_type=guess_content_type(filename),
                upsert=False
            )
        except TransferError:
            raise
        except SiteBackupError as e:
            raise TransferError(f"Failed to upload {filename}: {e.message}", details={"path": path})
    
    async def verify_urls(self, urls: Iterable[str]) -> UrlCheckReport:
        """Check each URL with a HEAD request."""
        report = UrlCheckReport()
        
        for url in urls:
            try:
                status = await self.storage.head(url)
            except TransferError as e:
                report.invalid.append(url)
                report.errors[url] = e.message
                continue
            
            if 200 <= status < 300:
                report.valid.append(url)
            else:
                report.invalid.append(url)
                report.errors[url] = f"HTTP {status}"
        
        logger.info(f"Checked {len(report.valid) + len(report.invalid)} media URLs, {len(report.invalid)} unreachable")
        return report


def guess_content_type(filename: str, default: str = "application/octet-stream") -> str:
    """Guess a MIME type from a filename."""
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or default
