"""
Abstract content store interface.

The store holds one JSON content document per customer plus a catalog of
the customer's media files. Implementations raise ContentStoreError.
"""

from abc import ABC, abstractmethod
from datetime import datetime, UTC
from typing import Any, List

from site_backup.media.extractor import filename_from_url
from site_backup.models.backup import ContentRecord, MediaEntry

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "avif"})


def media_type_for(filename: str) -> str:
    """Classify a file as "image" or "file" by extension."""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return "image" if extension in IMAGE_EXTENSIONS else "file"


def restored_media_entry(url: str, customer_id: str, folder: str = "restored") -> MediaEntry:
    """Build the catalog entry for a file re-uploaded from a backup."""
    filename = filename_from_url(url)
    return MediaEntry(
        customer_id=customer_id,
        url=url,
        folder=folder,
        media_type=media_type_for(filename),
        metadata={
            "filename": filename,
            "source": "backup_restore",
            "uploaded_at": datetime.now(UTC).isoformat(),
        }
    )


class ContentStore(ABC):
    """Abstract base class for content stores."""
    
    @abstractmethod
    async def get(self, customer_id: str) -> ContentRecord:
        """Fetch a customer's website record."""
        pass
    
    @abstractmethod
    async def put(self, customer_id: str, content: Any) -> None:
        """Replace a customer's content document."""
        pass
    
    @abstractmethod
    async def record_media(self, entries: List[MediaEntry]) -> None:
        """Add entries to the media catalog."""
        pass
    
    async def close(self) -> None:
        """Release any held resources."""
        pass
    
    async def __aenter__(self) -> "ContentStore":
        return self
    
    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
