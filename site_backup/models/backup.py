"""
Backup models for the site backup pipeline.

This module defines Pydantic models for the archive manifest, its
statistics, validation results, progress events and the result objects
returned by the export, validate and import entry points.
"""

from datetime import datetime, UTC
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# A content tree is a schema-free JSON document.
JSONValue = Union[None, bool, int, float, str, List["JSONValue"], Dict[str, "JSONValue"]]

BACKUP_FORMAT_VERSION = "1.0"


class ProgressStep(str, Enum):
    """Stages reported while exporting or importing a backup."""
    PREPARING = "preparing"
    EXTRACTING_MEDIA = "extracting_media"
    DOWNLOADING_MEDIA = "downloading_media"
    CREATING_ARCHIVE = "creating_archive"
    UPLOADING_MEDIA = "uploading_media"
    UPDATING_STORE = "updating_store"
    COMPLETE = "complete"


class BackupStats(BaseModel):
    """Statistics about backup contents."""
    model_config = ConfigDict(populate_by_name=True)

    page_count: int = Field(default=0, alias="pageCount")
    block_count: int = Field(default=0, alias="blockCount")
    media_file_count: int = Field(default=0, alias="mediaFileCount")
    media_size_bytes: int = Field(default=0, alias="mediaSizeBytes")
    has_theme: bool = Field(default=False, alias="hasTheme")
    has_navigation: bool = Field(default=False, alias="hasNavigation")

    @classmethod
    def from_content(
        cls,
        content: Any,
        media_file_count: int,
        media_size_bytes: int
    ) -> "BackupStats":
        """Derive statistics from a content tree and the downloaded media."""
        content = content if isinstance(content, dict) else {}
        pages = content.get("pages")
        if not isinstance(pages, list):
            pages = []

        block_count = 0
        for page in pages:
            if isinstance(page, dict) and isinstance(page.get("blocks"), list):
                block_count += len(page["blocks"])

        return cls(
            page_count=len(pages),
            block_count=block_count,
            media_file_count=media_file_count,
            media_size_bytes=media_size_bytes,
            has_theme=_present(content.get("theme")),
            has_navigation=_present(content.get("navigation")),
        )


def _present(value: Any) -> bool:
    """Empty objects and arrays still count as present."""
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


class BackupManifest(BaseModel):
    """
    Backup metadata, stored as the manifest document of an archive.

    Unknown fields are kept so a manifest written by a newer exporter
    round-trips through import unchanged.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)

    backup_id: str = Field(alias="backupId")
    customer_id: str = Field(alias="customerId")
    domain: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    version: str = BACKUP_FORMAT_VERSION
    description: Optional[str] = None
    stats: BackupStats = Field(default_factory=BackupStats)

    def to_json(self) -> str:
        """Serialize using the archive's camelCase field names."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @property
    def created_datetime(self) -> Optional[datetime]:
        if not self.created_at:
            return None
        try:
            return datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            return None


class ValidationResult(BaseModel):
    """Result of validating a backup archive before import."""
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    manifest: Optional[BackupManifest] = None
    customer_id_matches: Optional[bool] = None
    validated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def add_error(self, message: str):
        """Add a fatal error to the validation result."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        """Add a non-fatal warning to the validation result."""
        self.warnings.append(message)


class TransferProgress(BaseModel):
    """A single progress event pushed to the caller's sink."""
    step: ProgressStep
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    message: str = ""
    current_item: Optional[str] = None
    total_items: Optional[int] = None
    processed_items: Optional[int] = None


class ExportResult(BaseModel):
    """Result of a backup export operation."""
    success: bool
    archive_bytes: Optional[bytes] = None
    filename: Optional[str] = None
    manifest: Optional[BackupManifest] = None
    error: Optional[str] = None
    failed_urls: List[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Result of a backup import operation."""
    success: bool
    manifest: Optional[BackupManifest] = None
    media_files_restored: Optional[int] = None
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    url_map: Dict[str, str] = Field(default_factory=dict)
    failed_files: List[str] = Field(default_factory=list)


class ContentRecord(BaseModel):
    """A customer's website row as returned by the content store."""
    customer_id: str
    domain: Optional[str] = None
    content: Any = Field(default_factory=dict)


class MediaEntry(BaseModel):
    """Media catalog row for a file restored from a backup."""
    customer_id: str
    url: str
    folder: str = "restored"
    media_type: str = "file"
    metadata: Dict[str, Any] = Field(default_factory=dict)
