"""
Pytest configuration and fixtures for the site backup tests.

This module provides in-memory content store and object storage
collaborators plus sample content trees shared by the test modules.
"""

import copy
import struct
from typing import Any, Dict, List, Optional, Set

import pytest

from site_backup.core.exceptions import ContentStoreError, TransferError
from site_backup.models.backup import ContentRecord, MediaEntry
from site_backup.models.config import BackupConfig
from site_backup.store.base import ContentStore
from site_backup.transfer.base import MediaTransfer, ObjectStorage

STORAGE_BASE = "https://demo.supabase.co"
PUBLIC_PREFIX = f"{STORAGE_BASE}/storage/v1/object/public/user-media"


def storage_url(path: str) -> str:
    """Public storage URL for an object path."""
    return f"{PUBLIC_PREFIX}/{path}"


class InMemoryObjectStorage(ObjectStorage):
    """Object storage keeping objects in a dict keyed by public URL."""
    
    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.uploads: List[str] = []
        self.fail_downloads: Set[str] = set()
        self.fail_uploads: Set[str] = set()
        self.closed = False
    
    async def get(self, url: str) -> bytes:
        if url in self.fail_downloads or url not in self.objects:
            raise TransferError(f"Failed to download {url}: HTTP 404 Not Found")
        return self.objects[url]
    
    async def put(self, path, data, content_type="application/octet-stream", upsert=False):
        if any(marker in path for marker in self.fail_uploads):
            raise TransferError(f"Failed to upload {path}: HTTP 500")
        url = storage_url(path)
        if url in self.objects and not upsert:
            raise TransferError(f"Failed to upload {path}: HTTP 409 Duplicate", code="ObjectExists")
        self.objects[url] = data
        self.uploads.append(path)
        return url
    
    async def head(self, url: str) -> int:
        return 200 if url in self.objects else 404
    
    async def close(self) -> None:
        self.closed = True


class InMemoryContentStore(ContentStore):
    """Content store keeping one content document per customer."""
    
    def __init__(self, records: Optional[Dict[str, Any]] = None, domain: Optional[str] = None):
        self.records: Dict[str, Any] = dict(records or {})
        self.domain = domain
        self.media: List[MediaEntry] = []
        self.puts: List[str] = []
        self.fail_get = False
        self.fail_put = False
        self.fail_record_media = False
    
    async def get(self, customer_id: str) -> ContentRecord:
        if self.fail_get or customer_id not in self.records:
            raise ContentStoreError("Website data could not be loaded")
        return ContentRecord(
            customer_id=customer_id,
            domain=self.domain,
            content=self.records[customer_id]
        )
    
    async def put(self, customer_id: str, content: Any) -> None:
        if self.fail_put:
            raise ContentStoreError("Database update failed: connection reset")
        self.records[customer_id] = copy.deepcopy(content)
        self.puts.append(customer_id)
    
    async def record_media(self, entries: List[MediaEntry]) -> None:
        if self.fail_record_media:
            raise ContentStoreError("Failed to insert media entries")
        self.media.extend(entries)


CENTRAL_DIRECTORY_SIGNATURE = b"PK\x01\x02"


def patch_central_directory(archive: bytes, member: str, method=None, flag_bits=None) -> bytes:
    """Rewrite a member's compression method or flag bits in the central directory."""
    data = bytearray(archive)
    encoded = member.encode("utf-8")
    offset = data.find(CENTRAL_DIRECTORY_SIGNATURE)
    while offset != -1:
        name_length = struct.unpack_from("<H", data, offset + 28)[0]
        if bytes(data[offset + 46:offset + 46 + name_length]) == encoded:
            if flag_bits is not None:
                struct.pack_into("<H", data, offset + 8, flag_bits)
            if method is not None:
                struct.pack_into("<H", data, offset + 10, method)
            return bytes(data)
        offset = data.find(CENTRAL_DIRECTORY_SIGNATURE, offset + 4)
    raise KeyError(member)


HERO_URL = storage_url("customer-1/hero/banner.jpg")
TEAM_URL = storage_url("customer-1/team/anna.png")
LOGO_URL = storage_url("customer-1/logo.svg")


@pytest.fixture
def sample_content() -> Dict[str, Any]:
    """A small website content tree with three media references."""
    return {
        "pages": [
            {
                "slug": "home",
                "blocks": [
                    {"type": "hero", "content": {"backgroundImage": HERO_URL, "title": "Welcome"}},
                    {"type": "team", "members": [{"name": "Anna", "image": TEAM_URL}]},
                ],
            },
            {
                "slug": "about",
                "blocks": [
                    {"type": "text", "content": {"html": "<p>About us</p>"}},
                ],
            },
        ],
        "theme": {"colors": {"primary": "#336699"}},
        "navigation": {"items": [{"label": "Home", "href": "/"}]},
        "header": {"logo": LOGO_URL},
    }


@pytest.fixture
def media_objects() -> Dict[str, bytes]:
    return {
        HERO_URL: b"\xff\xd8hero-jpeg-bytes",
        TEAM_URL: b"\x89PNGteam-bytes",
        LOGO_URL: b"<svg></svg>",
    }


@pytest.fixture
def object_storage(media_objects) -> InMemoryObjectStorage:
    return InMemoryObjectStorage(media_objects)


@pytest.fixture
def content_store(sample_content) -> InMemoryContentStore:
    return InMemoryContentStore({"customer-1": sample_content}, domain="salon.example")


@pytest.fixture
def media_transfer(object_storage) -> MediaTransfer:
    return MediaTransfer(object_storage)


@pytest.fixture
def backup_config() -> BackupConfig:
    return BackupConfig()
