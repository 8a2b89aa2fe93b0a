"""
HTTP object storage backend.

Talks to a Supabase-compatible storage REST API:
  upload:  POST {base}/storage/v1/object/{bucket}/{path}
  public:  GET  {base}/storage/v1/object/public/{bucket}/{path}
"""

from typing import Dict, Optional
from urllib.parse import quote

import httpx

from site_backup.core.exceptions import TransferError
from site_backup.models.config import StorageConfig
from site_backup.transfer.base import ObjectStorage
from site_backup.utils.logging import get_logger

logger = get_logger("transfer.http")


class HttpObjectStorage(ObjectStorage):
    """Object storage reached over HTTP with httpx."""
    
    def __init__(self, config: StorageConfig, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the storage backend.
        
        Args:
            config: Storage configuration
            client: Optional pre-built client; it is not closed by close()
        """
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout,
            follow_redirects=True
        )
    
    def _auth_headers(self) -> Dict[str, str]:
        if not self.config.api_key:
            return {}
        return {
            "apikey": self.config.api_key,
            "Authorization": f"Bearer {self.config.api_key}",
        }
    
    def upload_url(self, path: str) -> str:
        return f"{self.config.base_url}/storage/v1/object/{self.config.bucket}/{quote(path, safe='/')}"
    
    def public_url(self, path: str) -> str:
        return f"{self.config.base_url}/storage/v1/object/public/{self.config.bucket}/{quote(path, safe='/')}"
    
    async def get(self, url: str) -> bytes:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise TransferError(f"Failed to download {url}: {e}", details={"url": url})
        
        if not response.is_success:
            raise TransferError(
                f"Failed to download {url}: HTTP {response.status_code} {response.reason_phrase}",
                details={"url": url, "status": response.status_code}
            )
        return response.content
    
    async def put(
        self,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False
    ) -> str:
        headers = {
            **self._auth_headers(),
            "content-type": content_type,
            "cache-control": f"max-age={self.config.cache_control}",
            "x-upsert": "true" if upsert else "false",
        }
        
        try:
            response = await self._client.post(self.upload_url(path), content=data, headers=headers)
        except httpx.HTTPError as e:
            raise TransferError(f"Failed to upload {path}: {e}", details={"path": path})
        
        if not response.is_success:
            code = "ObjectExists" if _is_duplicate(response) else None
            raise TransferError(
                f"Failed to upload {path}: HTTP {response.status_code} {_error_message(response)}",
                code=code,
                details={"path": path, "status": response.status_code}
            )
        
        logger.debug(f"Uploaded {len(data)} bytes to {path}")
        return self.public_url(path)
    
    async def head(self, url: str) -> int:
        try:
            response = await self._client.head(url)
        except httpx.HTTPError as e:
            raise TransferError(f"HEAD request failed for {url}: {e}", details={"url": url})
        return response.status_code
    
    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


def _is_duplicate(response: httpx.Response) -> bool:
    if response.status_code == 409:
        return True
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and (
        str(body.get("statusCode")) == "409" or body.get("error") == "Duplicate"
    )
