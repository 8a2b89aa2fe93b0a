"""
REST content store.

Reads and updates the customer's row in a PostgREST-style table API
({base}/rest/v1/<table>) with httpx.
"""

from typing import Any, Dict, List, Optional

import httpx

from site_backup.core.exceptions import ContentStoreError
from site_backup.models.backup import ContentRecord, MediaEntry
from site_backup.models.config import ContentStoreConfig
from site_backup.store.base import ContentStore
from site_backup.utils.logging import get_logger

logger = get_logger("store.rest")


class RestContentStore(ContentStore):
    """Content store backed by a PostgREST-compatible HTTP API."""
    
    def __init__(self, config: ContentStoreConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
    
    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["apikey"] = self.config.api_key
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _table_url(self, table: str) -> str:
        return f"{self.config.base_url}/rest/v1/{table}"

    async def _request(
        self,
        method: str,
        url: str,
        prefer: Optional[str] = None,
        **kwargs
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, url, headers=self._headers(prefer), **kwargs)
        except httpx.HTTPError as e:
            raise ContentStoreError(f"Content store request failed: {e}")
        
        if not response.is_success:
            raise ContentStoreError(
                f"Content store returned HTTP {response.status_code}: {response.text[:200]}",
                details={"status": response.status_code, "url": url}
            )
        return response
    
    async def get(self, customer_id: str) -> ContentRecord:
        response = await self._request(
            "GET",
            self._table_url(self.config.table),
            params={
                "select": "id,customer_id,domain,content",
                "customer_id": f"eq.{customer_id}",
            }
        )
        
        try:
            rows = response.json()
        except ValueError as e:
            raise ContentStoreError(f"Content store returned invalid JSON: {e}")
        
        if not isinstance(rows, list) or len(rows) != 1:
            count = len(rows) if isinstance(rows, list) else 0
            raise ContentStoreError(
                f"Expected exactly one website for customer {customer_id}, found {count}",
                details={"customer_id": customer_id}
            )
        
        row = rows[0]
        return ContentRecord(
            customer_id=row.get("customer_id") or customer_id,
            domain=row.get("domain") or None,
            content=row.get("content") or {}
        )
    
    async def put(self, customer_id: str, content: Any) -> None:
        response = await self._request(
            "PATCH",
            self._table_url(self.config.table),
            params={"customer_id": f"eq.{customer_id}"},
            json={"content": content},
            prefer="return=representation"
        )

        try:
            updated = response.json()
        except ValueError:
            updated = None
        if isinstance(updated, list) and not updated:
            raise ContentStoreError(
                f"No website found for customer {customer_id}",
                details={"customer_id": customer_id}
            )
        logger.info(f"Updated content for customer {customer_id}")
    
    async def record_media(self, entries: List[MediaEntry]) -> None:
        if not entries:
            return
        await self._request(
            "POST",
            self._table_url(self.config.media_table),
            json=[entry.model_dump() for entry in entries]
        )
    
    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
