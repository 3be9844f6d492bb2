"""
Persistence gateways for AR codes.

The lifecycle manager treats every gateway call as best-effort: one attempt,
one recorded outcome. Gateways signal failure by raising PersistenceError.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

import httpx

from ..errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0  # seconds


class PersistenceGateway(Protocol):
    """Remote store for AR code records."""

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Store a record; returns at least ``{"id", "status"}``."""
        ...

    async def update_status(self, record_id: str, status: str) -> None:
        ...


class InMemoryPersistenceGateway:
    """Process-local store; toggle ``available`` to simulate an outage."""

    def __init__(self, available: bool = True):
        self.available = available
        self.records: Dict[str, Dict[str, Any]] = {}
        self.create_calls = 0
        self.update_calls = 0

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.create_calls += 1
        if not self.available:
            raise PersistenceError("unavailable", "In-memory store is offline")
        record_id = uuid.uuid4().hex
        self.records[record_id] = {**record, "id": record_id}
        return {"id": record_id, "status": record.get("status")}

    async def update_status(self, record_id: str, status: str) -> None:
        self.update_calls += 1
        if not self.available:
            raise PersistenceError("unavailable", "In-memory store is offline")
        if record_id not in self.records:
            raise PersistenceError("rejected", f"Unknown record: {record_id}")
        self.records[record_id]["status"] = status


class HttpPersistenceGateway:
    """REST (PostgREST-style) store reached over httpx."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        table: str = "ar_qr_codes",
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the gateway.

        Args:
            base_url: Store base URL, e.g. https://<project>.supabase.co
            api_key: Optional API key sent as ``apikey`` and bearer token
            table: Table holding AR code rows
            timeout: Per-request timeout in seconds
            client: Optional preconfigured AsyncClient (tests, pooling)
        """
        headers = {"Content-Type": "application/json", "Prefer": "return=representation"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self.table_url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._client = client or httpx.AsyncClient(headers=headers, timeout=timeout)
        self._headers = headers

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._send("POST", self.table_url, json=record)
        data = response.json()
        row = data[0] if isinstance(data, list) and data else data
        if not isinstance(row, dict) or "id" not in row:
            raise PersistenceError("rejected", "Store response carried no record id")
        return {"id": str(row["id"]), "status": row.get("status", record.get("status"))}

    async def update_status(self, record_id: str, status: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        body: Dict[str, Any] = {"status": status, "updated_at": now}
        if status == "scanned":
            body["scanned_at"] = now
        await self._send(
            "PATCH", self.table_url, params={"id": f"eq.{record_id}"}, json=body
        )

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, headers=self._headers, **kwargs)
        except httpx.TimeoutException as e:
            raise PersistenceError("timeout", f"{method} {url} timed out") from e
        except httpx.HTTPError as e:
            raise PersistenceError("unavailable", f"{method} {url} failed: {e}") from e

        logger.debug(f"{method} {url} -> HTTP {response.status_code}")
        if response.status_code >= 400:
            raise PersistenceError(
                "rejected",
                f"{method} {url} returned HTTP {response.status_code}",
                {"status_code": response.status_code, "body": response.text[:200]},
            )
        return response

    async def aclose(self) -> None:
        await self._client.aclose()
