"""Async HTTP client for the gateway's deletion endpoints."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from .batching import DEFAULT_BATCH_PAUSE, DEFAULT_BATCH_SIZE, run_in_batches

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10.0
HEALTH_TIMEOUT = 5.0


def filename_from_id(report_id: str) -> str:
    return report_id if report_id.endswith(".json") else f"{report_id}.json"


class DeletionClient:
    """Talks to a running gateway.

    A request that times out has an unknown outcome: the result is reported
    with ``"outcome": "unknown"`` rather than as success or failure, and the
    caller should re-read sync status before retrying.
    """

    def __init__(self, base_url: str = "http://localhost:3001", transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=REQUEST_TIMEOUT, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> DeletionClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning("%s %s timed out; outcome unknown", method, url)
            return {"success": False, "outcome": "unknown", "error": "Request timed out"}
        try:
            body = response.json()
        except ValueError:
            raise RuntimeError(f"Server responded with {response.status_code}: non-JSON body")
        if response.status_code >= 400 or not body.get("success", False):
            detail = body.get("detail") or body.get("error") or response.reason_phrase
            raise RuntimeError(f"Server responded with {response.status_code}: {detail}")
        return body

    async def delete_report(self, report_id: str, soft: bool | None = None) -> dict:
        params = {} if soft is None else {"soft": str(soft).lower()}
        return await self._request("DELETE", f"/api/reports/{quote(filename_from_id(report_id))}", params=params)

    async def restore_report(self, report_id: str) -> dict:
        return await self._request("POST", f"/api/reports/{quote(filename_from_id(report_id))}/restore")

    async def get_sync_status(self) -> dict:
        return (await self._request("GET", "/api/sync/status"))["syncStatus"]

    async def get_deleted_reports(self) -> list[dict]:
        return (await self._request("GET", "/api/reports/deleted"))["deletedReports"]

    async def test_connection(self) -> bool:
        try:
            response = await self._client.get("/api/health", timeout=HEALTH_TIMEOUT)
        except httpx.HTTPError as exc:
            logger.warning("Server connectivity test failed: %s", exc)
            return False
        return response.is_success

    async def delete_multiple(
        self,
        report_ids: list[str],
        soft: bool | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pause: float = DEFAULT_BATCH_PAUSE,
    ) -> dict:
        """Delete many reports in bounded batches; one failure never stops the rest."""
        outcome = await run_in_batches(
            report_ids,
            lambda report_id: self.delete_report(report_id, soft=soft),
            batch_size=batch_size,
            pause=pause,
        )
        outcome["success"] = True
        return outcome
