"""Tests for the async deletion client against a mocked transport."""

import asyncio

import httpx
import pytest

from cuke_gateway.services.batching import run_in_batches
from cuke_gateway.services.deletion_client import DeletionClient, filename_from_id


def _client(handler):
    return DeletionClient("http://gateway.test", transport=httpx.MockTransport(handler))


def test_filename_from_id():
    assert filename_from_id("report-1") == "report-1.json"
    assert filename_from_id("report-1.json") == "report-1.json"


def test_delete_report_sends_selector():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "deletionType": "soft"})

    async def run():
        async with _client(handler) as client:
            return await client.delete_report("r1", soft=True)

    result = asyncio.run(run())

    assert result["deletionType"] == "soft"
    assert seen[0].method == "DELETE"
    assert seen[0].url.path == "/api/reports/r1.json"
    assert seen[0].url.params["soft"] == "true"


def test_timeout_is_unknown_outcome():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    async def run():
        async with _client(handler) as client:
            return await client.delete_report("r1")

    result = asyncio.run(run())
    assert result["success"] is False
    assert result["outcome"] == "unknown"


def test_error_response_raises():
    def handler(request):
        return httpx.Response(404, json={"detail": "Report file not found: r1.json"})

    async def run():
        async with _client(handler) as client:
            await client.delete_report("r1", soft=False)

    with pytest.raises(RuntimeError, match="404"):
        asyncio.run(run())


def test_status_and_deleted_list():
    def handler(request):
        if request.url.path == "/api/sync/status":
            return httpx.Response(200, json={"success": True, "syncStatus": {"softDeleted": 2}})
        return httpx.Response(200, json={"success": True, "deletedReports": [{"filename": "a.json"}]})

    async def run():
        async with _client(handler) as client:
            return await client.get_sync_status(), await client.get_deleted_reports()

    status, deleted = asyncio.run(run())
    assert status == {"softDeleted": 2}
    assert deleted == [{"filename": "a.json"}]


def test_connection_check():
    def healthy(request):
        return httpx.Response(200, json={"success": True})

    def down(request):
        raise httpx.ConnectError("refused", request=request)

    async def run(handler):
        async with _client(handler) as client:
            return await client.test_connection()

    assert asyncio.run(run(healthy)) is True
    assert asyncio.run(run(down)) is False


def test_delete_multiple_collects_partial_failures():
    def handler(request):
        name = request.url.path.rsplit("/", 1)[-1]
        if name == "bad.json":
            return httpx.Response(404, json={"detail": "missing"})
        return httpx.Response(200, json={"success": True, "filename": name})

    async def run():
        async with _client(handler) as client:
            return await client.delete_multiple(["a", "bad", "c"], soft=True, pause=0)

    result = asyncio.run(run())

    assert result["summary"] == {"total": 3, "successful": 2, "failed": 1}
    assert result["errors"][0]["item"] == "bad"
    assert [r["item"] for r in result["results"]] == ["a", "c"]


def test_batches_never_exceed_limit():
    in_flight = 0
    peak = 0

    async def worker(item):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0)
        in_flight -= 1
        return {"success": True}

    result = asyncio.run(run_in_batches([str(i) for i in range(12)], worker, batch_size=5, pause=0))

    assert peak == 5
    assert result["summary"]["successful"] == 12
