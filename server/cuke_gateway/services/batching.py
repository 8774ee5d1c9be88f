"""Bounded-batch execution for bulk operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_PAUSE = 0.1


async def run_in_batches(
    items: list[str],
    worker: Callable[[str], Awaitable[Any]],
    batch_size: int = DEFAULT_BATCH_SIZE,
    pause: float = DEFAULT_BATCH_PAUSE,
) -> dict:
    """Run ``worker`` over ``items`` at most ``batch_size`` at a time.

    A failing item is recorded in ``errors`` and never cancels its siblings.

    Returns:
        {"results": [{"item", "result"}], "errors": [{"item", "error"}],
         "summary": {"total", "successful", "failed"}}
    """
    results: list[dict] = []
    errors: list[dict] = []
    batch_size = max(1, batch_size)

    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        outcomes = await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True)
        for item, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                errors.append({"item": item, "error": str(outcome) or type(outcome).__name__})
                logger.warning("Bulk operation failed for %s: %s", item, outcome)
            else:
                results.append({"item": item, "result": outcome})
        if start + batch_size < len(items):
            await asyncio.sleep(pause)

    successful = sum(1 for r in results if isinstance(r["result"], dict) and r["result"].get("success"))
    return {
        "results": results,
        "errors": errors,
        "summary": {"total": len(items), "successful": successful, "failed": len(errors)},
    }
