"""Background sweep of expired cache entries and idle rate-limit windows.

Reads already evict expired cache entries, but keys that are never read
again would otherwise stay in memory for the life of the process.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import FastAPI

from insight_engine.adapters.rate_limit.base import AbstractRateLimiter
from insight_engine.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)


def sweep_once(cache: SimpleTTLCache, limiter: AbstractRateLimiter | None) -> dict[str, int]:
    """Run one sweep and return how many cache entries and limiter keys went away."""

    removed = {
        "cache_entries": cache.sweep(),
        "rate_limit_keys": limiter.sweep() if limiter is not None else 0,
    }
    logger.info("sweep.completed", extra=removed)
    return removed


async def run_sweep_loop(
    cache: SimpleTTLCache,
    limiter: AbstractRateLimiter | None,
    interval_s: float,
) -> None:
    """Sweep every ``interval_s`` seconds until cancelled.

    A failing sweep is logged and retried on the next tick.
    """
    while True:
        try:
            await asyncio.sleep(interval_s)
        except asyncio.CancelledError:
            logger.info("sweep.cancelled")
            break
        try:
            sweep_once(cache, limiter)
        except Exception:
            logger.exception("sweep.failed")


def start_sweeper(
    app: FastAPI,
    cache: SimpleTTLCache,
    limiter: AbstractRateLimiter | None,
    interval_s: float,
) -> None:
    task = asyncio.create_task(run_sweep_loop(cache, limiter, interval_s))
    app.state.sweep_task = task
    logger.info("sweep.started", extra={"interval_s": interval_s})


async def stop_sweeper(app: FastAPI) -> None:
    task: Any = getattr(app.state, "sweep_task", None)
    if task is None:
        return
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    app.state.sweep_task = None
