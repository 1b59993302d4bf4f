"""Periodic completion sweep, started from the application lifespan."""

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.services.booking_service import sweep_completions

logger = logging.getLogger(__name__)


async def run_sweep_once(session_factory: Callable[[], AsyncSession]) -> int:
    """Run one sweep in its own transaction and return how many bookings it completed."""
    async with session_factory() as session:
        async with session.begin():
            completed = await sweep_completions(session)
    return len(completed)


async def completion_sweeper(session_factory: Callable[[], AsyncSession], interval_seconds: float) -> None:
    """Sweep every ``interval_seconds`` until cancelled.

    A failed run is logged and retried on the next tick; the lazy sweep on
    booking reads keeps results correct in the meantime.
    """
    logger.info("Completion sweeper started (interval=%ss)", interval_seconds)
    try:
        while True:
            try:
                count = await run_sweep_once(session_factory)
                if count:
                    logger.info("Background sweep completed %d booking(s)", count)
            except Exception:
                logger.exception("Background completion sweep failed")
            await asyncio.sleep(interval_seconds)
    finally:
        logger.info("Completion sweeper stopped")
