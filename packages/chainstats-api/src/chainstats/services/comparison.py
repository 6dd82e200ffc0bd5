"""Comparison window engine — "now" versus "one window ago".

This module is the single place that decides which snapshot stands for
"yesterday". The compare point is the earliest snapshot at or after
``now - window``: the first one that has crossed into the lookback
window. That choice is stable when snapshots are irregularly spaced.
"""

import logging
from bisect import bisect_left
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chainstats.errors import InsufficientHistory
from chainstats.models.block import Block
from chainstats.services.metrics import Metric, resolve_metric

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)

T = TypeVar("T")


@dataclass(frozen=True)
class ComparisonWindow:
    """The latest block and the blocks one and two windows before it.

    ``compare_48h`` is None when the store does not reach two windows
    back yet; the compare-side daily changes are then unknown.
    """

    now: Block
    compare_24h: Block
    compare_48h: Block | None

    def dashboard(self) -> dict:
        """Return ``{"now": {...}, "compare": {...}}`` for every metric."""
        return {
            "now": snapshot_fields(self.now, self.compare_24h),
            "compare": snapshot_fields(self.compare_24h, self.compare_48h),
        }


def snapshot_fields(block: Block, previous: Block | None) -> dict:
    """Dashboard fields of ``block``; daily changes are measured from ``previous``."""
    fields: dict[str, Any] = {"date": block.timestamp, "height": block.height}
    for metric in Metric:
        resolution = resolve_metric(metric)
        if resolution.is_relative:
            fields[metric.value] = (
                resolution.change(previous, block) if previous is not None else None
            )
        else:
            fields[metric.value] = resolution.value(block)
    return fields


async def _latest_block(db: AsyncSession, at: datetime | None) -> Block | None:
    stmt = select(Block).where(Block.is_processed.is_(True))
    if at is not None:
        stmt = stmt.where(Block.timestamp <= at)
    stmt = stmt.order_by(Block.height.desc()).limit(1)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _earliest_since(db: AsyncSession, boundary: datetime, now: Block) -> Block | None:
    # Bounded by ``now`` so a block indexed mid-request can never be newer than it
    stmt = (
        select(Block)
        .where(Block.is_processed.is_(True))
        .where(Block.timestamp >= boundary)
        .where(Block.height <= now.height)
        .order_by(Block.timestamp.asc(), Block.height.asc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _reaches_back_to(db: AsyncSession, boundary: datetime) -> bool:
    stmt = (
        select(Block.height)
        .where(Block.is_processed.is_(True))
        .where(Block.timestamp <= boundary)
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


async def compute_comparison(
    db: AsyncSession,
    at: datetime | None = None,
    window: timedelta = DEFAULT_WINDOW,
) -> ComparisonWindow:
    """Locate the now / one-window / two-window blocks.

    ``at`` pins "now" to the latest processed block at or before that
    time; by default the latest processed block is used. All lookups run
    on the caller's session so they share one transaction.

    Raises InsufficientHistory when the store is empty or does not yet
    reach one full window back from "now".
    """
    now = await _latest_block(db, at)
    if now is None:
        raise InsufficientHistory("No processed blocks yet")

    boundary_24h = now.timestamp - window
    if not await _reaches_back_to(db, boundary_24h):
        raise InsufficientHistory(
            f"History does not reach {window} back from block {now.height} yet"
        )

    compare_24h = await _earliest_since(db, boundary_24h, now)
    if compare_24h is None or compare_24h.height == now.height:
        raise InsufficientHistory(f"No block to compare block {now.height} against yet")

    boundary_48h = now.timestamp - 2 * window
    compare_48h = None
    if await _reaches_back_to(db, boundary_48h):
        compare_48h = await _earliest_since(db, boundary_48h, now)
    else:
        logger.debug("History does not reach %s back from block %s", 2 * window, now.height)

    return ComparisonWindow(now=now, compare_24h=compare_24h, compare_48h=compare_48h)


def select_compare_point(
    points: Sequence[T],
    key: Callable[[T], Any],
    window: timedelta = timedelta(days=1),
) -> T:
    """Earliest point at or after ``latest - window`` in an ascending series.

    Day-granular series (provider capacity, provider leases) use this in
    place of a fixed "second-to-last element" convention.
    """
    if len(points) < 2:
        raise InsufficientHistory("Need at least two points to compare")

    keys = [key(p) for p in points]
    boundary = keys[-1] - window
    if keys[0] > boundary:
        raise InsufficientHistory(f"Series does not reach {window} back yet")

    index = bisect_left(keys, boundary)
    if index == len(points) - 1:
        raise InsufficientHistory("No point to compare the latest one against")
    return points[index]
