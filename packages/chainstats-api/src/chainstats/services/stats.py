"""Block statistics — dashboard comparison and per-metric day series."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chainstats.errors import InsufficientHistory
from chainstats.models.block import Block
from chainstats.models.day import Day
from chainstats.services.comparison import compute_comparison
from chainstats.services.deltas import apply_relative
from chainstats.services.metrics import Metric, resolve_metric

logger = logging.getLogger(__name__)


async def get_dashboard_data(
    db: AsyncSession,
    at: datetime | None = None,
    window_hours: int = 24,
) -> dict:
    """Return the ``{now, compare}`` dashboard view."""
    window = await compute_comparison(db, at=at, window=timedelta(hours=window_hours))
    return window.dashboard()


async def get_series(
    db: AsyncSession,
    metric: str | Metric,
    window_hours: int = 24,
) -> dict:
    """Day-by-day series of one block metric.

    Each day is represented by its final block. Relative metrics are
    turned into day-over-day deltas. Current and compare values come from
    the dashboard comparison, not from the tail of the series.
    """
    resolution = resolve_metric(metric)
    key = resolution.metric.value
    logger.debug("Graph data requested for %s", key)

    columns = [Block.__table__.c[column] for column in resolution.source_columns]
    stmt = (
        select(Day.date, *columns)
        .join(Block, Block.height == Day.last_block_height)
        .order_by(Day.date.asc())
    )
    result = await db.execute(stmt)
    rows = result.all()
    if not rows:
        raise InsufficientHistory("No closed days yet")

    snapshots = [{"date": row.date, "value": resolution.value(row)} for row in rows]
    if resolution.is_relative:
        snapshots = apply_relative(snapshots, resolution)

    dashboard = await get_dashboard_data(db, window_hours=window_hours)

    return {
        "current_value": dashboard["now"][key],
        "compare_value": dashboard["compare"][key],
        "snapshots": snapshots,
    }
