"""Provider statistics — daily capacity aggregate and per-provider leases.

The capacity aggregate scans every provider snapshot for every day, so it
is served through the CacheCoordinator with single-flight enabled.
"""

import logging
from collections.abc import Callable
from datetime import timedelta
from operator import itemgetter

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chainstats.errors import InsufficientHistory
from chainstats.models.day import Day
from chainstats.models.lease import Lease
from chainstats.models.provider_snapshot import ProviderSnapshot
from chainstats.services.cache import CacheCoordinator
from chainstats.services.comparison import select_compare_point
from chainstats.services.metrics import ProviderMetric, resolve_provider_metric

logger = logging.getLogger(__name__)

PROVIDER_GRAPH_CACHE_KEY = "provider_graph_data"

_CAPACITY_RESOURCES = ("cpu", "gpu", "memory", "storage")


def _daily_provider_stats_query():
    """Sum capacity of online providers per day.

    A provider probed several times in a day only counts with its latest
    probe of that day; that probe decides whether it was online.
    """
    check_day = func.date(ProviderSnapshot.check_date)
    daily = select(
        ProviderSnapshot,
        check_day.label("date"),
        func.row_number()
        .over(
            partition_by=(ProviderSnapshot.owner, check_day),
            order_by=ProviderSnapshot.check_date.desc(),
        )
        .label("sample_rank"),
    ).subquery("daily_provider_stats")

    capacity = [
        (
            func.sum(daily.c[f"active_{resource}"])
            + func.sum(daily.c[f"pending_{resource}"])
            + func.sum(daily.c[f"available_{resource}"])
        ).label(resource)
        for resource in _CAPACITY_RESOURCES
    ]

    return (
        select(Day.date, *capacity, func.count().label("provider_count"))
        .select_from(Day)
        .join(
            daily,
            and_(
                Day.date == daily.c.date,
                daily.c.sample_rank == 1,
                daily.c.is_online.is_(True),
            ),
        )
        .group_by(Day.date)
        .order_by(Day.date.asc())
    )


async def compute_daily_provider_stats(
    session_factory: Callable[[], AsyncSession],
) -> list[dict]:
    """Run the capacity aggregate on a session of its own."""
    async with session_factory() as session:
        result = await session.execute(_daily_provider_stats_query())
        rows = result.all()

    # SUM over bigint comes back as Decimal on PostgreSQL
    return [
        {
            "date": row.date,
            "count": int(row.provider_count),
            **{resource: int(getattr(row, resource)) for resource in _CAPACITY_RESOURCES},
        }
        for row in rows
    ]


def _capacity(row: dict) -> dict:
    return {metric.value: row[metric.value] for metric in ProviderMetric}


async def get_provider_series(
    cache: CacheCoordinator,
    session_factory: Callable[[], AsyncSession],
    metric: str | ProviderMetric,
    ttl_seconds: float = 300,
) -> dict:
    """Capacity series for one provider metric, with now/compare breakdowns."""
    metric = resolve_provider_metric(metric)
    logger.debug("Provider graph data requested for %s", metric.value)

    rows = await cache.get_or_compute(
        PROVIDER_GRAPH_CACHE_KEY,
        ttl_seconds,
        lambda: compute_daily_provider_stats(session_factory),
        single_flight=True,
    )
    if not rows:
        raise InsufficientHistory("No online provider snapshots yet")

    current = rows[-1]
    compare = select_compare_point(rows, key=itemgetter("date"), window=timedelta(days=1))

    return {
        "current_value": current[metric.value],
        "compare_value": compare[metric.value],
        "snapshots": [{"date": row["date"], "value": row[metric.value]} for row in rows],
        "now": _capacity(current),
        "compare": _capacity(compare),
    }


async def get_provider_active_leases_series(db: AsyncSession, provider_address: str) -> dict:
    """Leases active for one provider at the last block seen each day.

    Days where the provider had no active lease count as zero.
    """
    logger.debug("Active lease graph data requested for %s", provider_address)

    horizon = Day.last_block_height_yet
    stmt = (
        select(Day.date, func.count(Lease.id).label("lease_count"))
        .select_from(Day)
        .outerjoin(
            Lease,
            and_(
                Lease.provider_address == provider_address,
                Lease.created_height <= horizon,
                or_(Lease.closed_height.is_(None), Lease.closed_height > horizon),
                or_(
                    Lease.predicted_closed_height.is_(None),
                    Lease.predicted_closed_height > horizon,
                ),
            ),
        )
        .group_by(Day.date)
        .order_by(Day.date.asc())
    )
    result = await db.execute(stmt)
    rows = result.all()
    if not rows:
        raise InsufficientHistory("No days recorded yet")

    current = rows[-1]
    compare = select_compare_point(rows, key=lambda row: row.date, window=timedelta(days=1))

    return {
        "current_value": current.lease_count,
        "compare_value": compare.lease_count,
        "snapshots": [{"date": row.date, "value": row.lease_count} for row in rows],
        "now": {"count": current.lease_count},
        "compare": {"count": compare.lease_count},
    }
