"""Metric registry — maps dashboard metric keys to block columns.

Each metric in the closed set resolves to the block columns it reads,
whether it is reported as a day-over-day change of a cumulative counter,
and how the columns combine into one value. The registry is checked when
the module is imported so a metric without a valid resolution fails at
startup instead of on the first request.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from operator import attrgetter
from typing import Any

from chainstats.errors import UnknownMetric
from chainstats.models.block import Block
from chainstats.services.deltas import change

CUMULATIVE_COLUMNS = frozenset({"total_lease_count", "total_uakt_spent"})


class Metric(str, Enum):
    """Block-level metrics served by the dashboard and graph endpoints."""

    ACTIVE_LEASE_COUNT = "active_lease_count"
    TOTAL_LEASE_COUNT = "total_lease_count"
    DAILY_LEASE_COUNT = "daily_lease_count"
    TOTAL_UAKT_SPENT = "total_uakt_spent"
    DAILY_UAKT_SPENT = "daily_uakt_spent"
    ACTIVE_CPU = "active_cpu"
    ACTIVE_GPU = "active_gpu"
    ACTIVE_MEMORY = "active_memory"
    ACTIVE_STORAGE = "active_storage"


class ProviderMetric(str, Enum):
    """Daily provider capacity aggregates (active + pending + available)."""

    COUNT = "count"
    CPU = "cpu"
    GPU = "gpu"
    MEMORY = "memory"
    STORAGE = "storage"


def _sum_of(*columns: str) -> Callable[[Any], int]:
    def combine(row: Any) -> int:
        return sum(getattr(row, column) for column in columns)

    return combine


@dataclass(frozen=True)
class MetricResolution:
    metric: Metric
    source_columns: tuple[str, ...]
    is_relative: bool = False
    combine: Callable[[Any], int] = field(default=None, compare=False)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.combine is None:
            object.__setattr__(self, "combine", attrgetter(self.source_columns[0]))

    def value(self, row: Any) -> int:
        """Combine the source columns of one block (or selected row)."""
        return self.combine(row)

    def change(self, earlier: Any, later: Any) -> int:
        """Change of the combined value between two blocks."""
        return change(self.value(earlier), self.value(later), "+".join(self.source_columns))


_SPECIAL_CASES: dict[Metric, MetricResolution] = {
    Metric.DAILY_UAKT_SPENT: MetricResolution(
        Metric.DAILY_UAKT_SPENT, ("total_uakt_spent",), is_relative=True
    ),
    Metric.DAILY_LEASE_COUNT: MetricResolution(
        Metric.DAILY_LEASE_COUNT, ("total_lease_count",), is_relative=True
    ),
    Metric.ACTIVE_STORAGE: MetricResolution(
        Metric.ACTIVE_STORAGE,
        ("active_ephemeral_storage", "active_persistent_storage"),
        combine=_sum_of("active_ephemeral_storage", "active_persistent_storage"),
    ),
}


def _build_registry() -> dict[Metric, MetricResolution]:
    registry = {}
    block_columns = set(Block.__table__.columns.keys())

    for metric in Metric:
        resolution = _SPECIAL_CASES.get(metric) or MetricResolution(metric, (metric.value,))

        missing = [c for c in resolution.source_columns if c not in block_columns]
        if missing:
            raise RuntimeError(f"Metric {metric.value} reads unknown block columns: {missing}")

        # Deltas of a gauge are meaningless
        if resolution.is_relative and not set(resolution.source_columns) <= CUMULATIVE_COLUMNS:
            raise RuntimeError(f"Metric {metric.value} is relative over a non-cumulative column")

        registry[metric] = resolution
    return registry


REGISTRY: dict[Metric, MetricResolution] = _build_registry()


def resolve_metric(key: str | Metric) -> MetricResolution:
    """Return the resolution for a metric key.

    Raises UnknownMetric when the key is not in the closed set.
    """
    try:
        metric = Metric(key)
    except ValueError:
        raise UnknownMetric(str(key), [m.value for m in Metric]) from None
    return REGISTRY[metric]


def resolve_provider_metric(key: str | ProviderMetric) -> ProviderMetric:
    """Validate a provider capacity metric key."""
    try:
        return ProviderMetric(key)
    except ValueError:
        raise UnknownMetric(str(key), [m.value for m in ProviderMetric]) from None
