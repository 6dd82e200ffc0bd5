"""Convert cumulative counter series into per-period changes."""

from collections.abc import Sequence
from typing import TYPE_CHECKING

from chainstats.errors import NonMonotonicCounter

if TYPE_CHECKING:
    from chainstats.services.metrics import MetricResolution


def change(earlier: int, later: int, column: str = "value") -> int:
    """Return ``later - earlier`` for a cumulative counter.

    A negative result means the counter went backwards, which is a data
    integrity problem and is raised rather than clamped to zero.
    """
    if later < earlier:
        raise NonMonotonicCounter(column, earlier, later)
    return later - earlier


def to_deltas(values: Sequence[int], column: str = "value") -> list[int]:
    """Per-period deltas of an ascending cumulative series.

    The first element has no prior point and is always 0, so the output
    has the same length as the input.
    """
    deltas = []
    for index, value in enumerate(values):
        deltas.append(0 if index == 0 else change(values[index - 1], value, column))
    return deltas


def apply_relative(points: list[dict], resolution: "MetricResolution") -> list[dict]:
    """Replace the values of ``{date, value}`` points with their deltas.

    Only valid for metrics resolved as relative to a cumulative counter.
    """
    if not resolution.is_relative:
        raise ValueError(
            f"Metric {resolution.metric.value} is not relative; deltas would be meaningless"
        )

    deltas = to_deltas([p["value"] for p in points], "+".join(resolution.source_columns))
    return [{"date": p["date"], "value": d} for p, d in zip(points, deltas)]
