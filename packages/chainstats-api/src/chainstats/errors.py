"""Exception hierarchy for statistics lookups.

Every failure is typed so callers can tell "no data yet" apart from a real
zero, which is a valid value for every counter served here.
"""


class StatsError(Exception):
    """Base exception for all statistics errors."""


class UnknownMetric(StatsError):
    """Requested metric key is not part of the closed metric set."""

    def __init__(self, key: str, known: list[str] | None = None):
        message = f"Unknown metric '{key}'"
        if known:
            message += f". Use one of: {', '.join(known)}"
        super().__init__(message)
        self.key = key
        self.known = known or []


class InsufficientHistory(StatsError):
    """Not enough snapshots yet to satisfy the requested lookback."""


class NonMonotonicCounter(InsufficientHistory):
    """A cumulative counter decreased between two consecutive snapshots."""

    def __init__(self, column: str, earlier: int, later: int):
        super().__init__(
            f"Cumulative counter '{column}' went backwards ({earlier} -> {later})"
        )
        self.column = column
        self.earlier = earlier
        self.later = later


class ComputeFailure(StatsError):
    """An aggregate query or store read failed while computing a value."""

    def __init__(self, key: str, message: str | None = None):
        super().__init__(message or f"Computation for '{key}' failed")
        self.key = key
