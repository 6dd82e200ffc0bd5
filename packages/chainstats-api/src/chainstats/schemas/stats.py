"""Schemas for statistics endpoints."""

from datetime import date, datetime

from pydantic import BaseModel


class DashboardSnapshot(BaseModel):
    """Dashboard fields at one block.

    Daily changes are null when the history does not reach far enough
    back to measure them.
    """

    date: datetime
    height: int
    active_lease_count: int
    total_lease_count: int
    daily_lease_count: int | None = None
    total_uakt_spent: int
    daily_uakt_spent: int | None = None
    active_cpu: int
    active_gpu: int
    active_memory: int
    active_storage: int


class DashboardResponse(BaseModel):
    """Response for GET /v1/stats/dashboard."""

    now: DashboardSnapshot
    compare: DashboardSnapshot


class SeriesPoint(BaseModel):
    date: date
    value: int


class MetricSeriesResponse(BaseModel):
    """Response for GET /v1/stats/graph/{metric}."""

    current_value: int | None = None
    compare_value: int | None = None
    snapshots: list[SeriesPoint]


class ProviderCapacity(BaseModel):
    """Summed capacity of online providers on one day."""

    count: int
    cpu: int
    gpu: int
    memory: int
    storage: int


class ProviderSeriesResponse(MetricSeriesResponse):
    """Response for GET /v1/stats/providers/graph/{metric}."""

    now: ProviderCapacity
    compare: ProviderCapacity


class LeaseCount(BaseModel):
    count: int


class ProviderLeasesResponse(MetricSeriesResponse):
    """Response for GET /v1/stats/providers/{address}/active-leases."""

    now: LeaseCount
    compare: LeaseCount
