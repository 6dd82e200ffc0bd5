"""Tests for the comparison window engine."""

from datetime import date, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chainstats.errors import InsufficientHistory, NonMonotonicCounter
from chainstats.services.comparison import compute_comparison, select_compare_point

HOUR = timedelta(hours=1)


class TestComputeComparison:
    @pytest.mark.asyncio
    async def test_empty_store_raises(self, db_session: AsyncSession):
        with pytest.raises(InsufficientHistory):
            await compute_comparison(db_session)

    @pytest.mark.asyncio
    async def test_single_block_raises(self, db_session, add_blocks, block, t0):
        await add_blocks([block(1, t0)])
        with pytest.raises(InsufficientHistory):
            await compute_comparison(db_session)

    @pytest.mark.asyncio
    async def test_history_shorter_than_window_raises(self, db_session, add_blocks, block, t0):
        await add_blocks([block(1, t0), block(2, t0 + 6 * HOUR), block(3, t0 + 12 * HOUR)])
        with pytest.raises(InsufficientHistory):
            await compute_comparison(db_session)

    @pytest.mark.asyncio
    async def test_picks_earliest_block_at_or_after_boundary(
        self, db_session, add_blocks, block, t0
    ):
        # Irregular spacing: 10h, 20h, 30h, 47h, 49h, 60h, 72h
        offsets = [0, 10, 20, 30, 47, 49, 60, 72]
        await add_blocks([block(i + 1, t0 + h * HOUR) for i, h in enumerate(offsets)])

        window = await compute_comparison(db_session)

        assert window.now.height == 8  # 72h
        assert window.compare_24h.height == 6  # 49h is the first >= 48h
        assert window.compare_48h.height == 4  # 30h is the first >= 24h

    @pytest.mark.asyncio
    async def test_compare_is_minimal_block_not_before_boundary(
        self, db_session, add_blocks, block, t0
    ):
        offsets = [0, 5, 23, 24, 25, 48]
        await add_blocks([block(i + 1, t0 + h * HOUR) for i, h in enumerate(offsets)])

        window = await compute_comparison(db_session)
        boundary = window.now.timestamp - timedelta(hours=24)

        assert window.compare_24h.timestamp >= boundary
        assert window.compare_24h.height == 4  # exactly on the boundary

    @pytest.mark.asyncio
    async def test_unprocessed_blocks_are_ignored(self, db_session, add_blocks, block, t0):
        await add_blocks(
            [
                block(1, t0),
                block(2, t0 + 24 * HOUR),
                block(3, t0 + 30 * HOUR, is_processed=False),
            ]
        )
        window = await compute_comparison(db_session)
        assert window.now.height == 2
        assert window.compare_24h.height == 1

    @pytest.mark.asyncio
    async def test_at_pins_now(self, db_session, add_blocks, block, t0):
        await add_blocks([block(1, t0), block(2, t0 + 24 * HOUR), block(3, t0 + 48 * HOUR)])
        window = await compute_comparison(db_session, at=t0 + 30 * HOUR)
        assert window.now.height == 2
        assert window.compare_24h.height == 1

    @pytest.mark.asyncio
    async def test_custom_window(self, db_session, add_blocks, block, t0):
        await add_blocks([block(i + 1, t0 + i * HOUR) for i in range(13)])
        window = await compute_comparison(db_session, window=timedelta(hours=6))
        assert window.now.height == 13  # 12h
        assert window.compare_24h.height == 7  # 6h
        assert window.compare_48h.height == 1  # 0h

    @pytest.mark.asyncio
    async def test_compare_48h_missing_when_history_too_short(
        self, db_session, add_blocks, block, t0
    ):
        await add_blocks([block(1, t0), block(2, t0 + 24 * HOUR)])
        window = await compute_comparison(db_session)
        assert window.compare_24h.height == 1
        assert window.compare_48h is None


class TestDashboard:
    @pytest.mark.asyncio
    async def test_daily_changes_and_composite_storage(self, db_session, add_blocks, block, t0):
        await add_blocks(
            [
                block(1, t0, total_lease_count=10, total_uakt_spent=1_000),
                block(2, t0 + 24 * HOUR, total_lease_count=40, total_uakt_spent=4_000),
                block(
                    3,
                    t0 + 48 * HOUR,
                    total_lease_count=100,
                    total_uakt_spent=9_000,
                    active_lease_count=12,
                    active_cpu=256,
                    active_ephemeral_storage=30,
                    active_persistent_storage=70,
                ),
            ]
        )
        dashboard = (await compute_comparison(db_session)).dashboard()

        now, compare = dashboard["now"], dashboard["compare"]
        assert now["height"] == 3
        assert now["daily_lease_count"] == 60
        assert now["daily_uakt_spent"] == 5_000
        assert now["active_storage"] == 100
        assert now["active_cpu"] == 256
        assert now["active_lease_count"] == 12
        assert compare["height"] == 2
        assert compare["daily_lease_count"] == 30
        assert compare["daily_uakt_spent"] == 3_000

    @pytest.mark.asyncio
    async def test_daily_lease_count_before_regression(self, db_session, add_blocks, block, t0):
        await add_blocks(
            [
                block(1, t0, total_lease_count=100),
                block(2, t0 + 24 * HOUR, total_lease_count=150),
                block(3, t0 + 48 * HOUR, total_lease_count=120),
            ]
        )

        dashboard = (await compute_comparison(db_session, at=t0 + 24 * HOUR)).dashboard()
        assert dashboard["now"]["daily_lease_count"] == 50
        assert dashboard["compare"]["daily_lease_count"] is None

        # The regression at 48h is reported, never turned into a negative delta
        with pytest.raises(NonMonotonicCounter):
            (await compute_comparison(db_session)).dashboard()


class TestSelectComparePoint:
    def test_previous_day(self):
        points = [date(2026, 3, d) for d in (1, 2, 3)]
        assert select_compare_point(points, key=lambda d: d) == date(2026, 3, 2)

    def test_skips_to_first_point_inside_window_after_gap(self):
        points = [date(2026, 3, 1), date(2026, 3, 5), date(2026, 3, 6)]
        assert select_compare_point(points, key=lambda d: d) == date(2026, 3, 5)

    def test_single_point_raises(self):
        with pytest.raises(InsufficientHistory):
            select_compare_point([date(2026, 3, 1)], key=lambda d: d)

    def test_gap_larger_than_window_raises(self):
        points = [date(2026, 3, 1), date(2026, 3, 3)]
        with pytest.raises(InsufficientHistory):
            select_compare_point(points, key=lambda d: d)

    def test_uses_key(self):
        rows = [{"date": date(2026, 3, 1), "cpu": 1}, {"date": date(2026, 3, 2), "cpu": 2}]
        assert select_compare_point(rows, key=lambda r: r["date"])["cpu"] == 1
