"""
Unit Tests for the Progress Aggregator
"""
import pytest

from school_eval.core.exceptions import IndicatorNotFoundError
from school_eval.models import Indicator, ProgressStatus
from school_eval.services.progress import (
    compute_indicator_progress,
    compute_standard_stats,
    recompute_indicator,
    round_half_up,
)

C = ProgressStatus.COMPLETED
P = ProgressStatus.IN_PROGRESS
N = ProgressStatus.NOT_STARTED


class TestRounding:
    """Test half-up rounding"""

    @pytest.mark.parametrize('value,expected', [(12.5, 13), (12.4999, 12), (0.5, 1), (66.66666, 67), (0, 0)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestIndicatorProgress:
    """Test progress/status derived from checklist statuses"""

    def test_half_completed(self):
        assert compute_indicator_progress([C, C, N, N]) == (50, P)

    def test_all_completed(self):
        assert compute_indicator_progress([C, C, C, C]) == (100, C)

    def test_no_items(self):
        assert compute_indicator_progress([]) == (0, N)

    def test_nothing_started(self):
        assert compute_indicator_progress([N, N, N]) == (0, N)

    def test_started_but_none_completed(self):
        assert compute_indicator_progress([P, N, N]) == (0, P)

    def test_one_of_eight_rounds_up(self):
        assert compute_indicator_progress([C] + [N] * 7) == (13, P)

    def test_accepts_raw_values(self):
        assert compute_indicator_progress(['COMPLETED', 'NOT_STARTED']) == (50, P)


class TestStandardStats:
    """Test standard-level summaries"""

    def test_stats(self):
        indicators = [
            Indicator(progress=0, status=N),
            Indicator(progress=50, status=P),
            Indicator(progress=100, status=C),
        ]

        stats = compute_standard_stats(indicators)

        assert stats.to_dict() == {'total': 3, 'completed': 1, 'avg_progress': 50}

    def test_empty(self):
        assert compute_standard_stats([]).to_dict() == {'total': 0, 'completed': 0, 'avg_progress': 0}

    def test_average_rounds_half_up(self):
        indicators = [Indicator(progress=50, status=P), Indicator(progress=25, status=P)]

        assert compute_standard_stats(indicators).avg_progress == 38


class TestRecomputeIndicator:
    """Test writing cached progress back to the indicator"""

    @pytest.mark.asyncio
    async def test_recompute(self, db_session, indicator, checklist_items):
        checklist_items[0].status = C
        checklist_items[1].status = C
        await db_session.flush()

        updated = await recompute_indicator(db_session, indicator.id)

        assert updated.progress == 50
        assert updated.status == P

    @pytest.mark.asyncio
    async def test_recompute_back_to_not_started(self, db_session, indicator, checklist_items):
        indicator.progress = 25
        indicator.status = P
        await db_session.flush()

        updated = await recompute_indicator(db_session, indicator.id)

        assert updated.progress == 0
        assert updated.status == N

    @pytest.mark.asyncio
    async def test_recompute_unknown(self, db_session):
        with pytest.raises(IndicatorNotFoundError):
            await recompute_indicator(db_session, 9999)
