"""
tests/test_streak_service.py — Daily Check-in Streak Tests
===========================================================
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from pawprint.database.models import ProgressStatus
from pawprint.services import progress_service, streak_service

DAY = date(2026, 3, 10)


@pytest.fixture
def engine(db_engine):
    return db_engine


class TestCheckIn:
    def test_first_check_in(self, engine, catalog):
        outcome = streak_service.check_in(engine, catalog, "u1", today=DAY)

        assert outcome.to_dict() == {
            "current_streak": 1,
            "longest_streak": 1,
            "is_new_day": True,
            "streak_maintained": True,
        }

    def test_same_day_is_noop(self, engine, catalog):
        streak_service.check_in(engine, catalog, "u1", today=DAY)
        outcome = streak_service.check_in(engine, catalog, "u1", today=DAY)

        assert outcome.is_new_day is False
        assert outcome.current_streak == 1
        assert streak_service.get_streak(engine, "u1", today=DAY).total_days_active == 1

    def test_consecutive_days_extend(self, engine, catalog):
        for offset in range(4):
            outcome = streak_service.check_in(
                engine, catalog, "u1", today=DAY + timedelta(days=offset),
            )

        assert outcome.current_streak == 4
        assert outcome.longest_streak == 4

    def test_gap_resets_but_keeps_longest(self, engine, catalog):
        streak_service.check_in(engine, catalog, "u1", today=DAY)
        streak_service.check_in(engine, catalog, "u1", today=DAY + timedelta(days=1))
        outcome = streak_service.check_in(engine, catalog, "u1", today=DAY + timedelta(days=4))

        assert outcome.current_streak == 1
        assert outcome.longest_streak == 2
        assert outcome.streak_maintained is False

    def test_check_ins_progress_streak_mission(self, engine, catalog):
        for offset in range(3):
            streak_service.check_in(engine, catalog, "u1", today=DAY + timedelta(days=offset))

        view = progress_service.get_mission_progress(engine, catalog, "u1", "streak_3")
        assert view.status == ProgressStatus.COMPLETE

    def test_same_day_repeat_does_not_count_twice(self, engine, catalog):
        streak_service.check_in(engine, catalog, "u1", today=DAY)
        streak_service.check_in(engine, catalog, "u1", today=DAY)

        view = progress_service.get_mission_progress(engine, catalog, "u1", "streak_3")
        assert view.current == 1


class TestGetStreak:
    def test_no_row(self, engine):
        view = streak_service.get_streak(engine, "ghost", today=DAY)
        assert view.current_streak == 0
        assert view.is_at_risk is False
        assert view.to_dict()["last_active_date"] is None

    def test_at_risk_until_today_checked_in(self, engine, catalog):
        streak_service.check_in(engine, catalog, "u1", today=DAY)

        tomorrow = streak_service.get_streak(engine, "u1", today=DAY + timedelta(days=1))
        assert tomorrow.current_streak == 1
        assert tomorrow.is_at_risk is True

        same_day = streak_service.get_streak(engine, "u1", today=DAY)
        assert same_day.is_at_risk is False
        assert same_day.to_dict()["last_active_date"] == "2026-03-10"

    def test_broken_streak_reads_as_zero(self, engine, catalog):
        streak_service.check_in(engine, catalog, "u1", today=DAY)

        view = streak_service.get_streak(engine, "u1", today=DAY + timedelta(days=3))

        assert view.current_streak == 0
        assert view.longest_streak == 1
        assert view.is_at_risk is False
