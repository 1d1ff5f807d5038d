"""
tests/test_levels.py — Level Threshold Math
============================================
"""

from __future__ import annotations

import pytest

from pawprint.constants import (
    LEVEL_THRESHOLDS,
    MAX_LEVEL,
    level_for_xp,
    level_progress,
    xp_for_level,
)


class TestLevelForXp:
    @pytest.mark.parametrize("xp, expected", [
        (0, 1),
        (99, 1),
        (100, 2),
        (120, 2),
        (170, 2),
        (250, 3),
        (59999, 19),
        (60000, 20),
        (10**7, 20),
    ])
    def test_thresholds(self, xp, expected):
        assert level_for_xp(xp) == expected

    def test_monotonic(self):
        levels = [level_for_xp(xp) for xp in range(0, 61000, 250)]
        assert levels == sorted(levels)

    def test_thresholds_strictly_increasing(self):
        assert all(a < b for a, b in zip(LEVEL_THRESHOLDS, LEVEL_THRESHOLDS[1:]))
        assert MAX_LEVEL == 20


class TestXpForLevel:
    def test_clamped(self):
        assert xp_for_level(0) == 0
        assert xp_for_level(1) == 0
        assert xp_for_level(3) == 250
        assert xp_for_level(99) == 60000


class TestLevelProgress:
    def test_mid_band(self):
        info = level_progress(175)
        assert info["level"] == 2
        assert info["current_level_xp"] == 100
        assert info["next_level_xp"] == 250
        assert info["progress"] == 50.0

    def test_start_of_band(self):
        assert level_progress(0)["progress"] == 0.0

    def test_max_level(self):
        info = level_progress(75000)
        assert info["level"] == MAX_LEVEL
        assert info["next_level_xp"] == info["current_level_xp"] == 60000
        assert info["progress"] == 100.0
