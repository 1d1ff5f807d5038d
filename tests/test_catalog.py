"""
tests/test_catalog.py — Mission Catalog Loading & Lookup
=========================================================
"""

from __future__ import annotations

import pytest

from pawprint.constants import MAX_AMOUNT
from pawprint.engine.catalog import DEFAULT_CATALOG_PATH, MissionCatalog
from pawprint.engine.errors import CatalogError, ClaimFailure, MissionNotFound


def _mission(**overrides) -> dict:
    row = {
        "id": "m1",
        "title": "Mission One",
        "xp_reward": 10,
        "criteria": {"activity": "photo_upload", "target": 2},
    }
    row.update(overrides)
    return row


class TestBundledCatalog:
    def test_loads_default_file(self):
        catalog = MissionCatalog.from_yaml()
        assert len(catalog) == 12
        assert "first-upload" in catalog

    def test_first_upload_definition(self):
        mission = MissionCatalog.from_yaml(DEFAULT_CATALOG_PATH).require("first-upload")
        assert mission.xp_reward == 50
        assert mission.criteria.activity == "photo_upload"
        assert mission.criteria.target == 1

    def test_streak_mission_counts_check_ins(self):
        catalog = MissionCatalog.from_yaml()
        ids = [m.id for m in catalog.for_activity("daily_check_in")]
        assert ids == ["streak_7"]

    def test_every_mission_is_one_shot(self):
        catalog = MissionCatalog.from_yaml()
        assert {m.cadence for m in catalog.all()} == {"once"}
        assert all("Daily" not in m.title for m in catalog.all())


class TestLookups:
    def test_preserves_file_order(self, catalog):
        assert [m.id for m in catalog.all()][:2] == ["first-upload", "watch_3"]

    def test_get_unknown_returns_none(self, catalog):
        assert catalog.get("nope") is None

    def test_require_unknown_raises_mission_not_found(self, catalog):
        with pytest.raises(MissionNotFound) as exc_info:
            catalog.require("nope")
        assert isinstance(exc_info.value, ClaimFailure)

    def test_for_activity_fans_out(self, catalog):
        ids = {m.id for m in catalog.for_activity("comment_posted")}
        assert ids == {"comment_1", "comment_3"}

    def test_for_unknown_activity_is_empty(self, catalog):
        assert catalog.for_activity("telepathy") == []

    def test_to_dict_exposes_target(self, catalog):
        data = catalog.require("watch_3").to_dict()
        assert data["target"] == 3
        assert data["activity"] == "video_watched"
        assert data["xp_reward"] == 30


class TestValidation:
    def test_defaults_applied(self):
        mission = MissionCatalog.from_dicts([_mission()]).require("m1")
        assert mission.category == "learn"
        assert mission.cadence == "once"

    @pytest.mark.parametrize("overrides", [
        {"xp_reward": 0},
        {"xp_reward": -5},
        {"criteria": {"activity": "photo_upload", "target": 0}},
        {"criteria": {"activity": "", "target": 1}},
        {"category": "gardening"},
        {"cadence": "hourly"},
        {"cadence": "daily"},
        {"xp_reward": MAX_AMOUNT + 1},
        {"criteria": {"activity": "photo_upload", "target": MAX_AMOUNT + 1}},
        {"id": "  "},
    ])
    def test_rejects_invalid_definitions(self, overrides):
        with pytest.raises(CatalogError):
            MissionCatalog.from_dicts([_mission(**overrides)])

    def test_rejects_missing_keys(self):
        row = _mission()
        del row["title"]
        with pytest.raises(CatalogError, match="Malformed"):
            MissionCatalog.from_dicts([row])

    def test_rejects_duplicate_ids(self):
        with pytest.raises(CatalogError, match="Duplicate"):
            MissionCatalog.from_dicts([_mission(), _mission()])

    def test_yaml_without_missions_list(self, tmp_path):
        path = tmp_path / "missions.yaml"
        path.write_text("quests: []\n", encoding="utf-8")
        with pytest.raises(CatalogError, match="missions"):
            MissionCatalog.from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MissionCatalog.from_yaml(tmp_path / "absent.yaml")
