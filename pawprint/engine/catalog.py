"""
pawprint.engine.catalog — Static Mission Catalog
=================================================

Mission definitions are seeded out-of-band in a YAML file and are
read-only to the engine.  The catalog is loaded once at startup and held
as immutable dataclasses; it carries no per-user state.

File format::

    missions:
      - id: first-upload
        title: First Upload
        description: Share your first photo
        category: social
        cadence: once
        xp_reward: 50
        criteria:
          activity: photo_upload
          target: 1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import yaml

from pawprint.constants import MAX_AMOUNT
from pawprint.engine.errors import CatalogError, MissionNotFound

logger = logging.getLogger(__name__)

__all__ = ["Criteria", "Mission", "MissionCatalog", "DEFAULT_CATALOG_PATH"]

DEFAULT_CATALOG_PATH = Path(__file__).with_name("missions.yaml")

VALID_CATEGORIES = frozenset({"watch", "engage", "learn", "social", "challenge"})
# Progress is one row per (user, mission) and never resets, so only
# one-shot missions can be honoured.
VALID_CADENCES = frozenset({"once"})


@dataclass(frozen=True, slots=True)
class Criteria:
    """Completion criteria: *target* signals of kind *activity*."""

    activity: str
    target: int


@dataclass(frozen=True, slots=True)
class Mission:
    id: str
    title: str
    xp_reward: int
    criteria: Criteria
    description: str = ""
    category: str = "learn"
    cadence: str = "once"
    bonus_reward: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "cadence": self.cadence,
            "xp_reward": self.xp_reward,
            "target": self.criteria.target,
            "activity": self.criteria.activity,
            "bonus_reward": self.bonus_reward,
        }


def _parse_mission(raw: dict[str, Any]) -> Mission:
    try:
        mission_id = str(raw["id"]).strip()
        criteria_raw = raw["criteria"]
        criteria = Criteria(
            activity=str(criteria_raw["activity"]).strip(),
            target=int(criteria_raw.get("target", 1)),
        )
        mission = Mission(
            id=mission_id,
            title=str(raw["title"]),
            xp_reward=int(raw["xp_reward"]),
            criteria=criteria,
            description=str(raw.get("description", "")),
            category=str(raw.get("category", "learn")),
            cadence=str(raw.get("cadence", "once")),
            bonus_reward=raw.get("bonus_reward"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"Malformed mission definition {raw!r}: {exc}") from exc

    if not mission.id:
        raise CatalogError("Mission id must not be blank")
    if not 0 < mission.xp_reward <= MAX_AMOUNT:
        raise CatalogError(
            f"Mission {mission.id!r}: xp_reward must be between 1 and {MAX_AMOUNT}"
        )
    if not 0 < criteria.target <= MAX_AMOUNT:
        raise CatalogError(
            f"Mission {mission.id!r}: criteria.target must be between 1 and {MAX_AMOUNT}"
        )
    if not criteria.activity:
        raise CatalogError(f"Mission {mission.id!r}: criteria.activity must not be blank")
    if mission.category not in VALID_CATEGORIES:
        raise CatalogError(f"Mission {mission.id!r}: unknown category {mission.category!r}")
    if mission.cadence not in VALID_CADENCES:
        raise CatalogError(f"Mission {mission.id!r}: unknown cadence {mission.cadence!r}")
    return mission


class MissionCatalog:
    """Read-only lookup of missions by id, preserving file order."""

    def __init__(self, missions: Iterable[Mission]) -> None:
        self._missions: dict[str, Mission] = {}
        for mission in missions:
            if mission.id in self._missions:
                raise CatalogError(f"Duplicate mission id {mission.id!r}")
            self._missions[mission.id] = mission

    # -------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------
    @classmethod
    def from_dicts(cls, rows: Iterable[dict[str, Any]]) -> MissionCatalog:
        return cls(_parse_mission(row) for row in rows)

    @classmethod
    def from_yaml(cls, path: str | Path = DEFAULT_CATALOG_PATH) -> MissionCatalog:
        """Load a catalog from a YAML file.

        Raises
        ------
        FileNotFoundError
            If the file doesn't exist.
        CatalogError
            If the file or any mission in it is malformed.
        """
        catalog_path = Path(path)
        if not catalog_path.exists():
            raise FileNotFoundError(f"Mission catalog not found: {catalog_path.resolve()}")

        with open(catalog_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

        rows = raw.get("missions") if isinstance(raw, dict) else None
        if not isinstance(rows, list):
            raise CatalogError(f"{catalog_path}: expected a top-level 'missions' list")

        catalog = cls.from_dicts(rows)
        logger.info("Loaded %d missions from %s", len(catalog), catalog_path)
        return catalog

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def get(self, mission_id: str) -> Mission | None:
        return self._missions.get(mission_id)

    def require(self, mission_id: str) -> Mission:
        mission = self._missions.get(mission_id)
        if mission is None:
            raise MissionNotFound(f"Mission {mission_id!r} does not exist")
        return mission

    def all(self) -> list[Mission]:
        return list(self._missions.values())

    def for_activity(self, activity: str) -> list[Mission]:
        """Missions whose criteria count signals of kind *activity*."""
        return [m for m in self._missions.values() if m.criteria.activity == activity]

    def __contains__(self, mission_id: object) -> bool:
        return mission_id in self._missions

    def __len__(self) -> int:
        return len(self._missions)
