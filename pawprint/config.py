"""
pawprint.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for deployment settings: the community's display
name, the dashboard port and where the mission catalog lives.  Secrets and
connection strings come from the environment (``.env``), never from here.

Usage::

    from pawprint.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.community_name)    # "Pawprint Dev"
    print(cfg.missions_path)     # pawprint/engine/missions.yaml
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from pawprint.engine.catalog import DEFAULT_CATALOG_PATH


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PawprintConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # Dashboard
    dashboard_port: int

    # Mission catalog (YAML); defaults to the bundled catalog
    missions_path: Path = DEFAULT_CATALOG_PATH


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> PawprintConfig:
    """Read *path* and return a :class:`PawprintConfig` instance.

    A relative ``missions_path`` is resolved against the directory holding
    the config file.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    missions_path = DEFAULT_CATALOG_PATH
    if raw.get("missions_path"):
        missions_path = Path(raw["missions_path"])
        if not missions_path.is_absolute():
            missions_path = config_path.parent / missions_path

    return PawprintConfig(
        community_name=raw["community_name"],
        dashboard_port=int(raw["dashboard_port"]),
        missions_path=missions_path,
    )
