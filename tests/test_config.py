"""
tests/test_config.py — YAML Configuration Loader
=================================================
"""

from __future__ import annotations

import pytest

from pawprint.config import load_config
from pawprint.engine.catalog import DEFAULT_CATALOG_PATH


def test_loads_required_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("community_name: Shutterbugs\ndashboard_port: '9000'\n", encoding="utf-8")

    cfg = load_config(path)

    assert cfg.community_name == "Shutterbugs"
    assert cfg.dashboard_port == 9000
    assert cfg.missions_path == DEFAULT_CATALOG_PATH


def test_relative_missions_path_resolves_beside_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "community_name: x\ndashboard_port: 8000\nmissions_path: custom/missions.yaml\n",
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.missions_path == tmp_path / "custom" / "missions.yaml"


def test_missing_file_has_hint(tmp_path):
    with pytest.raises(FileNotFoundError, match="config.yaml.example"):
        load_config(tmp_path / "config.yaml")


def test_missing_key(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("community_name: x\n", encoding="utf-8")
    with pytest.raises(KeyError):
        load_config(path)
