"""Unit tests for GeneratorSettings (archgen.config).

Tests cover:
- Defaults and derived paths
- save/load round trip
- from_env parsing
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from archgen.config import GeneratorSettings


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestGeneratorSettingsDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        settings = GeneratorSettings()
        assert settings.project_dir == Path(".")
        assert settings.config_file == ".cleanarch.yml"
        assert settings.application_config is None
        assert settings.template_dir is None
        assert settings.metadata_dir is None
        assert settings.overwrite is False
        assert settings.keep_backup is False

    @pytest.mark.unit
    def test_config_path(self, tmp_path: Path):
        settings = GeneratorSettings(project_dir=tmp_path)
        assert settings.config_path == tmp_path / ".cleanarch.yml"

    @pytest.mark.unit
    def test_custom_config_file(self, tmp_path: Path):
        settings = GeneratorSettings(project_dir=tmp_path, config_file="arch.yml")
        assert settings.config_path == tmp_path / "arch.yml"

    @pytest.mark.unit
    def test_settings_path(self, tmp_path: Path):
        settings = GeneratorSettings(project_dir=tmp_path)
        assert settings.settings_path == tmp_path / ".archgen" / "settings.json"


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestGeneratorSettingsPersistence:
    @pytest.mark.unit
    def test_save_creates_file(self, tmp_path: Path):
        settings = GeneratorSettings(project_dir=tmp_path, overwrite=True)
        path = settings.save()
        assert path == settings.settings_path
        assert path.exists()
        data = json.loads(path.read_text())
        assert data["overwrite"] is True

    @pytest.mark.unit
    def test_save_and_load_round_trip(self, tmp_path: Path):
        original = GeneratorSettings(
            project_dir=tmp_path,
            application_config="config/application.yml",
            template_dir=tmp_path / "templates",
        )
        path = original.save(tmp_path / "settings.json")
        loaded = GeneratorSettings.load(path)
        assert loaded == original


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestGeneratorSettingsFromEnv:
    @pytest.mark.unit
    def test_empty_environment_gives_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = GeneratorSettings.from_env()
        assert settings == GeneratorSettings()

    @pytest.mark.unit
    def test_reads_directories(self, tmp_path: Path):
        env = {
            "ARCHGEN_PROJECT_DIR": str(tmp_path),
            "ARCHGEN_TEMPLATE_DIR": str(tmp_path / "templates"),
            "ARCHGEN_METADATA_DIR": str(tmp_path / "pack"),
        }
        with patch.dict(os.environ, env, clear=True):
            settings = GeneratorSettings.from_env()
        assert settings.project_dir == tmp_path
        assert settings.template_dir == tmp_path / "templates"
        assert settings.metadata_dir == tmp_path / "pack"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_overwrite_truthy(self, value: str):
        with patch.dict(os.environ, {"ARCHGEN_OVERWRITE": value}, clear=True):
            assert GeneratorSettings.from_env().overwrite is True

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["0", "false", "no"])
    def test_overwrite_falsy(self, value: str):
        with patch.dict(os.environ, {"ARCHGEN_OVERWRITE": value}, clear=True):
            assert GeneratorSettings.from_env().overwrite is False

    @pytest.mark.unit
    def test_keep_backup(self):
        with patch.dict(os.environ, {"ARCHGEN_KEEP_BACKUP": "true"}, clear=True):
            settings = GeneratorSettings.from_env()
        assert settings.keep_backup is True
        assert settings.overwrite is False
