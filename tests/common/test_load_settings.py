"""
Tests for settings and retro configuration loading.
"""

import os
import sys
from unittest.mock import patch

import pytest

# Add src to path for importing the source modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "..", "src"))

from common.load_settings import (
    DEFAULT_CONFIG_PATH,
    RetroConfigError,
    load_retro_config,
    load_settings,
)
from schema.retro_models import AllCriterion, ExcludeList, IncludeList, NoneCriterion

MINIMAL_CONFIG = """
section_order: [ROCKS]
sections:
  ROCKS:
    title: ROCKS
    include_in_good: true
evaluation_criteria:
  ROCKS:
    good: {kind: include, terms: ["✅"]}
"""


@pytest.fixture
def write_config(tmp_path):
    def _write(content):
        path = tmp_path / "retro_config.yaml"
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


class TestLoadSettings:
    """Test cases for environment settings."""

    def test_defaults(self, mock_env):
        with patch("common.load_settings.load_dotenv"):
            settings = load_settings()
        assert settings["retro_config_path"] == DEFAULT_CONFIG_PATH
        assert settings["retro_store_path"] is None
        assert settings["max_field_length"] == 2000

    def test_environment_overrides(self, mock_env):
        env = {
            "RETRO_CONFIG_PATH": "/tmp/retro.yaml",
            "RETRO_STORE_PATH": "/tmp/retros.json",
            "RETRO_MAX_FIELD_LENGTH": "500",
        }
        with patch.dict(os.environ, env), patch("common.load_settings.load_dotenv"):
            settings = load_settings()
        assert settings["retro_config_path"] == "/tmp/retro.yaml"
        assert settings["retro_store_path"] == "/tmp/retros.json"
        assert settings["max_field_length"] == 500


class TestLoadRetroConfig:
    """Test cases for the YAML retro configuration."""

    def test_bundled_config(self):
        config = load_retro_config(DEFAULT_CONFIG_PATH)

        assert config.section_order[0] == "TRIPS"
        assert config.sections["CAL_SUMMARY"].header_name == "CAL SUMMARY"
        assert config.sections["CAL_EVENTS"].source == "cal"
        assert config.criterion_for("TRIPS", "good") == AllCriterion()
        assert config.criterion_for("TRIPS", "bad") == NoneCriterion()
        assert config.criterion_for("EVENTS", "good") == ExcludeList(terms=("😔", "Wasted"))
        assert config.criterion_for("HABITS", "bad") == IncludeList(terms=("❌", "⚠️"))
        assert config.task_details["Home Tasks"] is True
        assert config.habit_rules["body_weight"].operator == "<="

    def test_tagged_criteria(self, write_config):
        config = load_retro_config(write_config(MINIMAL_CONFIG))
        assert config.criterion_for("ROCKS", "good") == IncludeList(terms=("✅",))
        # Modes without a criterion are left unset
        assert config.criterion_for("ROCKS", "bad") is None
        assert config.criterion_for("TASKS", "good") is None

    def test_path_from_environment(self, mock_env, write_config):
        path = write_config(MINIMAL_CONFIG)
        with patch.dict(os.environ, {"RETRO_CONFIG_PATH": path}), patch(
            "common.load_settings.load_dotenv"
        ):
            config = load_retro_config()
        assert config.section_order == ("ROCKS",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RetroConfigError, match="does not exist"):
            load_retro_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, write_config):
        with pytest.raises(RetroConfigError, match="Invalid YAML"):
            load_retro_config(write_config("sections: [unclosed"))

    def test_not_a_mapping(self, write_config):
        with pytest.raises(RetroConfigError, match="must be a mapping"):
            load_retro_config(write_config("- just\n- a list\n"))

    def test_unknown_criterion_shape(self, write_config):
        content = MINIMAL_CONFIG.replace('{kind: include, terms: ["✅"]}', "sometimes")
        with pytest.raises(RetroConfigError, match="Invalid retro config"):
            load_retro_config(write_config(content))

    def test_invalid_habit_pattern(self, write_config):
        content = MINIMAL_CONFIG + (
            "habit_rules:\n"
            "  sleep:\n"
            "    pattern: '(\\d+ early wake ups'\n"
            "    description: sleeping habits\n"
            "    good_per_week: 4\n"
            "    warning_per_week: 2\n"
        )
        with pytest.raises(RetroConfigError):
            load_retro_config(write_config(content))

    def test_config_error_is_a_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            load_retro_config(str(tmp_path / "missing.yaml"))
