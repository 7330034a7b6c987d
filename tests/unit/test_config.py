"""Unit tests for engine configuration."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from lint_roller.config import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    ConfigLoader,
    EngineConfig,
    load_config,
)
from lint_roller.errors import ConfigurationError, ErrorCategory


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    """Keep a developer's LINT_ROLLER_CONFIG out of the tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestEngineConfig:
    """Test the config model."""

    def test_defaults(self):
        """Test the built-in defaults."""
        config = EngineConfig()

        assert config.index_ttl_seconds == 5.0
        assert config.library_ttl_seconds == 30.0
        assert config.scan_yield_batch == 50
        assert config.name_match_absolute_tolerance == 1.0
        assert config.name_match_relative_tolerance == 0.05
        assert config.log_level == "INFO"

    def test_camel_case_aliases(self):
        """Test camelCase keys load and serialize back."""
        config = EngineConfig.model_validate({"indexTtlSeconds": 1, "logLevel": "debug"})

        assert config.index_ttl_seconds == 1.0
        assert config.log_level == "DEBUG"
        assert config.to_dict()["indexTtlSeconds"] == 1.0

    def test_field_names_accepted(self):
        """Test snake_case field names are accepted too."""
        assert EngineConfig(scan_yield_batch=10).scan_yield_batch == 10

    @pytest.mark.parametrize(
        "data",
        [
            {"scanYieldBatch": 0},
            {"indexTtlSeconds": -1},
            {"logLevel": "LOUD"},
            {"logFormat": "xml"},
            {"nameMatchRelativeTolerance": 2},
        ],
    )
    def test_invalid_values(self, data):
        """Test out-of-range and unknown enum values are rejected."""
        with pytest.raises(ValidationError):
            EngineConfig.model_validate(data)

    def test_unknown_keys_ignored(self):
        """Test unknown keys are ignored."""
        assert EngineConfig.model_validate({"someFutureOption": True}) == EngineConfig()


class TestConfigLoader:
    """Test config file discovery and precedence."""

    def test_defaults_without_file(self, tmp_path: Path):
        """Test defaults apply when no config file exists."""
        assert load_config(tmp_path) == EngineConfig()

    def test_project_file(self, tmp_path: Path):
        """Test the project config file is picked up."""
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"scanYieldBatch": 7}))
        assert load_config(tmp_path).scan_yield_batch == 7

    def test_explicit_path_wins(self, tmp_path: Path):
        """Test an explicit path beats the project file."""
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"scanYieldBatch": 7}))
        explicit = tmp_path / "other.json"
        explicit.write_text(json.dumps({"scanYieldBatch": 9}))

        assert load_config(tmp_path, explicit).scan_yield_batch == 9

    def test_env_var_beats_project_file(self, tmp_path: Path, monkeypatch):
        """Test LINT_ROLLER_CONFIG beats the project file."""
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"scanYieldBatch": 7}))
        env_file = tmp_path / "env.json"
        env_file.write_text(json.dumps({"scanYieldBatch": 3}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_file))

        assert ConfigLoader(tmp_path).load().scan_yield_batch == 3

    def test_missing_env_file_falls_through(self, tmp_path: Path, monkeypatch):
        """Test a missing env-var file falls back to defaults."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.json"))
        assert ConfigLoader(tmp_path).load() == EngineConfig()

    def test_invalid_json(self, tmp_path: Path):
        """Test invalid JSON raises ConfigurationError with a suggestion."""
        (tmp_path / CONFIG_FILENAME).write_text("{not json")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path)

        assert exc_info.value.category is ErrorCategory.CONFIGURATION
        assert "Suggestion:" in exc_info.value.format()

    def test_non_object(self, tmp_path: Path):
        """Test a non-object config file is rejected."""
        (tmp_path / CONFIG_FILENAME).write_text("[1, 2]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(tmp_path)

    def test_invalid_values(self, tmp_path: Path):
        """Test invalid values in a file raise ConfigurationError."""
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"scanYieldBatch": -5}))

        with pytest.raises(ConfigurationError, match="Invalid config"):
            load_config(tmp_path)
