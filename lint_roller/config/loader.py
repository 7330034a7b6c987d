"""Engine configuration loader.

Loads and validates lint-roller.config.json configuration files.
"""

import json
import os
from pathlib import Path

from pydantic import ValidationError

from ..errors import ConfigurationError
from ..lint_logging import get_logger
from .models import EngineConfig

logger = get_logger()

CONFIG_FILENAME = "lint-roller.config.json"
CONFIG_ENV_VAR = "LINT_ROLLER_CONFIG"


class ConfigLoader:
    """Loader for engine configuration."""

    def __init__(self, project_path: Path | None = None):
        """Initialize the config loader.

        Args:
            project_path: Path to the project root. Defaults to current directory.
        """
        self.project_path = Path(project_path) if project_path else Path.cwd()

    def load(self, config_path: Path | None = None) -> EngineConfig:
        """Load engine configuration.

        Precedence (highest to lowest):
        1. Explicit config_path
        2. Environment variable LINT_ROLLER_CONFIG
        3. lint-roller.config.json in project root
        4. Default configuration

        Raises:
            ConfigurationError: If the chosen file is unreadable or invalid.
        """
        if config_path and Path(config_path).exists():
            return self._load_from_file(Path(config_path))

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            env_config_path = Path(env_path)
            if env_config_path.exists():
                return self._load_from_file(env_config_path)
            logger.warning(f"{CONFIG_ENV_VAR} points to missing file {env_path}")

        project_config = self.project_path / CONFIG_FILENAME
        if project_config.exists():
            return self._load_from_file(project_config)

        logger.debug("No lint-roller config found, using defaults")
        return EngineConfig()

    def _load_from_file(self, config_path: Path) -> EngineConfig:
        logger.debug(f"Loading engine config from {config_path}")
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot read config {config_path}: {e}", str(config_path)
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a JSON object", str(config_path)
            )

        try:
            return EngineConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid config {config_path}: {e}", str(config_path)
            ) from e


def load_config(
    project_path: Path | None = None, config_path: Path | None = None
) -> EngineConfig:
    """Convenience wrapper around ConfigLoader.load()."""
    return ConfigLoader(project_path).load(config_path)
