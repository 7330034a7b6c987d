"""Engine configuration package.

Configuration Precedence (highest to lowest):
1. Explicit config path
2. LINT_ROLLER_CONFIG environment variable
3. lint-roller.config.json in the project root
4. Defaults
"""

from .loader import CONFIG_ENV_VAR, CONFIG_FILENAME, ConfigLoader, load_config
from .models import EngineConfig

__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "ConfigLoader",
    "EngineConfig",
    "load_config",
]
