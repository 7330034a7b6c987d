"""Alias resolution for document variables and design tokens.

Both resolvers walk the chain one hop at a time with a per-call visited set,
and return None on cycles, dangling references or missing modes. They never
raise on bad data.
"""

import re
from collections.abc import Mapping
from typing import Any

from ..document.models import RGBA, Variable, VariableAlias
from ..lint_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.INDEX)

TOKEN_ALIAS_PATTERN = re.compile(r"^\{([^}]+)\}$")


class VariableAliasResolver:
    """Resolve variables to terminal values in their collection's default mode."""

    def __init__(
        self,
        variables_by_id: Mapping[str, Variable],
        default_modes: Mapping[str, str],
    ):
        """Initialize the resolver.

        Args:
            variables_by_id: Every variable an alias may point at.
            default_modes: Collection id -> default mode id.
        """
        self.variables_by_id = variables_by_id
        self.default_modes = default_modes

    def resolve(self, variable: Variable) -> RGBA | float | None:
        """Follow aliases to an RGBA or number value."""
        visited: set[str] = set()
        current = variable

        while True:
            if current.id in visited:
                logger.debug(f"Alias cycle through {current.id} while resolving {variable.id}")
                return None
            visited.add(current.id)

            mode_id = self.default_modes.get(current.collection_id)
            if not mode_id:
                return None

            value = current.values_by_mode.get(mode_id)
            if isinstance(value, VariableAlias):
                target = self.variables_by_id.get(value.id)
                if target is None:
                    # External library or deleted variable
                    return None
                current = target
                continue

            if isinstance(value, RGBA):
                return value
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
            return None

    def resolve_color(self, variable: Variable) -> RGBA | None:
        value = self.resolve(variable)
        return value if isinstance(value, RGBA) else None

    def resolve_number(self, variable: Variable) -> float | None:
        value = self.resolve(variable)
        return value if isinstance(value, float) else None


def is_alias_value(value: Any) -> bool:
    """True for "{a.b.c}" style token references."""
    return isinstance(value, str) and TOKEN_ALIAS_PATTERN.match(value) is not None


def extract_alias_path(value: str) -> str | None:
    match = TOKEN_ALIAS_PATTERN.match(value)
    return match.group(1) if match else None


class TokenAliasResolver:
    """Resolve "{path}" references between raw token values."""

    def __init__(self, raw_values: Mapping[str, Any]):
        self.raw_values = raw_values

    def chain(self, path: str) -> list[str]:
        """Paths walked from `path` (excluded) until a literal or a dead end."""
        walked: list[str] = []
        visited = {path}
        value = self.raw_values.get(path)

        while is_alias_value(value):
            target = extract_alias_path(value)
            if target is None or target in visited:
                break
            walked.append(target)
            visited.add(target)
            value = self.raw_values.get(target)

        return walked

    def resolve(self, path: str) -> Any | None:
        """Terminal value for a path, None on dangling or circular aliases."""
        if path not in self.raw_values:
            return None

        visited: set[str] = set()
        current = path
        while True:
            if current in visited:
                logger.debug(f"Token alias cycle at {current} while resolving {path}")
                return None
            visited.add(current)

            value = self.raw_values.get(current)
            if value is None:
                return None
            if not is_alias_value(value):
                return value
            current = extract_alias_path(value) or ""
