"""Design token models and the read-only token catalog."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..color import LAB, hex_to_lab


class TokenType(Enum):
    """DTCG token types the engine distinguishes."""

    COLOR = "color"
    NUMBER = "number"
    DIMENSION = "dimension"
    TEXT = "text"
    SHADOW = "shadow"
    TYPOGRAPHY = "typography"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> TokenType:
        # Tokens Studio numeric types
        if value in NUMERIC_TOKEN_STUDIO_TYPES:
            return cls.DIMENSION
        if value in ("boxShadow",):
            return cls.SHADOW
        if value in ("fontFamilies", "fontWeights", "textCase", "textDecoration"):
            return cls.TEXT
        return cls.OTHER

    @property
    def is_numeric(self) -> bool:
        return self in (TokenType.NUMBER, TokenType.DIMENSION)


NUMERIC_TOKEN_STUDIO_TYPES = frozenset(
    {
        "spacing",
        "sizing",
        "borderRadius",
        "borderWidth",
        "fontSizes",
        "lineHeights",
        "letterSpacing",
        "paragraphSpacing",
        "opacity",
    }
)


@dataclass(frozen=True)
class Token:
    """A design token with its alias resolved.

    Attributes:
        path: Dot-separated token path.
        raw_value: Value as written in the token file, alias included.
        resolved_value: Terminal value, or None for a dangling or circular alias.
        type: Token type.
        is_alias: Whether raw_value references another token.
        alias_path: Path referenced by raw_value.
        source_file: Token file the definition came from.
        description: Optional $description.
    """

    path: str
    raw_value: Any
    resolved_value: Any
    type: TokenType = TokenType.COLOR
    is_alias: bool = False
    alias_path: str | None = None
    source_file: str = ""
    description: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved_value is not None

    @property
    def is_semantic(self) -> bool:
        """Semantic tokens are preferred over core tokens for suggestions."""
        if "semantic" in self.source_file:
            return True
        if self.path.startswith(("system.", "component.")):
            return True
        return self.is_alias and bool(self.alias_path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "rawValue": self.raw_value,
            "resolvedValue": self.resolved_value,
            "type": self.type.value,
            "isAlias": self.is_alias,
            "aliasPath": self.alias_path,
            "sourceFile": self.source_file,
            "description": self.description,
        }


@dataclass
class TokenCatalog:
    """Token lookup indexes, built once and read-only afterwards."""

    tokens: dict[str, Token] = field(default_factory=dict)
    by_type: dict[TokenType, list[Token]] = field(default_factory=dict)
    color_values: dict[str, str] = field(default_factory=dict)
    all_color_paths: dict[str, list[str]] = field(default_factory=dict)
    number_values: dict[float, list[str]] = field(default_factory=dict)
    color_lab: dict[str, LAB] = field(default_factory=dict)

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> TokenCatalog:
        """Build the catalog indexes.

        For each hex the preferred path is the first token seen, unless a
        later semantic token replaces a non-semantic one.
        """
        catalog = cls()
        color_is_semantic: dict[str, bool] = {}

        for token in tokens:
            catalog.tokens[token.path] = token
            catalog.by_type.setdefault(token.type, []).append(token)
            semantic = token.is_semantic

            value = token.resolved_value
            if token.type is TokenType.COLOR and isinstance(value, str):
                hex_color = value.lower()
                if hex_color.startswith("#"):
                    paths = catalog.all_color_paths.setdefault(hex_color, [])
                    if semantic:
                        paths.insert(0, token.path)
                    else:
                        paths.append(token.path)

                    if hex_color not in catalog.color_values or (
                        semantic and not color_is_semantic[hex_color]
                    ):
                        catalog.color_values[hex_color] = token.path
                        color_is_semantic[hex_color] = semantic

            if token.type.is_numeric and isinstance(value, (int, float)):
                if isinstance(value, bool):
                    continue
                numbers = catalog.number_values.setdefault(float(value), [])
                if semantic:
                    numbers.insert(0, token.path)
                else:
                    numbers.append(token.path)

        for hex_color in catalog.color_values:
            lab = hex_to_lab(hex_color)
            if lab is not None:
                catalog.color_lab[hex_color] = lab

        return catalog

    def get(self, path: str) -> Token | None:
        return self.tokens.get(path)

    def alias_chain(self, path: str) -> list[str]:
        """Paths the token references, in order, excluding the token itself."""
        chain: list[str] = []
        visited = {path}
        token = self.tokens.get(path)
        while token is not None and token.is_alias and token.alias_path:
            if token.alias_path in visited:
                break
            chain.append(token.alias_path)
            visited.add(token.alias_path)
            token = self.tokens.get(token.alias_path)
        return chain

    def __len__(self) -> int:
        return len(self.tokens)

    def __contains__(self, path: object) -> bool:
        return path in self.tokens

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokens": [token.to_dict() for token in self.tokens.values()],
            "colorValues": dict(self.color_values),
            "numberValues": {str(k): v for k, v in self.number_values.items()},
        }
