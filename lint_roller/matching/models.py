"""Match result models shared by the matcher, fixer and remapper."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..document.models import ResolvedType, Variable


class ConfidenceTier(Enum):
    """How closely a suggestion reproduces the original value."""

    EXACT = "exact"
    CLOSE = "close"
    APPROXIMATE = "approximate"


class MatchPhase(Enum):
    """Which search phase produced a match."""

    NAME = "name"
    VALUE = "value"
    CLOSE_VALUE = "close_value"
    LIBRARY = "library"


@dataclass(frozen=True)
class CurrentValue:
    """The literal value a binding must preserve.

    Exactly one of hex and number is set for a known value; both None means
    the node's current value could not be read.
    """

    hex: str | None = None
    number: float | None = None

    @property
    def is_known(self) -> bool:
        return self.hex is not None or self.number is not None

    @classmethod
    def color(cls, hex_color: str) -> CurrentValue:
        """Canonical hex: 6 digits when opaque, 8 when translucent."""
        from ..color import hex_to_rgba, rgb_to_hex

        rgba = hex_to_rgba(hex_color)
        return cls(hex=rgb_to_hex(rgba) if rgba is not None else hex_color.lower())

    @classmethod
    def of_number(cls, value: float) -> CurrentValue:
        return cls(number=float(value))

    def display(self) -> str:
        if self.hex is not None:
            return self.hex
        if self.number is not None:
            return f"{self.number:g}"
        return "unknown"


@dataclass(frozen=True)
class MatchContext:
    """Where the binding lands, used to break ties between equal values."""

    property: str
    node_type: str


@dataclass
class MatchCandidate:
    """A variable chosen for a token, with how it was found."""

    variable: Variable
    score: float
    confidence: ConfidenceTier
    phase: MatchPhase

    @property
    def resolved_type(self) -> ResolvedType:
        return self.variable.resolved_type

    def to_dict(self) -> dict[str, Any]:
        return {
            "variableId": self.variable.id,
            "variableName": self.variable.name,
            "score": self.score,
            "confidence": self.confidence.value,
            "phase": self.phase.value,
        }
