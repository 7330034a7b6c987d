"""Token-to-variable matching.

The engine itself lives in lint_roller.matching.engine; this package root
only exposes the result models so low-level modules can import them.
"""

from .models import ConfidenceTier, CurrentValue, MatchCandidate, MatchContext, MatchPhase

__all__ = [
    "ConfidenceTier",
    "CurrentValue",
    "MatchCandidate",
    "MatchContext",
    "MatchPhase",
]
