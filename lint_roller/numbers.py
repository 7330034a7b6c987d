"""Numeric value matching with absolute and relative tolerances."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .matching.models import ConfidenceTier

# Suggestion windows
CLOSE_TOLERANCE_PERCENT = 0.25
CLOSE_TOLERANCE_ABSOLUTE = 4.0
MAX_TOLERANCE_PERCENT = 0.5
MAX_TOLERANCE_ABSOLUTE = 8.0

SEMANTIC_TOKEN_PREFIXES = ("system.", "component.")


@dataclass
class NumberMatch:
    """A candidate number token for a target value."""

    token_path: str
    token_value: float
    difference: float
    percent_difference: float
    is_exact: bool

    def to_dict(self) -> dict:
        return {
            "tokenPath": self.token_path,
            "tokenValue": self.token_value,
            "difference": self.difference,
            "percentDifference": self.percent_difference,
            "isExact": self.is_exact,
        }


def relative_difference(candidate: float, current: float) -> float:
    """Difference relative to |current|; the absolute difference when current is 0."""
    diff = abs(candidate - current)
    if current == 0:
        return diff
    return diff / abs(current)


def is_within_fix_tolerance(
    candidate: float,
    current: float,
    absolute: float = 1.0,
    relative: float = 0.05,
) -> bool:
    """True when a variable's value can replace the literal without visible change.

    Accepts a difference of at most `absolute` units, or at most `relative`
    of the current value.

    Example:
        >>> is_within_fix_tolerance(10.5, 10)
        True
        >>> is_within_fix_tolerance(11.01, 10)
        False
    """
    diff = abs(candidate - current)
    return diff <= absolute or relative_difference(candidate, current) <= relative


def is_semantic_token_path(path: str) -> bool:
    return path.startswith(SEMANTIC_TOKEN_PREFIXES)


def has_preferred_keyword(path: str, keywords: Sequence[str]) -> bool:
    lower_path = path.lower()
    return any(kw.lower() in lower_path for kw in keywords)


def find_closest_numbers(
    target: float,
    number_values: Mapping[float, Sequence[str]],
    preferred_keywords: Sequence[str] = (),
    max_results: int = 5,
) -> list[NumberMatch]:
    """Find number tokens near a target value.

    A value qualifies when it is exact, within MAX_TOLERANCE_PERCENT of the
    target, or within MAX_TOLERANCE_ABSOLUTE units.

    Returns:
        Matches ordered exact first, then by difference, then paths containing
        a preferred keyword, then semantic paths.
    """
    matches: list[NumberMatch] = []

    for token_value, paths in number_values.items():
        difference = abs(target - token_value)
        if target != 0:
            percent_diff = difference / abs(target)
        else:
            percent_diff = 1.0 if token_value != 0 else 0.0
        is_exact = difference == 0

        if (
            is_exact
            or percent_diff <= MAX_TOLERANCE_PERCENT
            or difference <= MAX_TOLERANCE_ABSOLUTE
        ):
            for path in paths:
                matches.append(
                    NumberMatch(path, token_value, difference, percent_diff, is_exact)
                )

    def sort_key(match: NumberMatch) -> tuple:
        has_keyword = bool(preferred_keywords) and has_preferred_keyword(
            match.token_path, preferred_keywords
        )
        return (
            not match.is_exact,
            match.difference,
            bool(preferred_keywords) and not has_keyword,
            not is_semantic_token_path(match.token_path),
        )

    matches.sort(key=sort_key)
    return matches[:max_results]


def number_match_description(match: NumberMatch) -> str:
    """Human-readable description of a number match."""
    if match.is_exact:
        return "exact match"
    if match.difference <= 1:
        return f"off by {match.difference:g}px"
    if match.percent_difference <= 0.05:
        return "within 5%"
    if match.percent_difference <= 0.1:
        return "within 10%"
    return (
        f"off by {round(match.difference)}px "
        f"({round(match.percent_difference * 100)}%)"
    )


def confidence_for_number(candidate: float, current: float) -> ConfidenceTier:
    if candidate == current:
        return ConfidenceTier.EXACT
    if relative_difference(candidate, current) < 0.05:
        return ConfidenceTier.CLOSE
    return ConfidenceTier.APPROXIMATE
