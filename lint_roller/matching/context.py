"""Context keywords used to break ties between equally good candidates."""

from ..document.capabilities import ICON_NODE_TYPES


def get_context_keywords(property: str, node_type: str) -> list[str]:
    """Keywords a variable path should contain to suit where it is bound.

    Example:
        >>> get_context_keywords("fills[0]", "TEXT")
        ['text']
        >>> get_context_keywords("strokes[0]", "FRAME")
        ['border']
    """
    if "stroke" in property:
        return ["border"]
    if "fill" in property:
        if node_type == "TEXT":
            return ["text"]
        if node_type in ICON_NODE_TYPES:
            return ["icon"]
        return ["background"]
    return []


def context_score(normalized_name: str, keywords: list[str], weight: int = 10) -> int:
    """`weight` when any keyword is a whole segment of the name, else 0."""
    if not keywords:
        return 0
    segments = normalized_name.split("/")
    return weight if any(keyword in segments for keyword in keywords) else 0
