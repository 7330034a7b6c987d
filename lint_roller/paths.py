"""Path normalization between token paths and variable names.

Token paths use dot notation ("brand.colors.primary"); document variables use
slash notation, often with spaced separators ("Brand / Colors / Primary").
Both are compared through normalize_path().
"""

import re

_DOTS = re.compile(r"\.")
_SPACED_SLASH = re.compile(r"\s*/\s*")
_WHITESPACE = re.compile(r"\s+")
_EDGE_SLASHES = re.compile(r"^/+|/+$")

# One level is stripped at most; longer prefixes are listed after their heads
COMMON_PREFIXES = (
    "system/",
    "component/",
    "core/",
    "semantic/",
    "primitive/",
    "color/",
    "colours/",
    "colors/",
    "light/",
    "dark/",
    "semantic/light/",
    "semantic/dark/",
)


def normalize_path(path: str) -> str:
    """Normalize a path for comparison.

    Example:
        >>> normalize_path("brand.colors.primary")
        'brand/colors/primary'
        >>> normalize_path("Brand / Colors / Primary")
        'brand/colors/primary'
    """
    result = path.lower()
    result = _DOTS.sub("/", result)
    result = _SPACED_SLASH.sub("/", result)
    result = _WHITESPACE.sub("-", result)
    return _EDGE_SLASHES.sub("", result)


def token_path_to_variable_name(token_path: str) -> str:
    """Convert dot notation to slash notation."""
    return token_path.replace(".", "/")


def variable_name_to_token_path(variable_name: str) -> str:
    """Convert slash notation to dot notation."""
    return variable_name.replace("/", ".")


def paths_match(path1: str, path2: str) -> bool:
    """True when both paths normalize to the same string."""
    return normalize_path(path1) == normalize_path(path2)


def path_ends_with(full_path: str, suffix: str) -> bool:
    """True when full_path equals suffix or ends with it on a segment boundary.

    Example:
        >>> path_ends_with("brand/colors/primary", "colors.primary")
        True
        >>> path_ends_with("brand/colors/myprimary", "primary")
        False
    """
    normalized_full = normalize_path(full_path)
    normalized_suffix = normalize_path(suffix)
    if normalized_full == normalized_suffix:
        return True
    return normalized_full.endswith("/" + normalized_suffix)


def path_contains(full_path: str, part: str) -> bool:
    return normalize_path(part) in normalize_path(full_path)


def segment_count(path: str) -> int:
    """Number of segments in the normalized path."""
    normalized = normalize_path(path)
    return len(normalized.split("/")) if normalized else 0


def is_suffix_match(full_path: str, suffix: str, min_segments: int = 2) -> bool:
    """Segment-aligned suffix match that ignores too-short suffixes."""
    return segment_count(suffix) >= min_segments and path_ends_with(
        full_path, suffix
    )


def build_normalized_path_map(paths: list[str]) -> dict[str, str]:
    """Map normalized paths back to the original spelling."""
    return {normalize_path(path): path for path in paths}


def strip_common_prefix(normalized_path: str) -> str:
    """Strip a single common namespace prefix from a normalized path."""
    for prefix in COMMON_PREFIXES:
        if normalized_path.startswith(prefix):
            return normalized_path[len(prefix) :]
    return normalized_path


def find_matching_token_path(
    variable_name: str,
    token_paths: list[str],
    collection_name: str | None = None,
) -> str | None:
    """Find the token path a variable name corresponds to.

    Strategies, first hit wins:
    1. Direct match
    2. Collection-prefixed match
    3. Token path ends with the variable name
    4. Variable name ends with the token path
    5. Both match after stripping one common prefix from each
    6. Token path matches after stripping its common prefix

    Returns:
        The original (non-normalized) token path, or None.
    """
    normalized_name = normalize_path(variable_name)
    normalized_tokens = build_normalized_path_map(token_paths)

    if normalized_name in normalized_tokens:
        return normalized_tokens[normalized_name]

    if collection_name:
        with_collection = normalize_path(f"{collection_name}/{variable_name}")
        if with_collection in normalized_tokens:
            return normalized_tokens[with_collection]

    for normalized, original in normalized_tokens.items():
        if path_ends_with(normalized, normalized_name):
            return original

    for normalized, original in normalized_tokens.items():
        if path_ends_with(normalized_name, normalized):
            return original

    stripped_name = strip_common_prefix(normalized_name)
    if stripped_name != normalized_name:
        for normalized, original in normalized_tokens.items():
            if strip_common_prefix(normalized) == stripped_name:
                return original

    for normalized, original in normalized_tokens.items():
        stripped_token = strip_common_prefix(normalized)
        if stripped_token != normalized and stripped_token == normalized_name:
            return original

    return None


def _common_prefix_length(a: str, b: str) -> int:
    length = 0
    for ch_a, ch_b in zip(a, b, strict=False):
        if ch_a != ch_b:
            break
        length += 1
    return length


def score_path_similarity(path1: str, path2: str) -> float:
    """Score shared structure between two paths, 0 (none) to 1 (identical).

    Weighted parts:
    - 0.5 for the share of exact segments (longer than one character) in common
    - 0.3 for the run of equal segments from the head
    - 0.2 for the tail segment, partial when tails share over half a prefix
    """
    norm1 = normalize_path(path1)
    norm2 = normalize_path(path2)
    if norm1 == norm2:
        return 1.0

    segs1 = norm1.split("/")
    segs2 = norm2.split("/")
    max_len = max(len(segs1), len(segs2))
    if max_len == 0:
        return 0.0

    score = 0.0

    seg2_set = set(segs2)
    exact_matches = sum(1 for seg in segs1 if len(seg) > 1 and seg in seg2_set)
    score += (exact_matches / max_len) * 0.5

    head_matches = 0
    for seg_a, seg_b in zip(segs1, segs2, strict=False):
        if seg_a != seg_b:
            break
        head_matches += 1
    score += (head_matches / max_len) * 0.3

    tail1 = segs1[-1]
    tail2 = segs2[-1]
    if tail1 == tail2:
        score += 0.2
    elif tail1 and tail2:
        min_tail = min(len(tail1), len(tail2))
        common = _common_prefix_length(tail1, tail2)
        if common > min_tail * 0.5:
            score += (common / max(len(tail1), len(tail2))) * 0.2

    return min(score, 1.0)


def find_fuzzy_matching_token_paths(
    variable_name: str,
    token_paths: list[str],
    min_score: float = 0.4,
    max_results: int = 5,
) -> list[tuple[str, float]]:
    """Rank token paths by similarity to a variable name.

    Returns:
        (path, score) pairs, best first, at most max_results long.
    """
    results = []
    for token_path in token_paths:
        score = score_path_similarity(variable_name, token_path)
        if score >= min_score:
            results.append((token_path, score))

    results.sort(key=lambda item: item[1], reverse=True)
    return results[:max_results]
