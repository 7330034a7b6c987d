"""Unit tests for path normalization and token path matching."""

import pytest

from lint_roller.paths import (
    find_fuzzy_matching_token_paths,
    find_matching_token_path,
    is_suffix_match,
    normalize_path,
    path_contains,
    path_ends_with,
    paths_match,
    score_path_similarity,
    segment_count,
    strip_common_prefix,
    token_path_to_variable_name,
    variable_name_to_token_path,
)


class TestNormalizePath:
    """Test normalize_path."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("brand.colors.primary", "brand/colors/primary"),
            ("Brand / Colors / Primary", "brand/colors/primary"),
            ("/system/background/", "system/background"),
            ("Spacing / Extra Large", "spacing/extra-large"),
            ("", ""),
        ],
    )
    def test_normalizes(self, raw, expected):
        """Dots, spaced slashes, case and whitespace are normalized."""
        assert normalize_path(raw) == expected

    def test_notation_conversion(self):
        """Dot and slash notations convert both ways."""
        assert token_path_to_variable_name("a.b.c") == "a/b/c"
        assert variable_name_to_token_path("a/b/c") == "a.b.c"

    def test_paths_match_across_notations(self):
        """Test dot and slash spellings of a path compare equal."""
        assert paths_match("System.Background.Surface", "system / background / surface")
        assert not paths_match("system.background", "system.foreground")


class TestSuffixes:
    """Test segment-aligned suffix matching."""

    def test_path_ends_with_on_segment_boundary(self):
        """Test suffix matching on whole segments."""
        assert path_ends_with("brand/colors/primary", "colors.primary")
        assert path_ends_with("brand/colors/primary", "brand/colors/primary")

    def test_path_ends_with_rejects_partial_segment(self):
        """A suffix must start at a segment boundary."""
        assert not path_ends_with("brand/colors/myprimary", "primary")

    def test_is_suffix_match_requires_two_segments(self):
        """Test suffix matches need at least two segments."""
        assert is_suffix_match("system/background/surface", "background/surface")
        assert not is_suffix_match("system/background/surface", "surface")

    def test_segment_count(self):
        """Test segment counting."""
        assert segment_count("a.b.c") == 3
        assert segment_count("") == 0

    def test_path_contains(self):
        """Test case-insensitive segment containment."""
        assert path_contains("system/background/surface", "Background")


class TestFindMatchingTokenPath:
    """Test the token path lookup strategies."""

    def test_direct_match_returns_original_spelling(self):
        """Test a direct match returns the token path as written."""
        tokens = ["Brand.Colors.Primary"]
        assert find_matching_token_path("brand/colors/primary", tokens) == "Brand.Colors.Primary"

    def test_collection_prefixed_match(self):
        """Test the collection name can prefix the variable name."""
        tokens = ["core.blue.500"]
        assert find_matching_token_path("blue/500", tokens, collection_name="Core") == "core.blue.500"

    def test_token_ends_with_variable_name(self):
        """Test a token path ending with the variable name matches."""
        assert find_matching_token_path("background/surface", ["system.background.surface"]) == (
            "system.background.surface"
        )

    def test_common_prefix_stripped_from_both(self):
        """Test a shared top-level prefix is stripped before comparing."""
        tokens = ["core.blue.500"]
        assert find_matching_token_path("colors/blue/500", tokens) == "core.blue.500"

    def test_no_match(self):
        """Test unrelated paths do not match."""
        assert find_matching_token_path("unknown/name", ["a.b"]) is None


class TestSimilarity:
    """Test path similarity scoring."""

    def test_identical_paths_score_one(self):
        """Test identical paths score 1."""
        assert score_path_similarity("a.b.c", "a/b/c") == 1.0

    def test_disjoint_paths_score_zero(self):
        """Test paths with no shared segments score 0."""
        assert score_path_similarity("alpha/beta", "gamma/delta") == 0.0

    def test_shared_structure_scores_between(self):
        """Test partially shared paths score between 0.5 and 1."""
        score = score_path_similarity("system/background/surface", "system/background/subtle")
        assert 0.5 < score < 1.0

    def test_fuzzy_matches_sorted_and_capped(self):
        """Test fuzzy matches sort by score and respect the cap."""
        tokens = ["system.background.surface", "system.background.subtle", "core.red"]
        results = find_fuzzy_matching_token_paths("system/background/surface", tokens, max_results=2)

        assert [path for path, _ in results] == [
            "system.background.surface",
            "system.background.subtle",
        ]
        assert results[0][1] == 1.0

    def test_strip_common_prefix_strips_one_level(self):
        """Test only known prefixes are stripped, one level deep."""
        assert strip_common_prefix("system/background") == "background"
        assert strip_common_prefix("brand/background") == "brand/background"
