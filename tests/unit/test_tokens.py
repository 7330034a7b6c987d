"""Unit tests for token file loading and the token catalog."""

import json

import pytest

from lint_roller.tokens.dtcg import (
    TokenFile,
    build_catalog,
    flatten_tokens,
    load_token_directory,
    order_files,
    parse_metadata,
)
from lint_roller.tokens.models import TokenType

CORE = {
    "color": {
        "blue": {"500": {"$value": "#3355FF", "$type": "color"}},
        "white": {"$value": "#ffffff", "$type": "color"},
    },
    "spacing": {
        "16": {"$value": "16px", "$type": "spacing"},
        "md": {"$value": 12, "$type": "dimension"},
    },
}

SEMANTIC = {
    "system": {
        "background": {
            "surface": {"$value": "{color.blue.500}", "$description": "Default surface"}
        },
        "spacing": {"gap": {"$value": "{spacing.16}"}},
    }
}


@pytest.fixture
def catalog():
    return build_catalog(
        [TokenFile("core.json", CORE), TokenFile("semantic.json", SEMANTIC)]
    )


class TestFlatten:
    """Test flattening nested token groups."""

    def test_flatten_skips_metadata_keys(self):
        """Test flattening skips $-prefixed keys."""
        flat = flatten_tokens({"$schema": "x", "a": {"b": {"$value": 1}}}, "f.json")
        assert list(flat) == ["a.b"]
        assert flat["a.b"].source_file == "f.json"

    def test_order_files_by_token_set_order(self):
        """Test files follow tokenSetOrder with the rest appended."""
        files = [TokenFile("a.json", {}), TokenFile("b.json", {}), TokenFile("c.json", {})]
        ordered = order_files(files, ["c", "a"])
        assert [f.path for f in ordered] == ["c.json", "a.json", "b.json"]

    def test_parse_metadata(self):
        """Test reading tokenSetOrder from metadata."""
        assert parse_metadata({"tokenSetOrder": ["core", "semantic"]}) == ["core", "semantic"]
        assert parse_metadata({}) is None


class TestCatalog:
    """Test catalog construction."""

    def test_resolves_aliases_and_infers_type(self, catalog):
        """Test aliases resolve and token types are inferred."""
        surface = catalog.get("system.background.surface")

        assert surface.resolved_value == "#3355ff"
        assert surface.type is TokenType.COLOR
        assert surface.is_alias
        assert surface.alias_path == "color.blue.500"
        assert surface.description == "Default surface"

    def test_dimension_strings_parse_to_numbers(self, catalog):
        """Test pixel strings parse to numbers."""
        assert catalog.get("spacing.16").resolved_value == 16.0
        assert catalog.get("spacing.16").type is TokenType.DIMENSION
        assert catalog.get("system.spacing.gap").resolved_value == 16.0

    def test_semantic_path_preferred_for_color(self, catalog):
        """Test semantic paths are preferred for a color."""
        assert catalog.color_values["#3355ff"] == "system.background.surface"
        assert catalog.all_color_paths["#3355ff"] == [
            "system.background.surface",
            "color.blue.500",
        ]
        assert "#3355ff" in catalog.color_lab

    def test_number_values_semantic_first(self, catalog):
        """Test number lookups list semantic paths first."""
        assert catalog.number_values[16.0] == ["system.spacing.gap", "spacing.16"]
        assert catalog.number_values[12.0] == ["spacing.md"]

    def test_alias_chain(self, catalog):
        """Test the alias chain of a token."""
        assert catalog.alias_chain("system.background.surface") == ["color.blue.500"]
        assert catalog.alias_chain("color.white") == []

    def test_later_sets_override(self):
        """Test later token sets override earlier ones."""
        catalog = build_catalog(
            [
                TokenFile("base.json", {"color": {"$value": "#000000", "$type": "color"}}),
                TokenFile("theme.json", {"color": {"$value": "#ffffff", "$type": "color"}}),
            ]
        )
        assert catalog.get("color").resolved_value == "#ffffff"

    def test_dangling_alias_is_unresolved(self):
        """Test a dangling alias leaves the token unresolved."""
        catalog = build_catalog(
            [TokenFile("a.json", {"broken": {"$value": "{missing}", "$type": "color"}})]
        )
        token = catalog.get("broken")

        assert token is not None
        assert not token.is_resolved
        assert catalog.color_values == {}


class TestLoadDirectory:
    """Test loading token sets from disk."""

    def test_load_directory_honors_metadata(self, tmp_path):
        """Test loading a directory applies $metadata.json order."""
        (tmp_path / "core.json").write_text(json.dumps(CORE))
        (tmp_path / "override.json").write_text(
            json.dumps({"color": {"white": {"$value": "#fefefe", "$type": "color"}}})
        )
        (tmp_path / "$metadata.json").write_text(
            json.dumps({"tokenSetOrder": ["override", "core"]})
        )

        catalog = load_token_directory(tmp_path)

        # core comes last, so its value wins
        assert catalog.get("color.white").resolved_value == "#ffffff"
        assert len(catalog) == 4
