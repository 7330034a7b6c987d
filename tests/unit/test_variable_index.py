"""Unit tests for the variable index, its TTL cache and the library cache."""

import pytest

from lint_roller.document.memory import InMemoryDocumentStore
from lint_roller.document.models import (
    RGBA,
    LibraryCollection,
    ResolvedType,
    Variable,
    VariableCollection,
)
from lint_roller.variables.classify import VariableKind, classify
from lint_roller.variables.index import VariableIndexCache, load_variable_index
from lint_roller.variables.library import LibraryVariableCache


class TestClassify:
    """Test semantic/core/component classification."""

    @pytest.mark.parametrize(
        "name,collection,expected",
        [
            ("color/blue/500", "core", VariableKind.CORE),
            ("system/background/surface", "core", VariableKind.SEMANTIC),
            ("background/surface", "system", VariableKind.SEMANTIC),
            ("text/primary", "semantic-colors", VariableKind.SEMANTIC),
            ("component/button/bg", "core", VariableKind.COMPONENT),
            ("button/bg", "component-tokens", VariableKind.COMPONENT),
        ],
    )
    def test_classify(self, name, collection, expected):
        """Test variable classification by name and collection."""
        assert classify(name, collection) is expected


class TestVariableIndex:
    """Test index construction from the store."""

    @pytest.mark.asyncio
    async def test_color_bucket_semantic_first(self, design_system):
        """Aliased variables resolve, and non-core variables lead the bucket."""
        index = await load_variable_index(design_system.store)
        bucket = index.by_resolved_color["#3355ff"]

        assert {v.id for v in bucket} == {"v-blue", "v-surface", "v-button-bg"}
        assert bucket[-1].id == "v-blue"
        assert index.resolved_color_by_id["v-surface"] == "#3355ff"

    @pytest.mark.asyncio
    async def test_number_bucket_semantic_first(self, design_system):
        """Test number buckets list semantic variables first."""
        index = await load_variable_index(design_system.store)

        assert [v.id for v in index.by_resolved_number[16.0]] == ["v-space-md", "v-space-16"]
        assert index.resolved_number_by_id["v-radius-4"] == 4.0

    @pytest.mark.asyncio
    async def test_paths_and_kinds(self, design_system):
        """Test full paths, names and kinds in the index."""
        index = await load_variable_index(design_system.store)

        assert index.by_full_path["core/color/blue/500"].id == "v-blue"
        assert index.by_full_path["system/system/background/surface"].id == "v-surface"
        assert [v.id for v in index.by_name["color/blue/500"]] == ["v-blue"]
        assert index.kinds["v-surface"] is VariableKind.SEMANTIC
        assert index.kinds["v-button-bg"] is VariableKind.COMPONENT
        assert index.kinds["v-blue"] is VariableKind.CORE

    @pytest.mark.asyncio
    async def test_unresolvable_alias_indexed_by_name_only(self, factory):
        """Test unresolvable aliases are indexed by name only."""
        factory.collection("c-core", "Core")
        factory.color("v-orphan", "color/orphan", "c-core", alias_of="v-deleted")

        index = await load_variable_index(factory.store)

        assert "color/orphan" in index.by_name
        assert "v-orphan" not in index.resolved_color_by_id

    @pytest.mark.asyncio
    async def test_variables_without_values_are_skipped(self, factory):
        """Test variables without values are left out of the index."""
        factory.collection("c-core", "Core")
        factory.store.add_variable(Variable("v-empty", "empty", "c-core", ResolvedType.COLOR))

        index = await load_variable_index(factory.store)

        assert "v-empty" not in index.variables_by_id


class TestVariableIndexCache:
    """Test TTL and invalidation of the session index."""

    @pytest.mark.asyncio
    async def test_reuses_index_within_ttl(self, design_system, clock):
        """Test the index is reused within its TTL."""
        cache = VariableIndexCache(design_system.store, clock=clock, ttl_seconds=5.0)

        first = await cache.get()
        clock.advance(4.9)
        second = await cache.get()

        assert first is second
        assert cache.builds == 1

    @pytest.mark.asyncio
    async def test_rebuilds_after_ttl(self, design_system, clock):
        """Test the index rebuilds after its TTL."""
        cache = VariableIndexCache(design_system.store, clock=clock, ttl_seconds=5.0)

        await cache.get()
        clock.advance(5.0)
        assert cache.is_stale()
        await cache.get()

        assert cache.builds == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_rebuild(self, design_system, clock):
        """Test invalidation forces a rebuild."""
        cache = VariableIndexCache(design_system.store, clock=clock)
        await cache.get()

        design_system.color("v-red", "color/red", "c-core", "#ff0000")
        cache.invalidate()
        index = await cache.get()

        assert "#ff0000" in index.by_resolved_color

    @pytest.mark.asyncio
    async def test_remembers_collections_of_deleted_variables(self, design_system, clock):
        """Test collections of deleted variables are remembered."""
        cache = VariableIndexCache(design_system.store, clock=clock)
        await cache.get()

        design_system.store.delete_variable("v-surface")
        cache.invalidate()
        await cache.get()

        assert cache.last_known_collection("v-surface") == "system"
        assert cache.last_known_collection("never-seen") is None


class FailingLibraryStore(InMemoryDocumentStore):
    async def get_library_collections(self):
        raise RuntimeError("library service unavailable")


class TestLibraryVariableCache:
    """Test the library variable map."""

    @pytest.mark.asyncio
    async def test_maps_normalized_names(self, clock):
        """Test library variables are keyed by normalized name."""
        store = InMemoryDocumentStore()
        source = VariableCollection("rc", "Brand", "m", ["m"])
        store.add_library_collection(
            LibraryCollection("lib-1", "Brand", "Brand Library"),
            [
                Variable(
                    "lv-1",
                    "Brand / Primary",
                    "rc",
                    ResolvedType.COLOR,
                    {"m": RGBA(1, 0, 0)},
                    key="k1",
                )
            ],
            source,
        )

        cache = LibraryVariableCache(store, clock=clock)
        variable_map = await cache.get()

        entry = variable_map["brand/primary"][0]
        assert entry.key == "k1"
        assert entry.collection_name == "Brand"

    @pytest.mark.asyncio
    async def test_failure_degrades_to_empty_map(self, clock):
        """Test a failing library read degrades to an empty map."""
        cache = LibraryVariableCache(FailingLibraryStore(), clock=clock)
        assert await cache.get() == {}

    @pytest.mark.asyncio
    async def test_ttl(self, clock):
        """Test the library cache TTL."""
        cache = LibraryVariableCache(InMemoryDocumentStore(), clock=clock, ttl_seconds=30.0)
        await cache.get()

        clock.advance(29)
        assert not cache.is_stale()
        clock.advance(1)
        assert cache.is_stale()
