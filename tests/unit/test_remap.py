"""Unit tests for stale/broken binding detection and remapping."""

import pytest

from lint_roller.config.models import EngineConfig
from lint_roller.document.models import RGBA, ResolvedType, ScanScope, Variable, VariableCollection
from lint_roller.remap.models import (
    BindingState,
    MatchMethod,
    RemapConfidence,
    RemapPair,
    RemapScanResult,
)
from lint_roller.session import LintSession
from tests.conftest import MODE, solid


def add_remote_blue(store, collection_name: str = "Core") -> Variable:
    """A variable from an old library import, named like a local one."""
    collection = VariableCollection("rc-old", collection_name, MODE, [MODE])
    variable = Variable(
        "r-blue", "color/blue/500", "rc-old", ResolvedType.COLOR, {MODE: RGBA(0.2, 1 / 3, 1)}
    )
    return store.add_remote_variable(variable, collection)


@pytest.fixture
def broken_document(design_system):
    """One stale, two broken and one healthy paint binding."""
    add_remote_blue(design_system.store)
    design_system.node("n1", fills=[solid("#3355ff", bound="r-blue")])
    design_system.node("n2", fills=[solid("#3355ff", bound="gone-1")])
    design_system.node("n3", fills=[solid("#3355ff", bound="gone-1")])
    design_system.node("n4", fills=[solid("#ffffff", bound="v-white")])
    return design_system


class TestScan:
    """Test classifying and grouping bindings."""

    @pytest.mark.asyncio
    async def test_counts_and_grouping(self, broken_document, session):
        """Test scan counts and grouping by old variable."""
        result = await session.scan_for_broken_bindings()

        assert result.error is None
        assert result.total_bindings == 4
        assert result.valid_bindings == 1
        assert result.stale_bindings == 1
        assert result.broken_bindings == 2
        assert [e.old_variable_id for e in result.remap_entries] == ["gone-1", "r-blue"]
        assert result.remap_entries[0].usage_count == 2

    @pytest.mark.asyncio
    async def test_stale_suggestion_by_name(self, broken_document, session):
        """Test stale bindings are matched by name."""
        result = await session.scan_for_broken_bindings()
        stale = next(e for e in result.remap_entries if e.kind is BindingState.STALE)

        assert stale.old_variable_name == "color/blue/500"
        assert stale.old_collection_name == "core"
        assert stale.suggested_variable.id == "v-blue"
        assert stale.suggested_variable.match_method is MatchMethod.NAME
        assert stale.suggested_variable.confidence is RemapConfidence.HIGH

    @pytest.mark.asyncio
    async def test_broken_suggestion_by_value(self, broken_document, session):
        """Test broken bindings are matched by value with high confidence."""
        result = await session.scan_for_broken_bindings()
        broken = result.remap_entries[0]

        assert broken.kind is BindingState.BROKEN
        assert broken.current_value == "#3355ff"
        assert broken.property_hint == "fills[0]"
        assert broken.node_type_hint == "FRAME"
        assert broken.suggested_variable.id == "v-surface"
        assert broken.suggested_variable.match_method is MatchMethod.VALUE
        assert broken.suggested_variable.confidence is RemapConfidence.HIGH

    @pytest.mark.asyncio
    async def test_broken_number_uses_close_value(self, design_system, session):
        """Test broken numbers fall back to a close value."""
        design_system.node("n1", numbers={"paddingTop": 15.5}, bound={"paddingTop": "gone-2"})

        result = await session.scan_for_broken_bindings()
        entry = result.remap_entries[0]

        assert entry.current_value == "15.5"
        assert entry.suggested_variable.id == "v-space-md"
        assert entry.suggested_variable.confidence is RemapConfidence.MEDIUM

    @pytest.mark.asyncio
    async def test_deleted_variable_prefers_its_old_collection(self, design_system, session):
        """Test a deleted variable's old collection is preferred."""
        design_system.color("v-legacy", "color/legacy", "c-core", "#3355ff")
        design_system.node("n1", fills=[solid("#3355ff", bound="v-legacy")])
        await session.index_cache.get()

        design_system.store.delete_variable("v-legacy")
        session.index_cache.invalidate()
        result = await session.scan_for_broken_bindings()

        suggestion = result.remap_entries[0].suggested_variable
        assert suggestion.id == "v-blue"
        assert suggestion.collection == "core"
        assert suggestion.confidence is RemapConfidence.MEDIUM

    @pytest.mark.asyncio
    async def test_stale_prefers_same_collection(self, design_system, session):
        """Test stale suggestions prefer the same collection."""
        design_system.collection("c-brand", "Brand")
        design_system.color("v-brand-blue", "color/blue/500", "c-brand", "#3355ff")
        add_remote_blue(design_system.store, collection_name="Brand")
        design_system.node("n1", fills=[solid("#3355ff", bound="r-blue")])

        result = await session.scan_for_broken_bindings()

        assert result.remap_entries[0].suggested_variable.id == "v-brand-blue"

    @pytest.mark.asyncio
    async def test_remote_variable_without_local_twin_is_healthy(self, design_system, session):
        """Test remote variables without a local twin are healthy."""
        store = design_system.store
        store.add_remote_variable(
            Variable("r-lib", "brand/accent", "rc", ResolvedType.COLOR, {MODE: RGBA(0, 1, 0)})
        )
        design_system.node("n1", fills=[solid("#00ff00", bound="r-lib")])

        result = await session.scan_for_broken_bindings()

        assert result.valid_bindings == 1
        assert result.remap_entries == []

    @pytest.mark.asyncio
    async def test_selection_scope_and_progress(self, broken_document, session):
        """Test selection scope with progress reporting."""
        broken_document.store.selection = ["n2"]
        progress = []

        result = await session.scan_for_broken_bindings(
            ScanScope.SELECTION, lambda done, total: progress.append((done, total))
        )

        assert result.total_bindings == 1
        assert progress == [(1, 1)]

    @pytest.mark.asyncio
    async def test_progress_batches(self, design_system, clock):
        """Test progress fires per batch and at the end."""
        for i in range(5):
            design_system.node(f"n{i}")
        session = LintSession(
            design_system.store, config=EngineConfig(scan_yield_batch=2), clock=clock
        )
        progress = []

        await session.scan_for_broken_bindings(
            on_progress=lambda done, total: progress.append(done)
        )

        assert progress == [2, 4, 5]

    @pytest.mark.asyncio
    async def test_scan_failure_is_reported(self, session, monkeypatch):
        """Test scan failures are reported in the result."""
        async def explode(scope):
            raise RuntimeError("document closed")

        monkeypatch.setattr(session.store, "get_scope_nodes", explode)

        result = await session.scan_for_broken_bindings()

        assert isinstance(result, RemapScanResult)
        assert result.error == "document closed"
        assert result.to_dict()["error"] == "document closed"


class TestApply:
    """Test rebinding confirmed remaps."""

    @pytest.mark.asyncio
    async def test_rebinds_every_usage(self, broken_document, session):
        """Test applying a remap rebinds every usage."""
        store = broken_document.store
        progress = []

        result = await session.apply_remaps(
            [RemapPair("gone-1", "v-surface")], lambda done, total: progress.append(done)
        )

        assert result.remapped == 2
        assert result.failed == 0
        for node_id in ("n2", "n3"):
            assert (await store.get_node(node_id)).fills[0].bound_variable_id == "v-surface"
        assert (await store.get_node("n1")).fills[0].bound_variable_id == "r-blue"
        assert progress == [4]

    @pytest.mark.asyncio
    async def test_rebinds_numbers(self, design_system, session):
        """Test remaps cover numeric bindings."""
        node = design_system.node("n1", numbers={"paddingTop": 16}, bound={"paddingTop": "gone"})

        result = await session.apply_remaps([RemapPair("gone", "v-space-md")])

        assert result.remapped == 1
        assert node.bound_variables["paddingTop"] == "v-space-md"

    @pytest.mark.asyncio
    async def test_unresolved_new_variable(self, broken_document, session):
        """Test a missing new variable fails the pair."""
        result = await session.apply_remaps([RemapPair("gone-1", "nope")])

        assert result.remapped == 0
        assert result.failed == 2
        assert result.errors[0] == "Failed to resolve new variable: nope"
        assert "n2.fills[0]: new variable not resolved" in result.errors

    @pytest.mark.asyncio
    async def test_write_failures_are_collected(self, broken_document, session):
        """Test write failures are collected per binding."""
        (await broken_document.store.get_node("n3")).locked = True

        result = await session.apply_remaps([RemapPair("gone-1", "v-surface")])

        assert result.remapped == 1
        assert result.failed == 1
        assert result.errors[0].startswith("n3.fills[0]: Fill bind failed")

    def test_pair_from_dict(self):
        """Test RemapPair loads from camelCase dicts."""
        pair = RemapPair.from_dict({"oldVariableId": "a", "newVariableId": "b"})
        assert pair == RemapPair("a", "b")
