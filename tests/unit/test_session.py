"""Unit tests for LintSession message dispatch."""

import pytest

from tests.conftest import solid


class TestDispatch:
    """Test UI message handling."""

    @pytest.mark.asyncio
    async def test_apply_fix(self, design_system, session):
        """Test APPLY_FIX answers with FIX_APPLIED."""
        design_system.node("n1", fills=[solid("#3355ff")])

        response = await session.dispatch(
            {
                "type": "APPLY_FIX",
                "nodeId": "n1",
                "property": "fills[0]",
                "tokenPath": "system.background.surface",
                "ruleId": "no-hardcoded-colors",
            }
        )

        assert response == {
            "type": "FIX_APPLIED",
            "nodeId": "n1",
            "property": "fills[0]",
            "success": True,
            "beforeValue": "#3355ff",
            "afterValue": "system/background/surface",
            "actionType": "rebind",
        }

    @pytest.mark.asyncio
    async def test_bulk_fix_emits_progress(self, design_system, session):
        """Test APPLY_BULK_FIX emits FIX_PROGRESS per item."""
        design_system.node("n1", fills=[solid("#ffffff")])
        emitted = []

        response = await session.dispatch(
            {
                "type": "APPLY_BULK_FIX",
                "fixes": [
                    {
                        "nodeId": "n1",
                        "property": "fills[0]",
                        "tokenPath": "color.white",
                        "ruleId": "no-hardcoded-colors",
                    },
                    {
                        "nodeId": "n2",
                        "property": "fills[0]",
                        "tokenPath": "color.white",
                        "ruleId": "no-hardcoded-colors",
                    },
                ],
            },
            emit=emitted.append,
        )

        assert response["type"] == "BULK_FIX_COMPLETE"
        assert response["successful"] == 1
        assert response["failed"] == 1
        assert len(response["actions"]) == 2
        assert [m["type"] for m in emitted] == ["FIX_PROGRESS", "FIX_PROGRESS"]
        assert emitted[0]["currentAction"]["nodeId"] == "n1"

    @pytest.mark.asyncio
    async def test_unbind_and_detach(self, design_system, session):
        """Test UNBIND_VARIABLE and DETACH_STYLE responses."""
        design_system.style("s-stroke", "Border")
        design_system.node(
            "n1",
            fills=[solid("#ffffff", bound="v-white")],
            strokes=[solid("#000000")],
            styles={"strokeStyle": "s-stroke"},
        )

        unbound = await session.dispatch(
            {"type": "UNBIND_VARIABLE", "nodeId": "n1", "property": "fills[0]"}
        )
        detached = await session.dispatch(
            {"type": "DETACH_STYLE", "nodeId": "n1", "property": "strokeStyle"}
        )

        assert unbound["actionType"] == "unbind"
        assert detached["message"] == "Stroke style detached"

    @pytest.mark.asyncio
    async def test_bulk_detach(self, design_system, session):
        """Test BULK_DETACH_STYLES answers with a summary."""
        design_system.style("s-fill", "Fill")
        design_system.node("n1", fills=[], styles={"fillStyle": "s-fill"})

        response = await session.dispatch(
            {
                "type": "BULK_DETACH_STYLES",
                "detaches": [{"nodeId": "n1", "property": "fillStyle"}],
            }
        )

        assert response == {
            "type": "BULK_DETACH_COMPLETE",
            "successful": 1,
            "failed": 0,
            "errors": [],
            "cancelled": False,
        }

    @pytest.mark.asyncio
    async def test_apply_text_style(self, design_system, session):
        """Test APPLY_TEXT_STYLE applies the style by id."""
        design_system.style("ts-h1", "Heading", type="TEXT")
        design_system.node("t1", type="TEXT")

        response = await session.dispatch(
            {"type": "APPLY_TEXT_STYLE", "nodeId": "t1", "textStyleId": "ts-h1"}
        )

        assert response["success"]
        assert response["afterValue"] == "Heading"

    @pytest.mark.asyncio
    async def test_scan_and_remap(self, design_system, session):
        """Test a scan followed by APPLY_REMAPS with progress messages."""
        design_system.node("n1", fills=[solid("#3355ff", bound="gone")])
        emitted = []

        scan = await session.dispatch(
            {"type": "SCAN_BROKEN_BINDINGS", "scope": {"type": "full_document"}},
            emit=emitted.append,
        )
        entry = scan["result"]["remapEntries"][0]
        remap = await session.dispatch(
            {
                "type": "APPLY_REMAPS",
                "remaps": [
                    {
                        "oldVariableId": entry["oldVariableId"],
                        "newVariableId": entry["suggestedVariable"]["id"],
                    }
                ],
            },
            emit=emitted.append,
        )

        assert scan["type"] == "REMAP_SCAN_COMPLETE"
        assert entry["kind"] == "broken"
        assert remap == {"type": "REMAP_COMPLETE", "remapped": 1, "failed": 0, "errors": []}
        assert [m["type"] for m in emitted] == ["REMAP_SCAN_PROGRESS", "REMAP_PROGRESS"]

    @pytest.mark.asyncio
    async def test_select_node(self, design_system, session):
        """Test SELECT_NODE for found and missing nodes."""
        design_system.node("n1")

        found = await session.dispatch({"type": "SELECT_NODE", "nodeId": "n1"})
        missing = await session.dispatch({"type": "SELECT_NODE", "nodeId": "nope"})

        assert found == {"type": "NODE_SELECTED", "nodeId": "n1", "success": True}
        assert missing["success"] is False
        assert design_system.store.selection == ["n1"]

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_messages(self, session):
        """Test unknown and malformed messages answer with ERROR."""
        unknown = await session.dispatch({"type": "DANCE"})
        malformed = await session.dispatch({"type": "APPLY_FIX", "nodeId": "n1"})
        bad_scope = await session.dispatch({"type": "SCAN_BROKEN_BINDINGS", "scope": "galaxy"})

        assert unknown == {"type": "ERROR", "message": "Unknown message type: DANCE"}
        assert malformed["type"] == "ERROR"
        assert malformed["message"].startswith("Malformed APPLY_FIX message")
        assert bad_scope["type"] == "ERROR"
