"""
Shared fixtures for the lint-roller test suite.

Provides test fixtures for:
- In-memory documents built through a small factory
- A manual clock for cache TTL tests
- A session wired to the in-memory store
"""

import pytest

from lint_roller.color import hex_to_rgba
from lint_roller.document.memory import InMemoryDocumentStore
from lint_roller.document.models import (
    Node,
    Paint,
    ResolvedType,
    Style,
    Variable,
    VariableAlias,
    VariableCollection,
)
from lint_roller.session import LintSession
from lint_roller.utils.ttl import ManualClock

MODE = "mode-default"


def solid(hex_color: str, opacity: float = 1.0, bound: str | None = None) -> Paint:
    """Solid paint from a 6-digit hex, with the alpha carried by opacity."""
    return Paint(color=hex_to_rgba(hex_color), opacity=opacity, bound_variable_id=bound)


class DocumentFactory:
    """Builds variables, collections and nodes into one in-memory store."""

    def __init__(self) -> None:
        self.store = InMemoryDocumentStore()

    def collection(self, id: str, name: str) -> VariableCollection:
        return self.store.add_collection(VariableCollection(id, name, MODE, [MODE]))

    def color(
        self,
        id: str,
        name: str,
        collection_id: str,
        value: str | None = None,
        alias_of: str | None = None,
        key: str = "",
    ) -> Variable:
        raw = VariableAlias(alias_of) if alias_of else hex_to_rgba(value or "#000000")
        return self.store.add_variable(
            Variable(id, name, collection_id, ResolvedType.COLOR, {MODE: raw}, key=key)
        )

    def number(
        self,
        id: str,
        name: str,
        collection_id: str,
        value: float | None = None,
        alias_of: str | None = None,
        key: str = "",
    ) -> Variable:
        raw = VariableAlias(alias_of) if alias_of else float(value or 0)
        return self.store.add_variable(
            Variable(id, name, collection_id, ResolvedType.FLOAT, {MODE: raw}, key=key)
        )

    def style(self, id: str, name: str, type: str = "PAINT") -> Style:
        style = Style(id, name, type)
        self.store.styles[id] = style
        return style

    def node(
        self,
        id: str,
        type: str = "FRAME",
        name: str | None = None,
        fills: list[Paint] | None = None,
        strokes: list[Paint] | None = None,
        numbers: dict[str, float] | None = None,
        bound: dict[str, str] | None = None,
        styles: dict[str, str] | None = None,
        locked: bool = False,
        parent: Node | None = None,
    ) -> Node:
        node = Node(
            id=id,
            name=name or id,
            type=type,
            fills=fills,
            strokes=strokes,
            numbers=dict(numbers or {}),
            bound_variables=dict(bound or {}),
            styles=dict(styles or {}),
            locked=locked,
        )
        if parent is not None:
            parent.children.append(node)
        else:
            self.store.add_node(node)
        return node


@pytest.fixture
def factory() -> DocumentFactory:
    """Empty document factory."""
    return DocumentFactory()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1000.0)


@pytest.fixture
def design_system(factory: DocumentFactory) -> DocumentFactory:
    """Core, system and component collections sharing some values.

    - #3355ff: core color/blue/500, system/background/surface, component/button/bg
    - #ffffff: core color/white only
    - 16: core spacing/16 and system/spacing/md
    - 4: core radius/4 only
    """
    factory.collection("c-core", "Core")
    factory.collection("c-system", "System")
    factory.collection("c-component", "Component")

    factory.color("v-blue", "color/blue/500", "c-core", "#3355ff")
    factory.color("v-white", "color/white", "c-core", "#ffffff")
    factory.color("v-surface", "system/background/surface", "c-system", alias_of="v-blue")
    factory.color("v-button-bg", "component/button/bg", "c-component", alias_of="v-blue")

    factory.number("v-space-16", "spacing/16", "c-core", 16)
    factory.number("v-space-md", "system/spacing/md", "c-system", alias_of="v-space-16")
    factory.number("v-radius-4", "radius/4", "c-core", 4)
    return factory


@pytest.fixture
def session(design_system: DocumentFactory, clock: ManualClock) -> LintSession:
    """Session over the design_system document."""
    return LintSession(design_system.store, clock=clock)


@pytest.fixture
def session_for(clock: ManualClock):
    """Build a session over any factory's document."""

    def _session_for(factory: DocumentFactory) -> LintSession:
        return LintSession(factory.store, clock=clock)

    return _session_for
