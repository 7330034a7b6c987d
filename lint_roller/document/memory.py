"""In-memory DocumentStore over plain objects and JSON snapshots.

Behaves like the host for the operations the engine uses: bound paints and
numeric fields render the bound variable's default-mode value, locked nodes
and unsupported fields reject writes, and imported library variables become
resolvable by id.
"""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any

from ..errors import DocumentStoreError, StoreWriteError
from ..lint_logging import get_logger
from ..variables.aliases import VariableAliasResolver
from .capabilities import CORNER_FIELDS, STYLE_PROPERTIES, resolve_capabilities
from .models import (
    RGBA,
    LibraryCollection,
    LibraryVariable,
    Node,
    Paint,
    ResolvedType,
    ScanScope,
    Style,
    Variable,
    VariableCollection,
)
from .store import DocumentStore

logger = get_logger()


class Page:
    """A top-level page of the document."""

    def __init__(self, id: str, name: str, children: list[Node] | None = None):
        self.id = id
        self.name = name
        self.children = children or []

    def walk(self):
        for child in self.children:
            yield from child.walk()


class InMemoryDocumentStore(DocumentStore):
    """DocumentStore backed by Python objects.

    Attributes:
        writes: Log of successful mutations as (operation, node_id, target) tuples.
    """

    def __init__(
        self,
        pages: list[Page] | None = None,
        variables: list[Variable] | None = None,
        collections: list[VariableCollection] | None = None,
        styles: list[Style] | None = None,
        current_page_id: str | None = None,
        selection: list[str] | None = None,
    ):
        self.pages = pages or [Page("page-1", "Page 1")]
        self.current_page_id = current_page_id or self.pages[0].id
        self.selection: list[str] = list(selection or [])

        self.local_variables: dict[str, Variable] = {v.id: v for v in variables or []}
        self.local_collections: dict[str, VariableCollection] = {
            c.id: c for c in collections or []
        }
        self.remote_variables: dict[str, Variable] = {}
        self.remote_collections: dict[str, VariableCollection] = {}
        self.styles: dict[str, Style] = {s.id: s for s in styles or []}

        self.library_collections: list[LibraryCollection] = []
        self.library_variables: dict[str, list[LibraryVariable]] = {}
        self.library_sources: dict[str, tuple[VariableCollection, list[Variable]]] = {}
        self._importable: dict[str, tuple[Variable, VariableCollection]] = {}

        self.writes: list[tuple[str, str, str]] = []

    # Setup helpers

    def add_node(self, node: Node, page_id: str | None = None) -> Node:
        page = self._page(page_id or self.current_page_id)
        page.children.append(node)
        return node

    def add_variable(self, variable: Variable) -> Variable:
        self.local_variables[variable.id] = variable
        return variable

    def add_collection(self, collection: VariableCollection) -> VariableCollection:
        self.local_collections[collection.id] = collection
        return collection

    def add_remote_variable(
        self, variable: Variable, collection: VariableCollection | None = None
    ) -> Variable:
        """Register a variable that resolves by id but is not local."""
        self.remote_variables[variable.id] = variable
        if collection is not None:
            self.remote_collections[collection.id] = collection
        return variable

    def delete_variable(self, variable_id: str) -> None:
        """Remove a variable everywhere, leaving bindings to it broken."""
        self.local_variables.pop(variable_id, None)
        self.remote_variables.pop(variable_id, None)

    def add_library_collection(
        self,
        collection: LibraryCollection,
        variables: list[Variable],
        source_collection: VariableCollection,
    ) -> None:
        """Publish variables in a team library collection for import by key."""
        if collection.key not in self.library_sources:
            self.library_collections.append(collection)
        source = self.library_sources.setdefault(collection.key, (source_collection, []))
        source[1].extend(variables)
        entries = self.library_variables.setdefault(collection.key, [])
        for variable in variables:
            entries.append(
                LibraryVariable(
                    key=variable.key,
                    name=variable.name,
                    resolved_type=variable.resolved_type,
                    collection_name=collection.name,
                )
            )
            self._importable[variable.key] = (variable, source_collection)

    # Reads

    def _page(self, page_id: str) -> Page:
        for page in self.pages:
            if page.id == page_id:
                return page
        raise DocumentStoreError(f"Page not found: {page_id}")

    def _find(self, node_id: str) -> Node | None:
        for page in self.pages:
            for node in page.walk():
                if node.id == node_id:
                    return node
        return None

    async def get_node(self, node_id: str) -> Node | None:
        return self._find(node_id)

    async def get_scope_nodes(self, scope: ScanScope) -> list[Node]:
        if scope is ScanScope.SELECTION:
            nodes: list[Node] = []
            for node_id in self.selection:
                node = self._find(node_id)
                if node is not None:
                    nodes.extend(node.walk())
            return nodes
        if scope is ScanScope.CURRENT_PAGE:
            return list(self._page(self.current_page_id).walk())
        return [node for page in self.pages for node in page.walk()]

    async def get_local_variables(self) -> list[Variable]:
        return list(self.local_variables.values())

    async def get_local_collections(self) -> list[VariableCollection]:
        return list(self.local_collections.values())

    async def get_variable(self, variable_id: str) -> Variable | None:
        return self.local_variables.get(variable_id) or self.remote_variables.get(variable_id)

    async def get_collection(self, collection_id: str) -> VariableCollection | None:
        return self.local_collections.get(collection_id) or self.remote_collections.get(
            collection_id
        )

    async def get_style(self, style_id: str) -> Style | None:
        return self.styles.get(style_id)

    async def get_library_collections(self) -> list[LibraryCollection]:
        return list(self.library_collections)

    async def get_library_variables(self, collection_key: str) -> list[LibraryVariable]:
        return list(self.library_variables.get(collection_key, []))

    # Writes

    async def import_variable_by_key(self, key: str) -> Variable:
        if key not in self._importable:
            raise DocumentStoreError(f"No library variable with key {key}")
        variable, collection = self._importable[key]
        self.add_remote_variable(variable, collection)
        self.writes.append(("import", "", variable.id))
        logger.debug(f"Imported library variable {variable.name} ({key})")
        return variable

    def _writable(self, node_id: str) -> Node:
        node = self._find(node_id)
        if node is None:
            raise StoreWriteError(node_id, f"Node not found: {node_id}")
        if node.locked:
            raise StoreWriteError(node_id, f"Node {node.name} is locked")
        return node

    def _resolver(self) -> VariableAliasResolver:
        variables = {**self.remote_variables, **self.local_variables}
        modes = {
            c.id: c.default_mode_id
            for c in [*self.remote_collections.values(), *self.local_collections.values()]
        }
        return VariableAliasResolver(variables, modes)

    async def set_paints(self, node_id: str, kind: str, paints: list[Paint]) -> None:
        node = self._writable(node_id)
        if kind not in ("fills", "strokes") or getattr(node, kind) is None:
            raise StoreWriteError(node_id, f"{node.type} node has no {kind}")

        resolver = self._resolver()
        rendered: list[Paint] = []
        for paint in paints:
            paint = replace(paint)
            if paint.bound_variable_id:
                variable = await self.get_variable(paint.bound_variable_id)
                if variable is None or variable.resolved_type is not ResolvedType.COLOR:
                    raise StoreWriteError(
                        node_id, f"Cannot bind {paint.bound_variable_id} to a paint"
                    )
                color = resolver.resolve_color(variable)
                if color is not None:
                    paint.color = RGBA(color.r, color.g, color.b)
            rendered.append(paint)

        setattr(node, kind, rendered)
        self.writes.append(("set_paints", node_id, kind))

    async def set_bound_variable(
        self, node_id: str, field: str, variable_id: str | None
    ) -> None:
        node = self._writable(node_id)
        if not resolve_capabilities(node).supports_number(field):
            raise StoreWriteError(node_id, f"Field {field} is not bindable on {node.type}")

        if variable_id is None:
            node.bound_variables.pop(field, None)
            self.writes.append(("unbind", node_id, field))
            return

        variable = await self.get_variable(variable_id)
        if variable is None or variable.resolved_type is not ResolvedType.FLOAT:
            raise StoreWriteError(node_id, f"Cannot bind {variable_id} to {field}")

        node.bound_variables[field] = variable_id
        value = self._resolver().resolve_number(variable)
        if value is not None:
            node.numbers[field] = value
            self._sync_uniform_radius(node)
        self.writes.append(("bind", node_id, field))

    def _sync_uniform_radius(self, node: Node) -> None:
        if "cornerRadius" not in node.numbers:
            return
        corners = {node.numbers.get(f) for f in CORNER_FIELDS}
        if len(corners) == 1 and None not in corners:
            node.numbers["cornerRadius"] = corners.pop()

    async def set_style(self, node_id: str, style_property: str, style_id: str) -> None:
        node = self._writable(node_id)
        if style_property not in STYLE_PROPERTIES:
            raise StoreWriteError(node_id, f"Unknown style slot {style_property}")
        if style_property == "textStyle" and node.type != "TEXT":
            raise StoreWriteError(node_id, "Text styles apply to text nodes only")
        if style_id and style_id not in self.styles:
            raise StoreWriteError(node_id, f"Style not found: {style_id}")
        if style_id:
            node.styles[style_property] = style_id
        else:
            node.styles.pop(style_property, None)
        self.writes.append(("set_style", node_id, style_property))

    async def select_node(self, node_id: str) -> Node | None:
        node = self._find(node_id)
        if node is not None:
            self.selection = [node_id]
        return node

    # Snapshots

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> InMemoryDocumentStore:
        """Load a document snapshot (camelCase JSON)."""
        pages = [
            Page(
                id=page["id"],
                name=page.get("name", page["id"]),
                children=[Node.from_dict(child) for child in page.get("children", [])],
            )
            for page in data.get("pages", [])
        ]
        store = cls(
            pages=pages or None,
            variables=[Variable.from_dict(v) for v in data.get("variables", [])],
            collections=[VariableCollection.from_dict(c) for c in data.get("collections", [])],
            styles=[Style.from_dict(s) for s in data.get("styles", [])],
            current_page_id=data.get("currentPageId"),
            selection=data.get("selection", []),
        )
        remote_collections = [
            VariableCollection.from_dict(c) for c in data.get("remoteCollections", [])
        ]
        for collection in remote_collections:
            store.remote_collections[collection.id] = collection
        for variable in data.get("remoteVariables", []):
            store.add_remote_variable(Variable.from_dict(variable))

        for library in data.get("libraries", []):
            source = VariableCollection.from_dict(library["collection"])
            store.add_library_collection(
                LibraryCollection(
                    key=library["key"],
                    name=library.get("name", source.name),
                    library_name=library.get("libraryName", ""),
                ),
                [Variable.from_dict(v) for v in library.get("variables", [])],
                source,
            )
        return store

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize the document, published libraries included."""
        return copy.deepcopy(
            {
                "pages": [
                    {
                        "id": page.id,
                        "name": page.name,
                        "children": [child.to_dict() for child in page.children],
                    }
                    for page in self.pages
                ],
                "currentPageId": self.current_page_id,
                "selection": list(self.selection),
                "collections": [c.to_dict() for c in self.local_collections.values()],
                "variables": [v.to_dict() for v in self.local_variables.values()],
                "remoteCollections": [c.to_dict() for c in self.remote_collections.values()],
                "remoteVariables": [v.to_dict() for v in self.remote_variables.values()],
                "styles": [s.to_dict() for s in self.styles.values()],
                "libraries": [
                    {
                        "key": library.key,
                        "name": library.name,
                        "libraryName": library.library_name,
                        "collection": self.library_sources[library.key][0].to_dict(),
                        "variables": [
                            v.to_dict() for v in self.library_sources[library.key][1]
                        ],
                    }
                    for library in self.library_collections
                ],
            }
        )
