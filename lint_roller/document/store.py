"""Abstract interface to the host document."""

from abc import ABC, abstractmethod

from .models import (
    LibraryCollection,
    LibraryVariable,
    Node,
    Paint,
    ScanScope,
    Style,
    Variable,
    VariableCollection,
)


class DocumentStore(ABC):
    """Async access to the document's nodes, variables and styles.

    Reads return None for missing entities. Writes raise StoreWriteError when
    the host rejects the mutation.
    """

    @abstractmethod
    async def get_node(self, node_id: str) -> Node | None:
        """Look up a node anywhere in the document."""
        pass

    @abstractmethod
    async def get_scope_nodes(self, scope: ScanScope) -> list[Node]:
        """All nodes in a scope, descendants included, depth first."""
        pass

    @abstractmethod
    async def get_local_variables(self) -> list[Variable]:
        pass

    @abstractmethod
    async def get_local_collections(self) -> list[VariableCollection]:
        pass

    @abstractmethod
    async def get_variable(self, variable_id: str) -> Variable | None:
        """Resolve a variable id, including remote or cached library variables."""
        pass

    @abstractmethod
    async def get_collection(self, collection_id: str) -> VariableCollection | None:
        pass

    @abstractmethod
    async def get_style(self, style_id: str) -> Style | None:
        pass

    async def get_library_collections(self) -> list[LibraryCollection]:
        """Collections published by enabled team libraries."""
        return []

    async def get_library_variables(self, collection_key: str) -> list[LibraryVariable]:
        """Variables available in one library collection."""
        return []

    @abstractmethod
    async def import_variable_by_key(self, key: str) -> Variable:
        """Import a library variable so it can be bound.

        Raises:
            DocumentStoreError: If the key is unknown or the import fails.
        """
        pass

    @abstractmethod
    async def set_paints(self, node_id: str, kind: str, paints: list[Paint]) -> None:
        """Replace a node's "fills" or "strokes"."""
        pass

    @abstractmethod
    async def set_bound_variable(
        self, node_id: str, field: str, variable_id: str | None
    ) -> None:
        """Bind a numeric field to a variable, or unbind it with None."""
        pass

    @abstractmethod
    async def set_style(self, node_id: str, style_property: str, style_id: str) -> None:
        """Set a style slot; an empty id detaches the style."""
        pass

    @abstractmethod
    async def select_node(self, node_id: str) -> Node | None:
        """Select a node and bring it into view."""
        pass
