"""Variable index: local variables keyed by path, name and resolved value.

The index is rebuilt eagerly from the document store, at most once per TTL
window, and never maintained incrementally.
"""

import time
from dataclasses import dataclass, field

from ..color import rgb_to_hex
from ..document.models import ResolvedType, Variable, VariableCollection
from ..document.store import DocumentStore
from ..lint_logging import LogCategory, get_category_logger
from ..paths import normalize_path
from ..utils.ttl import Clock, TTLValue
from .aliases import VariableAliasResolver
from .classify import VariableKind, classify

logger = get_category_logger(LogCategory.INDEX)


@dataclass
class VariableIndex:
    """Lookup tables over the document's local variables.

    Attributes:
        by_full_path: "collection/name" (normalized) -> variable.
        by_name: Normalized name -> variables across collections.
        collection_names: Collection id -> normalized collection name.
        default_modes: Collection id -> default mode id.
        by_resolved_color: Hex (alpha included) -> variables, semantic first.
        by_resolved_number: Number -> variables, semantic first.
        resolved_color_by_id: Variable id -> resolved hex.
        resolved_number_by_id: Variable id -> resolved number.
        variables_by_id: Every indexed variable.
        kinds: Variable id -> semantic/core/component.
    """

    by_full_path: dict[str, Variable] = field(default_factory=dict)
    by_name: dict[str, list[Variable]] = field(default_factory=dict)
    collection_names: dict[str, str] = field(default_factory=dict)
    default_modes: dict[str, str] = field(default_factory=dict)
    by_resolved_color: dict[str, list[Variable]] = field(default_factory=dict)
    by_resolved_number: dict[float, list[Variable]] = field(default_factory=dict)
    resolved_color_by_id: dict[str, str] = field(default_factory=dict)
    resolved_number_by_id: dict[str, float] = field(default_factory=dict)
    variables_by_id: dict[str, Variable] = field(default_factory=dict)
    kinds: dict[str, VariableKind] = field(default_factory=dict)

    def collection_name_of(self, variable: Variable) -> str:
        return self.collection_names.get(variable.collection_id, "")

    def full_path(self, variable: Variable) -> str:
        name = normalize_path(variable.name)
        collection = self.collection_name_of(variable)
        return f"{collection}/{name}" if collection else name

    def kind(self, variable: Variable) -> VariableKind:
        kind = self.kinds.get(variable.id)
        if kind is None:
            kind = classify(normalize_path(variable.name), self.collection_name_of(variable))
        return kind

    def is_component(self, variable: Variable) -> bool:
        return self.kind(variable) is VariableKind.COMPONENT

    def is_semantic(self, variable: Variable) -> bool:
        """Semantic in the broad sense: system, semantic or component scoped."""
        return self.kind(variable) is not VariableKind.CORE

    def stats(self) -> dict[str, int]:
        return {
            "variables": len(self.by_full_path),
            "unique_colors": len(self.by_resolved_color),
            "unique_numbers": len(self.by_resolved_number),
        }


def build_variable_index(
    variables: list[Variable], collections: list[VariableCollection]
) -> VariableIndex:
    """Build the index from local variables and collections.

    Variables with no values are skipped. Aliases are resolved through the
    default mode of each collection; unresolvable variables are indexed by
    name only.
    """
    index = VariableIndex()
    for collection in collections:
        index.collection_names[collection.id] = normalize_path(collection.name)
        index.default_modes[collection.id] = collection.default_mode_id

    indexed = [v for v in variables if v.values_by_mode]
    for variable in indexed:
        index.variables_by_id[variable.id] = variable
        normalized_name = normalize_path(variable.name)
        collection_name = index.collection_name_of(variable)
        index.kinds[variable.id] = classify(normalized_name, collection_name)
        index.by_full_path[index.full_path(variable)] = variable
        index.by_name.setdefault(normalized_name, []).append(variable)

    resolver = VariableAliasResolver(index.variables_by_id, index.default_modes)

    for variable in indexed:
        semantic = index.is_semantic(variable)

        if variable.resolved_type is ResolvedType.COLOR:
            rgba = resolver.resolve_color(variable)
            if rgba is None:
                continue
            hex_color = rgb_to_hex(rgba)
            index.resolved_color_by_id[variable.id] = hex_color
            bucket = index.by_resolved_color.setdefault(hex_color, [])
        elif variable.resolved_type is ResolvedType.FLOAT:
            number = resolver.resolve_number(variable)
            if number is None:
                continue
            index.resolved_number_by_id[variable.id] = number
            bucket = index.by_resolved_number.setdefault(number, [])
        else:
            continue

        if semantic:
            bucket.insert(0, variable)
        else:
            bucket.append(variable)

    return index


async def load_variable_index(store: DocumentStore) -> VariableIndex:
    """Read local variables from the store and build a fresh index."""
    start = time.perf_counter()
    variables = await store.get_local_variables()
    collections = await store.get_local_collections()
    index = build_variable_index(variables, collections)

    stats = index.stats()
    logger.info(
        f"Index built: {stats['variables']} vars, {stats['unique_colors']} unique colors, "
        f"{stats['unique_numbers']} unique numbers",
        extra={
            "operation": "build_index",
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
        },
    )
    return index


class VariableIndexCache:
    """Session-owned VariableIndex with a TTL and explicit invalidation.

    Also remembers the collection name of every variable any build has seen,
    so a binding whose variable was deleted later can still be matched
    against its old collection.
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock | None = None,
        ttl_seconds: float = 5.0,
    ):
        self.store = store
        self._cache: TTLValue[VariableIndex] = TTLValue(
            self._build, ttl_seconds=ttl_seconds, clock=clock
        )
        self._known_collections: dict[str, str] = {}

    async def _build(self) -> VariableIndex:
        index = await load_variable_index(self.store)
        for variable in index.variables_by_id.values():
            self._known_collections[variable.id] = index.collection_name_of(variable)
        return index

    async def get(self) -> VariableIndex:
        return await self._cache.get()

    def invalidate(self) -> None:
        logger.debug("Variable index invalidated")
        self._cache.invalidate()

    def is_stale(self) -> bool:
        return self._cache.is_stale()

    @property
    def builds(self) -> int:
        return self._cache.builds

    def last_known_collection(self, variable_id: str) -> str | None:
        return self._known_collections.get(variable_id)
