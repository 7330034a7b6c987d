"""Stale and broken binding detection and repair.

A binding is healthy when its variable is local. Otherwise the variable is
looked up by id: when it still resolves (usually from an old library import)
but a local variable with the same name exists under another id, the binding
is stale and gets that local variable as its replacement. When it does not
resolve at all, the binding is broken and the replacement is searched by the
node's rendered value.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from ..config.models import EngineConfig
from ..document.capabilities import TYPOGRAPHY_PROPERTIES
from ..document.models import Node, ResolvedType, ScanScope, Variable
from ..document.store import DocumentStore
from ..document.values import BindingRef, extract_bindings, parse_paint_property, read_current_value
from ..errors import DocumentStoreError
from ..fixer.applier import FixApplier
from ..fixer.models import FixResult
from ..lint_logging import LogCategory, get_category_logger
from ..matching.context import get_context_keywords
from ..matching.engine import MatchingEngine
from ..matching.models import MatchPhase
from ..paths import normalize_path
from ..variables.index import VariableIndexCache
from .models import (
    BindingState,
    MatchMethod,
    RemapApplyResult,
    RemapConfidence,
    RemapEntry,
    RemapPair,
    RemapScanResult,
    SuggestedVariable,
)

logger = get_category_logger(LogCategory.REMAPPER)

ProgressCallback = Callable[[int, int], None]


@dataclass
class _Problem:
    """Bindings grouped under one stale or broken variable id."""

    kind: BindingState
    bindings: list[tuple[Node, BindingRef]] = field(default_factory=list)
    old_name: str | None = None
    old_collection: str | None = None


@dataclass
class _LocalVariables:
    by_id: dict[str, Variable]
    by_name: dict[str, list[Variable]]
    collection_names: dict[str, str]

    def collection_of(self, variable: Variable) -> str:
        return self.collection_names.get(variable.collection_id, "")


class RemapScanner:
    """Find stale and broken variable bindings and rebind them."""

    def __init__(
        self,
        store: DocumentStore,
        index_cache: VariableIndexCache,
        engine: MatchingEngine,
        applier: FixApplier,
        config: EngineConfig | None = None,
    ):
        self.store = store
        self.index_cache = index_cache
        self.engine = engine
        self.applier = applier
        self.config = config or EngineConfig()

    async def _load_locals(self) -> _LocalVariables:
        variables = await self.store.get_local_variables()
        collections = await self.store.get_local_collections()
        by_name: dict[str, list[Variable]] = {}
        for variable in variables:
            by_name.setdefault(normalize_path(variable.name), []).append(variable)
        return _LocalVariables(
            by_id={v.id: v for v in variables},
            by_name=by_name,
            collection_names={c.id: normalize_path(c.name) for c in collections},
        )

    async def classify_binding(
        self, binding: BindingRef, local: _LocalVariables
    ) -> tuple[BindingState, Variable | None]:
        """Classify one binding, returning the variable it resolves to if any."""
        if binding.variable_id in local.by_id:
            return BindingState.HEALTHY, local.by_id[binding.variable_id]

        try:
            resolved = await self.store.get_variable(binding.variable_id)
        except DocumentStoreError as e:
            logger.debug(f"Lookup of {binding.variable_id} failed: {e}")
            resolved = None

        if resolved is None:
            return BindingState.BROKEN, None

        same_name = local.by_name.get(normalize_path(resolved.name), [])
        if any(v.id != binding.variable_id for v in same_name):
            return BindingState.STALE, resolved
        return BindingState.HEALTHY, resolved

    async def scan(
        self, scope: ScanScope, on_progress: ProgressCallback | None = None
    ) -> RemapScanResult:
        """Classify every binding in scope and suggest a replacement per problem variable."""
        start = time.perf_counter()
        local = await self._load_locals()
        nodes = await self.store.get_scope_nodes(scope)
        logger.info(
            f"Scanning {len(nodes)} nodes (scope={scope.value}), "
            f"{len(local.by_id)} local variables"
        )

        result = RemapScanResult()
        problems: dict[str, _Problem] = {}
        batch = self.config.scan_yield_batch

        for i, node in enumerate(nodes):
            for binding in extract_bindings(node):
                result.total_bindings += 1
                state, resolved = await self.classify_binding(binding, local)

                if state is BindingState.HEALTHY:
                    result.valid_bindings += 1
                    continue

                problem = problems.get(binding.variable_id)
                if problem is None:
                    problem = _Problem(kind=state)
                    if resolved is not None:
                        problem.old_name = resolved.name
                        collection = await self.store.get_collection(resolved.collection_id)
                        problem.old_collection = (
                            normalize_path(collection.name) if collection else ""
                        )
                    problems[binding.variable_id] = problem
                problem.bindings.append((node, binding))

                if state is BindingState.STALE:
                    result.stale_bindings += 1
                    logger.debug(
                        f'Stale: node="{node.name}" prop={binding.property} '
                        f'bound to "{problem.old_name}" ({binding.variable_id})'
                    )
                else:
                    result.broken_bindings += 1
                    logger.debug(
                        f'Broken: node="{node.name}" prop={binding.property} '
                        f"var={binding.variable_id}"
                    )

            if (i + 1) % batch == 0 or i == len(nodes) - 1:
                if on_progress:
                    on_progress(i + 1, len(nodes))
                await asyncio.sleep(0)

        logger.info(
            f"Scan summary: {result.total_bindings} bindings, {result.valid_bindings} valid, "
            f"{result.stale_bindings} stale, {result.broken_bindings} broken, "
            f"{len(problems)} variables to remap"
        )

        for old_id, problem in problems.items():
            result.remap_entries.append(await self._build_entry(old_id, problem, local))

        result.remap_entries.sort(key=lambda entry: entry.usage_count, reverse=True)
        suggested = sum(1 for entry in result.remap_entries if entry.suggested_variable)
        logger.info(
            f"{len(result.remap_entries)} remap entries, {suggested} with suggestions",
            extra={
                "operation": "scan_remaps",
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return result

    async def _build_entry(
        self, old_id: str, problem: _Problem, local: _LocalVariables
    ) -> RemapEntry:
        node, representative = problem.bindings[0]
        entry = RemapEntry(
            old_variable_id=old_id,
            kind=problem.kind,
            usage_count=len(problem.bindings),
            old_variable_name=problem.old_name,
            old_collection_name=problem.old_collection,
            property_hint=representative.property,
            node_type_hint=representative.node_type,
        )

        if problem.kind is BindingState.STALE and problem.old_name:
            entry.suggested_variable = self.suggest_by_name(old_id, problem, local)
        else:
            # Read the node again, a fix may have changed it since the walk
            current_node = await self.store.get_node(representative.node_id) or node
            await self.suggest_by_value(entry, current_node, representative)

        if entry.suggested_variable is None:
            logger.info(f"No suggestion for {problem.kind.value} variable {old_id}")
        return entry

    def suggest_by_name(
        self, old_id: str, problem: _Problem, local: _LocalVariables
    ) -> SuggestedVariable | None:
        """Local variable with the stale variable's name, same collection preferred."""
        candidates = [
            v for v in local.by_name.get(normalize_path(problem.old_name or ""), []) if v.id != old_id
        ]
        if not candidates:
            return None

        best = candidates[0]
        if len(candidates) > 1 and problem.old_collection:
            same_collection = [
                v for v in candidates if local.collection_of(v) == problem.old_collection
            ]
            if same_collection:
                best = same_collection[0]
            else:
                logger.warning(
                    f'No same-collection match for "{problem.old_name}" in '
                    f'"{problem.old_collection}", using "{local.collection_of(best)}"'
                )

        logger.info(f'Stale {old_id}: suggesting "{best.name}" ({best.id})')
        return SuggestedVariable(
            id=best.id,
            name=best.name,
            collection=local.collection_of(best),
            match_method=MatchMethod.NAME,
            confidence=RemapConfidence.HIGH,
        )

    async def suggest_by_value(
        self, entry: RemapEntry, node: Node, binding: BindingRef
    ) -> None:
        """Fill in the entry's current value and a value-matched suggestion."""
        current_value = read_current_value(node, binding.property)
        if not current_value.is_known:
            logger.debug(f"No readable value for {node.name}.{binding.property}")
            return
        entry.current_value = current_value.display()

        index = await self.index_cache.get()
        is_paint = parse_paint_property(binding.property) is not None
        preferred = entry.old_collection_name or self.index_cache.last_known_collection(
            entry.old_variable_id
        )
        candidate = self.engine.select_by_value(
            index,
            current_value,
            ResolvedType.COLOR if is_paint else ResolvedType.FLOAT,
            get_context_keywords(binding.property, binding.node_type),
            preferred_collection=preferred,
        )
        if candidate is None:
            return

        variable = candidate.variable
        exact = candidate.phase is MatchPhase.VALUE
        entry.suggested_variable = SuggestedVariable(
            id=variable.id,
            name=variable.name,
            collection=index.collection_name_of(variable),
            match_method=MatchMethod.VALUE,
            confidence=(
                RemapConfidence.HIGH
                if exact and index.is_semantic(variable)
                else RemapConfidence.MEDIUM
            ),
        )
        logger.info(f'Broken {entry.old_variable_id}: suggesting "{variable.name}" by value')

    async def apply(
        self, pairs: list[RemapPair], on_progress: ProgressCallback | None = None
    ) -> RemapApplyResult:
        """Rebind every binding of each old id to its new variable, document wide."""
        result = RemapApplyResult()
        remap = {pair.old_variable_id: pair.new_variable_id for pair in pairs}
        logger.info(f"Applying {len(remap)} remap(s)")

        new_variables: dict[str, Variable] = {}
        for new_id in dict.fromkeys(remap.values()):
            try:
                variable = await self.store.get_variable(new_id)
            except DocumentStoreError as e:
                result.errors.append(f"Failed to resolve new variable: {new_id}: {e}")
                continue
            if variable is None:
                result.errors.append(f"Failed to resolve new variable: {new_id}")
            else:
                new_variables[new_id] = variable

        nodes = await self.store.get_scope_nodes(ScanScope.FULL_DOCUMENT)
        batch = self.config.scan_yield_batch

        for i, node in enumerate(nodes):
            for binding in extract_bindings(node):
                new_id = remap.get(binding.variable_id)
                if new_id is None:
                    continue

                label = f"{node.name}.{binding.property}"
                variable = new_variables.get(new_id)
                if variable is None:
                    result.failed += 1
                    result.errors.append(f"{label}: new variable not resolved")
                    continue

                logger.debug(f'Rebind {label}: {binding.variable_id} -> "{variable.name}"')
                try:
                    outcome = await self._rebind(node, binding.property, variable)
                except Exception as e:
                    outcome = FixResult(success=False, message=str(e))

                if outcome.success:
                    result.remapped += 1
                else:
                    result.failed += 1
                    result.errors.append(f"{label}: {outcome.message}")

            if (i + 1) % batch == 0 or i == len(nodes) - 1:
                if on_progress:
                    on_progress(i + 1, len(nodes))
                await asyncio.sleep(0)

        logger.info(f"Remap complete: {result.remapped} remapped, {result.failed} failed")
        return result

    async def _rebind(self, node: Node, prop: str, variable: Variable) -> FixResult:
        if parse_paint_property(prop) is not None:
            return await self.applier.apply_color_binding(node, prop, variable)
        if prop in TYPOGRAPHY_PROPERTIES:
            return await self.applier.apply_typography_binding(node, prop, variable)
        return await self.applier.apply_number_binding(node, prop, variable)
