"""Phased search for the variable that should replace a literal value.

Phases, each a fallback for the previous one:

1. Name: exact full path, name only, then longest suffix of at least two
   segments. The hit must resolve to the node's current value.
2. Value: every variable whose resolved value equals the current value,
   component-scoped variables excluded when possible, semantic before core,
   scored by context and token-path similarity. Numbers get a second pass
   over values at most one unit away.
3. Library: import a team library variable by name, trying the token path
   and then every path in its alias chain.

A variable binding chosen this way never changes the rendered value, except
for the documented numeric tolerance of the name phase.
"""

from __future__ import annotations

from ..color import ColorMatch, find_closest_colors
from ..config.models import EngineConfig
from ..document.models import LibraryVariable, ResolvedType, Variable
from ..document.store import DocumentStore
from ..lint_logging import LogCategory, get_category_logger
from ..numbers import confidence_for_number, is_within_fix_tolerance
from ..paths import normalize_path, path_ends_with
from ..tokens.models import TokenCatalog
from ..variables.index import VariableIndex, VariableIndexCache
from ..variables.library import LibraryVariableCache
from .context import context_score, get_context_keywords
from .models import ConfidenceTier, CurrentValue, MatchCandidate, MatchContext, MatchPhase

logger = get_category_logger(LogCategory.MATCHER)


def type_matches(variable: Variable, expected_type: ResolvedType | None) -> bool:
    return expected_type is None or variable.resolved_type is expected_type


class MatchingEngine:
    """Find the variable to bind for a token without changing the rendered value."""

    def __init__(
        self,
        store: DocumentStore,
        index_cache: VariableIndexCache,
        library_cache: LibraryVariableCache,
        config: EngineConfig | None = None,
    ):
        self.store = store
        self.index_cache = index_cache
        self.library_cache = library_cache
        self.config = config or EngineConfig()

    async def find_variable(
        self,
        token_path: str,
        expected_type: ResolvedType | None,
        current_value: CurrentValue,
        context: MatchContext | None = None,
        tokens: TokenCatalog | None = None,
    ) -> Variable | None:
        match = await self.find_match(token_path, expected_type, current_value, context, tokens)
        return match.variable if match else None

    async def find_match(
        self,
        token_path: str,
        expected_type: ResolvedType | None,
        current_value: CurrentValue,
        context: MatchContext | None = None,
        tokens: TokenCatalog | None = None,
    ) -> MatchCandidate | None:
        """Run the three phases for a token path.

        Args:
            token_path: Suggested token, dot or slash notation.
            expected_type: Required variable type, None for any.
            current_value: The node's literal value that must be preserved.
            context: Property and node type, for tie-breaking.
            tokens: Token catalog, for the token's alias chain in phase 3.

        Returns:
            The winning candidate, or None when no variable qualifies.
        """
        logger.debug(f'Finding variable for "{token_path}" (current: {current_value.display()})')
        index = await self.index_cache.get()
        keywords = get_context_keywords(context.property, context.node_type) if context else []

        named = self.match_by_name(token_path, index, expected_type, keywords)
        if named is not None:
            verified = self._verify(named, index, current_value)
            if verified is not None:
                logger.info(f"Name match: {named.name}")
                return MatchCandidate(
                    variable=named,
                    score=float(self.config.exact_name_score),
                    confidence=verified,
                    phase=MatchPhase.NAME,
                )

        by_value = self.select_by_value(index, current_value, expected_type, keywords, token_path)
        if by_value is not None:
            return by_value

        logger.debug(f"Trying library variables for: {token_path}")
        imported = await self.import_from_library(token_path, expected_type, tokens)
        if imported is not None:
            return MatchCandidate(
                variable=imported,
                score=0.0,
                confidence=ConfidenceTier.APPROXIMATE,
                phase=MatchPhase.LIBRARY,
            )

        logger.info(
            f"No variable found for {token_path} (local: {len(index.by_resolved_number)} "
            f"number values, {len(index.by_resolved_color)} color values)"
        )
        return None

    # Phase 1

    def match_by_name(
        self,
        token_path: str,
        index: VariableIndex,
        expected_type: ResolvedType | None,
        keywords: list[str],
    ) -> Variable | None:
        """Full path, then name only, then the longest qualifying suffix."""
        normalized = normalize_path(token_path)

        full = index.by_full_path.get(normalized)
        if full is not None and type_matches(full, expected_type):
            return full

        same_name = [v for v in index.by_name.get(normalized, []) if type_matches(v, expected_type)]
        if len(same_name) == 1:
            return same_name[0]
        if same_name:
            return self._pick_best_from_multiple(same_name, index, keywords)

        best_suffix: Variable | None = None
        best_len = 0
        for name, variables in index.by_name.items():
            segments = len(name.split("/"))
            if (
                segments >= self.config.min_suffix_segments
                and segments > best_len
                and path_ends_with(normalized, name)
            ):
                typed = [v for v in variables if type_matches(v, expected_type)]
                if typed:
                    best_suffix = (
                        typed[0]
                        if len(typed) == 1
                        else self._pick_best_from_multiple(typed, index, keywords)
                    )
                    best_len = segments

        return best_suffix

    def _verify(
        self, variable: Variable, index: VariableIndex, current_value: CurrentValue
    ) -> ConfidenceTier | None:
        """Confidence of a name match against the current value, None when rejected."""
        if current_value.hex is not None:
            variable_hex = index.resolved_color_by_id.get(variable.id)
            if variable_hex is None:
                logger.debug(f'Name match "{variable.name}" rejected: value unresolved')
                return None
            if variable_hex != current_value.hex:
                logger.debug(
                    f'Name match "{variable.name}" rejected: color {variable_hex} != {current_value.hex}'
                )
                return None
            return ConfidenceTier.EXACT

        if current_value.number is not None:
            variable_number = index.resolved_number_by_id.get(variable.id)
            if variable_number is None:
                logger.debug(f'Name match "{variable.name}" rejected: value unresolved')
                return None
            if not is_within_fix_tolerance(
                variable_number,
                current_value.number,
                absolute=self.config.name_match_absolute_tolerance,
                relative=self.config.name_match_relative_tolerance,
            ):
                logger.debug(
                    f'Name match "{variable.name}" rejected: number {variable_number:g} '
                    f"!= {current_value.number:g}"
                )
                return None
            return confidence_for_number(variable_number, current_value.number)

        # Nothing to verify against
        return ConfidenceTier.APPROXIMATE

    def _pick_best_from_multiple(
        self, variables: list[Variable], index: VariableIndex, keywords: list[str]
    ) -> Variable:
        """Same-name variables: semantic, else non-component, else all; then context."""
        non_component = [v for v in variables if not index.is_component(v)]
        semantic = [v for v in non_component if index.is_semantic(v)]
        pool = semantic or non_component or variables
        if len(pool) == 1:
            return pool[0]

        best = pool[0]
        best_score = -1
        for variable in pool:
            score = context_score(
                normalize_path(variable.name), keywords, self.config.context_score
            )
            if score > best_score:
                best_score = score
                best = variable
        return best

    # Phase 2

    def select_by_value(
        self,
        index: VariableIndex,
        current_value: CurrentValue,
        expected_type: ResolvedType | None,
        keywords: list[str],
        token_path: str | None = None,
        preferred_collection: str | None = None,
    ) -> MatchCandidate | None:
        """Exact value lookup, then the close-number pass.

        Args:
            preferred_collection: Normalized collection name; candidates in it
                win over all others when there are any.
        """
        if current_value.hex is not None:
            bucket = index.by_resolved_color.get(current_value.hex, [])
            best = self._select_from_bucket(
                bucket, index, expected_type, keywords, token_path, preferred_collection
            )
            if best is not None:
                return self._value_candidate(best, index, keywords, token_path)
            return None

        if current_value.number is None:
            return None

        bucket = index.by_resolved_number.get(current_value.number, [])
        best = self._select_from_bucket(
            bucket, index, expected_type, keywords, token_path, preferred_collection
        )
        if best is not None:
            return self._value_candidate(best, index, keywords, token_path)

        return self._select_close_number(
            index, current_value.number, expected_type, keywords, token_path, preferred_collection
        )

    def _select_from_bucket(
        self,
        bucket: list[Variable],
        index: VariableIndex,
        expected_type: ResolvedType | None,
        keywords: list[str],
        token_path: str | None,
        preferred_collection: str | None,
    ) -> Variable | None:
        typed = [v for v in bucket if type_matches(v, expected_type)]
        typed = self._prefer_collection(typed, index, preferred_collection)
        if not typed:
            return None

        non_component = [v for v in typed if not index.is_component(v)]
        if non_component:
            logger.debug(f"Value match over {len(non_component)} candidates, component excluded")
            return self._pick_best_variable(non_component, index, keywords, token_path)

        logger.debug(f"Value match falling back to {len(typed)} component candidates")
        return self._pick_best_variable(typed, index, keywords, token_path)

    def _prefer_collection(
        self,
        candidates: list[Variable],
        index: VariableIndex,
        preferred_collection: str | None,
    ) -> list[Variable]:
        if not preferred_collection:
            return candidates
        preferred = normalize_path(preferred_collection)
        same = [v for v in candidates if index.collection_name_of(v) == preferred]
        if same:
            return same
        if candidates:
            logger.debug(f'No candidates in collection "{preferred}", using all')
        return candidates

    def _name_score(self, variable: Variable, index: VariableIndex, token_path: str | None) -> int:
        if not token_path:
            return 0
        normalized_token = normalize_path(token_path)
        name = normalize_path(variable.name)
        if index.full_path(variable) == normalized_token or name == normalized_token:
            return self.config.exact_name_score
        if len(name.split("/")) >= self.config.min_suffix_segments and path_ends_with(
            normalized_token, name
        ):
            return self.config.suffix_name_score
        return 0

    def _score(
        self,
        variable: Variable,
        index: VariableIndex,
        keywords: list[str],
        token_path: str | None,
    ) -> int:
        return context_score(
            normalize_path(variable.name), keywords, self.config.context_score
        ) + self._name_score(variable, index, token_path)

    def _pick_best_variable(
        self,
        candidates: list[Variable],
        index: VariableIndex,
        keywords: list[str],
        token_path: str | None,
    ) -> Variable:
        """Semantic pool before core, then the strictly highest score; ties keep the first."""
        if len(candidates) == 1:
            return candidates[0]

        non_component = [v for v in candidates if not index.is_component(v)]
        semantic = [v for v in non_component if index.is_semantic(v)]
        core = [v for v in non_component if not index.is_semantic(v)]
        pool = semantic or core or candidates
        if len(pool) == 1:
            return pool[0]

        best = pool[0]
        best_score = float("-inf")
        for variable in pool:
            score = self._score(variable, index, keywords, token_path)
            if score > best_score:
                best_score = score
                best = variable
        return best

    def _value_candidate(
        self,
        variable: Variable,
        index: VariableIndex,
        keywords: list[str],
        token_path: str | None,
    ) -> MatchCandidate:
        score = self._score(variable, index, keywords, token_path)
        logger.info(f"Value match: {variable.name} (score {score})")
        return MatchCandidate(
            variable=variable,
            score=float(score),
            confidence=ConfidenceTier.EXACT,
            phase=MatchPhase.VALUE,
        )

    def _select_close_number(
        self,
        index: VariableIndex,
        value: float,
        expected_type: ResolvedType | None,
        keywords: list[str],
        token_path: str | None,
        preferred_collection: str | None,
    ) -> MatchCandidate | None:
        best_variable: Variable | None = None
        best_diff = float("inf")
        best_score = float("-inf")

        for number, variables in index.by_resolved_number.items():
            diff = abs(number - value)
            if not 0 < diff <= self.config.close_value_max_diff:
                continue
            typed = [
                v
                for v in variables
                if type_matches(v, expected_type) and not index.is_component(v)
            ]
            typed = self._prefer_collection(typed, index, preferred_collection)
            if not typed:
                continue

            candidate = self._pick_best_variable(typed, index, keywords, token_path)
            score = self._score(candidate, index, keywords, token_path) - diff
            if score > best_score or (score == best_score and diff < best_diff):
                best_variable = candidate
                best_diff = diff
                best_score = score

        if best_variable is None:
            return None

        logger.info(f"Close number match (diff={best_diff:.2f}): {best_variable.name}")
        return MatchCandidate(
            variable=best_variable,
            score=best_score,
            confidence=confidence_for_number(
                index.resolved_number_by_id[best_variable.id], value
            ),
            phase=MatchPhase.CLOSE_VALUE,
        )

    # Suggestions

    async def suggest_close_colors(self, current_value: CurrentValue) -> list[ColorMatch]:
        """Color variables within max_delta_e of a value, nearest first.

        Used to point at near misses when no phase finds a binding; these are
        never bound automatically.
        """
        if current_value.hex is None:
            return []
        index = await self.index_cache.get()
        color_values = {
            hex_color: variables[0].name
            for hex_color, variables in index.by_resolved_color.items()
            if variables
        }
        return find_closest_colors(
            current_value.hex, color_values, max_delta_e=self.config.max_delta_e
        )

    # Phase 3

    async def import_from_library(
        self,
        token_path: str,
        expected_type: ResolvedType | None,
        tokens: TokenCatalog | None = None,
    ) -> Variable | None:
        """Import a library variable matching the token path or its alias chain."""
        library = await self.library_cache.get()
        if not library:
            return None

        paths_to_try = [token_path]
        if tokens is not None:
            paths_to_try.extend(tokens.alias_chain(token_path))

        for path in paths_to_try:
            normalized = normalize_path(path)

            for entry in library.get(normalized, []):
                if type_matches_library(entry, expected_type):
                    imported = await self._import(entry)
                    if imported is not None:
                        return imported

            best: LibraryVariable | None = None
            best_len = 0
            for name, entries in library.items():
                segments = len(name.split("/"))
                if (
                    segments >= self.config.min_suffix_segments
                    and segments > best_len
                    and path_ends_with(normalized, name)
                ):
                    for entry in entries:
                        if type_matches_library(entry, expected_type):
                            best = entry
                            best_len = segments
                            break

            if best is not None:
                imported = await self._import(best)
                if imported is not None:
                    return imported

        return None

    async def _import(self, entry: LibraryVariable) -> Variable | None:
        try:
            imported = await self.store.import_variable_by_key(entry.key)
        except Exception as e:
            logger.warning(f"Failed to import {entry.name}: {e}")
            return None
        logger.info(f"Imported library variable: {entry.name} from {entry.collection_name}")
        self.index_cache.invalidate()
        return imported


def type_matches_library(entry: LibraryVariable, expected_type: ResolvedType | None) -> bool:
    return expected_type is None or entry.resolved_type is expected_type
