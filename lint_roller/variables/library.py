"""Team library variable map, cached per session."""

from ..document.models import LibraryVariable
from ..document.store import DocumentStore
from ..lint_logging import LogCategory, get_category_logger
from ..paths import normalize_path
from ..utils.ttl import Clock, TTLValue

logger = get_category_logger(LogCategory.INDEX)

LibraryVariableMap = dict[str, list[LibraryVariable]]


class LibraryVariableCache:
    """Normalized variable name -> importable library variables.

    Library access failures degrade to an empty map; a missing library is a
    normal condition, not an error.
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock | None = None,
        ttl_seconds: float = 30.0,
    ):
        self.store = store
        self._cache: TTLValue[LibraryVariableMap] = TTLValue(
            self._build, ttl_seconds=ttl_seconds, clock=clock
        )

    async def _build(self) -> LibraryVariableMap:
        variable_map: LibraryVariableMap = {}
        try:
            collections = await self.store.get_library_collections()
            for collection in collections:
                variables = await self.store.get_library_variables(collection.key)
                for variable in variables:
                    entry = LibraryVariable(
                        key=variable.key,
                        name=variable.name,
                        resolved_type=variable.resolved_type,
                        collection_name=variable.collection_name or collection.name,
                    )
                    variable_map.setdefault(normalize_path(variable.name), []).append(entry)
        except Exception as e:
            logger.warning(f"Could not fetch library variables: {e}")
            return variable_map

        logger.info(
            f"Library variable map: {len(variable_map)} unique names "
            f"from {len(collections)} collections"
        )
        return variable_map

    async def get(self) -> LibraryVariableMap:
        return await self._cache.get()

    def invalidate(self) -> None:
        self._cache.invalidate()

    def is_stale(self) -> bool:
        return self._cache.is_stale()
