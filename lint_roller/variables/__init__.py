"""Variable resolution, classification and indexing."""

from .aliases import TokenAliasResolver, VariableAliasResolver
from .classify import VariableKind, classify, is_component, is_semantic
from .index import VariableIndex, VariableIndexCache, build_variable_index, load_variable_index
from .library import LibraryVariableCache

__all__ = [
    "LibraryVariableCache",
    "TokenAliasResolver",
    "VariableAliasResolver",
    "VariableIndex",
    "VariableIndexCache",
    "VariableKind",
    "build_variable_index",
    "classify",
    "is_component",
    "is_semantic",
    "load_variable_index",
]
