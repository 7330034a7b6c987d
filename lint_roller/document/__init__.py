"""Design document model and storage interface."""

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
    VariableAlias,
    VariableCollection,
)

__all__ = [
    "RGBA",
    "LibraryCollection",
    "LibraryVariable",
    "Node",
    "Paint",
    "ResolvedType",
    "ScanScope",
    "Style",
    "Variable",
    "VariableAlias",
    "VariableCollection",
]
