"""Semantic / core / component classification of variables."""

from enum import Enum


class VariableKind(Enum):
    """Role of a variable in the design system."""

    SEMANTIC = "semantic"
    CORE = "core"
    COMPONENT = "component"


def is_semantic_collection(collection_name: str) -> bool:
    return (
        collection_name == "system"
        or "semantic" in collection_name
        or "component" in collection_name
    )


def is_semantic(normalized_name: str, collection_name: str) -> bool:
    """Semantic variables live under system/ or component/, or in a semantic collection."""
    if normalized_name.startswith(("system/", "component/")):
        return True
    return is_semantic_collection(collection_name)


def is_component(normalized_name: str, collection_name: str) -> bool:
    """Component-scoped variables must not replace values outside their component."""
    return normalized_name.startswith("component/") or "component" in collection_name


def classify(normalized_name: str, collection_name: str) -> VariableKind:
    """Classify by normalized variable name and normalized collection name."""
    if is_component(normalized_name, collection_name):
        return VariableKind.COMPONENT
    if is_semantic(normalized_name, collection_name):
        return VariableKind.SEMANTIC
    return VariableKind.CORE
