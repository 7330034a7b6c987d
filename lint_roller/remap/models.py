"""Remap scan and apply result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BindingState(Enum):
    """Classification of one existing variable binding."""

    HEALTHY = "healthy"
    STALE = "stale"
    BROKEN = "broken"


class MatchMethod(Enum):
    NAME = "name"
    VALUE = "value"


class RemapConfidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"


@dataclass
class SuggestedVariable:
    """Proposed replacement for a stale or broken binding."""

    id: str
    name: str
    collection: str
    match_method: MatchMethod
    confidence: RemapConfidence

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "collection": self.collection,
            "matchMethod": self.match_method.value,
            "confidence": self.confidence.value,
        }


@dataclass
class RemapEntry:
    """All bindings to one stale or broken variable, with one suggestion.

    Attributes:
        old_variable_id: Id every grouped binding points at.
        kind: STALE or BROKEN.
        usage_count: Number of grouped bindings.
        property_hint: Property of the representative (first seen) binding.
        node_type_hint: Node type of the representative binding.
        current_value: Literal value read off the representative node (broken only).
    """

    old_variable_id: str
    kind: BindingState
    usage_count: int
    old_variable_name: str | None = None
    old_collection_name: str | None = None
    suggested_variable: SuggestedVariable | None = None
    current_value: str | None = None
    property_hint: str = ""
    node_type_hint: str = ""
    confirmed: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "oldVariableId": self.old_variable_id,
            "kind": self.kind.value,
            "usageCount": self.usage_count,
            "propertyHint": self.property_hint,
            "nodeTypeHint": self.node_type_hint,
            "confirmed": self.confirmed,
        }
        if self.old_variable_name is not None:
            result["oldVariableName"] = self.old_variable_name
        if self.old_collection_name:
            result["oldCollectionName"] = self.old_collection_name
        if self.suggested_variable is not None:
            result["suggestedVariable"] = self.suggested_variable.to_dict()
        if self.current_value is not None:
            result["currentValue"] = self.current_value
        return result


@dataclass
class RemapScanResult:
    total_bindings: int = 0
    valid_bindings: int = 0
    broken_bindings: int = 0
    stale_bindings: int = 0
    remap_entries: list[RemapEntry] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "totalBindings": self.total_bindings,
            "validBindings": self.valid_bindings,
            "brokenBindings": self.broken_bindings,
            "staleBindings": self.stale_bindings,
            "remapEntries": [entry.to_dict() for entry in self.remap_entries],
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class RemapPair:
    """Rebind every binding of old_variable_id to new_variable_id."""

    old_variable_id: str
    new_variable_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemapPair:
        return cls(data["oldVariableId"], data["newVariableId"])


@dataclass
class RemapApplyResult:
    remapped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"remapped": self.remapped, "failed": self.failed, "errors": list(self.errors)}
