"""Fix results, action records and rule ids."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..document.models import ResolvedType


class ActionType(Enum):
    """What a fix did to the document."""

    REBIND = "rebind"
    UNBIND = "unbind"
    DETACH = "detach"
    APPLY_STYLE = "apply-style"
    IGNORE = "ignore"


class FixFailure(Enum):
    """Typed reason for a failed fix."""

    NODE_NOT_FOUND = "node_not_found"
    NO_MATCH = "no_match"
    NOT_BINDABLE = "not_bindable"
    REQUIRES_TEXT_STYLE = "requires_text_style"
    UNSUPPORTED_PROPERTY = "unsupported_property"
    UNSUPPORTED_RULE = "unsupported_rule"
    WRITE_REJECTED = "write_rejected"
    STYLE_NOT_FOUND = "style_not_found"
    ERROR = "error"


class LintRuleId(Enum):
    """Rules whose violations the fixer knows how to repair."""

    NO_HARDCODED_COLORS = "no-hardcoded-colors"
    NO_HARDCODED_SPACING = "no-hardcoded-spacing"
    NO_HARDCODED_RADII = "no-hardcoded-radii"
    NO_HARDCODED_STROKE_WEIGHT = "no-hardcoded-stroke-weight"
    NO_HARDCODED_SIZING = "no-hardcoded-sizing"
    NO_HARDCODED_TYPOGRAPHY = "no-hardcoded-typography"
    NO_ORPHANED_VARIABLES = "no-orphaned-variables"
    NO_UNKNOWN_STYLES = "no-unknown-styles"
    PREFER_SEMANTIC_VARIABLES = "prefer-semantic-variables"

    @property
    def expected_type(self) -> ResolvedType | None:
        """Variable type a fix for this rule must bind, None for any."""
        return _EXPECTED_TYPES.get(self)

    @property
    def binds_number(self) -> bool:
        return self in _NUMBER_RULES


_NUMBER_RULES = frozenset(
    {
        LintRuleId.NO_HARDCODED_SPACING,
        LintRuleId.NO_HARDCODED_RADII,
        LintRuleId.NO_HARDCODED_STROKE_WEIGHT,
        LintRuleId.NO_HARDCODED_SIZING,
    }
)

_EXPECTED_TYPES: dict[LintRuleId, ResolvedType] = {
    LintRuleId.NO_HARDCODED_COLORS: ResolvedType.COLOR,
    LintRuleId.NO_UNKNOWN_STYLES: ResolvedType.COLOR,
    LintRuleId.NO_HARDCODED_TYPOGRAPHY: ResolvedType.FLOAT,
    **{rule: ResolvedType.FLOAT for rule in _NUMBER_RULES},
}


@dataclass
class FixResult:
    """Outcome of one mutating operation."""

    success: bool
    message: str | None = None
    before_value: str | None = None
    after_value: str | None = None
    action_type: ActionType | None = None
    failure: FixFailure | None = None

    @classmethod
    def failed(cls, failure: FixFailure, message: str) -> FixResult:
        return cls(success=False, message=message, failure=failure)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.message is not None:
            result["message"] = self.message
        if self.before_value is not None:
            result["beforeValue"] = self.before_value
        if self.after_value is not None:
            result["afterValue"] = self.after_value
        if self.action_type is not None:
            result["actionType"] = self.action_type.value
        if self.failure is not None:
            result["failure"] = self.failure.value
        return result


@dataclass
class FixActionDetail:
    """Audit record for one item of a bulk fix."""

    node_id: str
    node_name: str
    property: str
    action_type: ActionType
    before_value: str
    after_value: str
    status: str  # "success" or "failed"
    error_message: str | None = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "nodeName": self.node_name,
            "property": self.property,
            "actionType": self.action_type.value,
            "beforeValue": self.before_value,
            "afterValue": self.after_value,
            "status": self.status,
            "errorMessage": self.error_message,
            "timestamp": int(self.timestamp * 1000),
        }


@dataclass
class FixRequest:
    """One requested fix: which token should replace which literal."""

    node_id: str
    property: str
    token_path: str
    rule_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FixRequest:
        return cls(
            node_id=data["nodeId"],
            property=data["property"],
            token_path=data.get("tokenPath", ""),
            rule_id=data["ruleId"],
        )


@dataclass
class DetachRequest:
    node_id: str
    property: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DetachRequest:
        return cls(node_id=data["nodeId"], property=data["property"])


@dataclass
class BulkFixSummary:
    successful: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    actions: list[FixActionDetail] = field(default_factory=list)
    cancelled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "successful": self.successful,
            "failed": self.failed,
            "errors": list(self.errors),
            "actions": [action.to_dict() for action in self.actions],
            "cancelled": self.cancelled,
        }


@dataclass
class BulkDetachSummary:
    successful: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "successful": self.successful,
            "failed": self.failed,
            "errors": list(self.errors),
            "cancelled": self.cancelled,
        }
