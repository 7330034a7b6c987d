"""Applying matches to the document."""

from .models import (
    ActionType,
    BulkDetachSummary,
    BulkFixSummary,
    DetachRequest,
    FixActionDetail,
    FixFailure,
    FixRequest,
    FixResult,
    LintRuleId,
)

__all__ = [
    "ActionType",
    "BulkDetachSummary",
    "BulkFixSummary",
    "DetachRequest",
    "FixActionDetail",
    "FixFailure",
    "FixRequest",
    "FixResult",
    "LintRuleId",
]
