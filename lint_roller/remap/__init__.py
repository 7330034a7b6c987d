"""Stale and broken binding remapping."""

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

__all__ = [
    "BindingState",
    "MatchMethod",
    "RemapApplyResult",
    "RemapConfidence",
    "RemapEntry",
    "RemapPair",
    "RemapScanResult",
    "SuggestedVariable",
]
