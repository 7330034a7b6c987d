"""Structured error types for lint-roller.

Errors carry a category so callers can decide between reporting a failed
fix, degrading to "no match", or surfacing a configuration problem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of engine errors."""

    DATA_QUALITY = "data_quality"  # Dangling aliases, missing modes
    NO_MATCH = "no_match"  # No variable for a token
    MUTATION = "mutation"  # Host rejected a write
    VALIDATION = "validation"  # Bad property or rule id
    CONFIGURATION = "configuration"  # Invalid config file
    RUNTIME = "runtime"  # Unexpected errors


@dataclass
class LintRollerError(Exception):
    """Base class for structured errors with recovery suggestions.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details dict.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Initialize the exception with the message."""
        super().__init__(self.message)

    def format(self) -> str:
        """Format the error for display, suggestion and details included."""
        lines = [f"Error: {self.message}"]

        if self.suggestion:
            lines.append(f"Suggestion: {self.suggestion}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.message


class DocumentStoreError(LintRollerError):
    """A read from the document store failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            category=ErrorCategory.RUNTIME,
            message=message,
            details=details,
        )


class StoreWriteError(LintRollerError):
    """The host rejected a mutation (locked node, wrong type, read-only)."""

    def __init__(self, node_id: str, message: str):
        super().__init__(
            category=ErrorCategory.MUTATION,
            message=message,
            suggestion="Check that the node is unlocked and supports this property",
            details={"node_id": node_id},
        )
        self.node_id = node_id


class ConfigurationError(LintRollerError):
    """Invalid or unreadable configuration file."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion="Fix the config file or remove it to use defaults",
            details={"path": path} if path else None,
        )
