"""lint-roller: bind design tokens to document variables without visual change.

Matches literal colors and numbers on document nodes to the variables that
reproduce them, applies the bindings, and repairs stale or broken bindings.
"""

from .config import EngineConfig, load_config
from .document.memory import InMemoryDocumentStore
from .document.store import DocumentStore
from .session import LintSession

__version__ = "0.1.0"

__all__ = [
    "DocumentStore",
    "EngineConfig",
    "InMemoryDocumentStore",
    "LintSession",
    "load_config",
]
