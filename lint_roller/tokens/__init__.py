"""Design tokens: models, catalog and DTCG loading."""

from .dtcg import TokenFile, build_catalog, load_token_directory, load_token_files
from .models import Token, TokenCatalog, TokenType

__all__ = [
    "Token",
    "TokenCatalog",
    "TokenFile",
    "TokenType",
    "build_catalog",
    "load_token_directory",
    "load_token_files",
]
