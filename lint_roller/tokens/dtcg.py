"""Tokens Studio / DTCG JSON loading.

Flattens nested token groups into dot paths, applies token sets in
tokenSetOrder order, resolves "{alias}" references and builds a TokenCatalog.
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..lint_logging import LogCategory, get_category_logger
from ..variables.aliases import TokenAliasResolver, extract_alias_path, is_alias_value
from .models import Token, TokenCatalog, TokenType

logger = get_category_logger(LogCategory.INDEX)

_DIMENSION = re.compile(r"^(-?\d+(?:\.\d+)?)(px|pt)?$")


@dataclass
class TokenFile:
    """One parsed token set."""

    path: str
    content: dict[str, Any]


@dataclass
class RawToken:
    value: Any
    type: str | None
    description: str | None
    source_file: str


def is_token(obj: Any) -> bool:
    """A token is an object with $value that is not a $themes entry."""
    return isinstance(obj, dict) and "$value" in obj and "$themes" not in obj


def flatten_tokens(
    content: dict[str, Any], source_file: str, prefix: str = ""
) -> dict[str, RawToken]:
    """Flatten a token tree into path -> RawToken, skipping $-prefixed keys."""
    flat: dict[str, RawToken] = {}
    for key, value in content.items():
        if key.startswith("$"):
            continue
        path = f"{prefix}.{key}" if prefix else key
        if is_token(value):
            flat[path] = RawToken(
                value=value["$value"],
                type=value.get("$type"),
                description=value.get("$description"),
                source_file=source_file,
            )
        elif isinstance(value, dict):
            flat.update(flatten_tokens(value, source_file, path))
    return flat


def order_files(files: list[TokenFile], token_set_order: list[str] | None) -> list[TokenFile]:
    """Order files by tokenSetOrder; unlisted files keep their input order at the end."""
    if not token_set_order:
        return list(files)

    ordered: list[TokenFile] = []
    remaining = list(files)
    for set_path in token_set_order:
        for file in remaining:
            if file.path == set_path or re.sub(r"\.json$", "", file.path) == set_path:
                ordered.append(file)
                remaining.remove(file)
                break
    return ordered + remaining


def _normalize_value(value: Any, token_type: TokenType) -> Any:
    if token_type is TokenType.COLOR and isinstance(value, str) and value.startswith("#"):
        return value.lower()
    if token_type.is_numeric and isinstance(value, str):
        match = _DIMENSION.match(value.strip())
        if match:
            return float(match.group(1))
    if token_type.is_numeric and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


def _token_type(raw: dict[str, RawToken], path: str) -> TokenType:
    """Declared type, else the type of the nearest typed alias target, else color."""
    visited: set[str] = set()
    current: str | None = path
    while current and current in raw and current not in visited:
        visited.add(current)
        entry = raw[current]
        if entry.type:
            return TokenType(entry.type)
        current = extract_alias_path(entry.value) if is_alias_value(entry.value) else None
    return TokenType.COLOR


def build_catalog(
    files: list[TokenFile], token_set_order: list[str] | None = None
) -> TokenCatalog:
    """Parse token files into a catalog.

    Later files override earlier ones. Dangling or circular aliases produce
    unresolved tokens instead of errors.
    """
    raw: dict[str, RawToken] = {}
    for file in order_files(files, token_set_order):
        raw.update(flatten_tokens(file.content, file.path))

    resolver = TokenAliasResolver({path: entry.value for path, entry in raw.items()})
    tokens: list[Token] = []
    unresolved = 0

    for path, entry in raw.items():
        token_type = _token_type(raw, path)
        alias = is_alias_value(entry.value)
        resolved = resolver.resolve(path)
        if resolved is None:
            unresolved += 1
        else:
            resolved = _normalize_value(resolved, token_type)

        tokens.append(
            Token(
                path=path,
                raw_value=entry.value,
                resolved_value=resolved,
                type=token_type,
                is_alias=alias,
                alias_path=extract_alias_path(entry.value) if alias else None,
                source_file=entry.source_file,
                description=entry.description,
            )
        )

    if unresolved:
        logger.warning(f"{unresolved} token aliases could not be resolved")
    logger.info(f"Loaded {len(tokens)} tokens from {len(files)} token sets")
    return TokenCatalog.from_tokens(tokens)


def parse_metadata(content: Any) -> list[str] | None:
    """tokenSetOrder from a $metadata.json document, if present."""
    if isinstance(content, dict) and isinstance(content.get("tokenSetOrder"), list):
        return [str(item) for item in content["tokenSetOrder"]]
    return None


def load_token_files(
    paths: list[Path], metadata_path: Path | None = None, root: Path | None = None
) -> TokenCatalog:
    """Read token JSON files from disk and build a catalog.

    Args:
        paths: Token set files.
        metadata_path: Optional $metadata.json with tokenSetOrder.
        root: Directory file names are made relative to, for set ordering.
    """
    files = []
    for path in paths:
        name = str(path.relative_to(root)) if root else path.name
        files.append(TokenFile(path=name, content=json.loads(path.read_text(encoding="utf-8"))))

    order = None
    if metadata_path and metadata_path.exists():
        order = parse_metadata(json.loads(metadata_path.read_text(encoding="utf-8")))
    return build_catalog(files, order)


def load_token_directory(directory: Path) -> TokenCatalog:
    """Load every *.json token set under a directory, honoring $metadata.json."""
    metadata = directory / "$metadata.json"
    paths = sorted(
        p
        for p in directory.rglob("*.json")
        if not p.name.startswith("$")
    )
    return load_token_files(paths, metadata if metadata.exists() else None, root=directory)
