"""Command line interface for lint-roller.

Every command works on a JSON document snapshot. Mutating commands only
write the snapshot back with --write (or to --output).
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click

from .config import load_config
from .document.memory import InMemoryDocumentStore
from .document.models import ResolvedType, ScanScope
from .errors import LintRollerError
from .lint_logging import setup_logging
from .matching.models import CurrentValue, MatchContext
from .remap.models import RemapPair
from .session import LintSession
from .tokens.dtcg import load_token_directory, load_token_files
from .tokens.models import TokenCatalog


def common_options(f: Any) -> Any:
    """Common options for all commands."""
    f = click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")(f)
    f = click.option(
        "--config", type=click.Path(exists=True), help="Configuration file path"
    )(f)
    return f


def write_options(f: Any) -> Any:
    """Options for commands that mutate the document."""
    f = click.option("--write", is_flag=True, help="Save changes back to the document")(f)
    f = click.option(
        "--output", "-o", type=click.Path(), help="Save the changed document to this path"
    )(f)
    return f


def tokens_option(f: Any) -> Any:
    return click.option(
        "--tokens",
        "-t",
        type=click.Path(exists=True),
        help="Token set file or directory (Tokens Studio / DTCG JSON)",
    )(f)


def load_tokens(path: str | None) -> TokenCatalog | None:
    if not path:
        return None
    token_path = Path(path)
    if token_path.is_dir():
        return load_token_directory(token_path)
    return load_token_files([token_path])


def open_session(
    document: str,
    config: str | None,
    verbose: bool,
    quiet: bool,
    tokens: str | None = None,
) -> tuple[LintSession, InMemoryDocumentStore]:
    """Configure logging and build a session over a snapshot file."""
    if verbose and quiet:
        click.echo("Error: --quiet and --verbose are mutually exclusive", err=True)
        sys.exit(1)

    try:
        engine_config = load_config(Path(document).parent, Path(config) if config else None)
        setup_logging(
            level=engine_config.log_level,
            quiet=quiet,
            verbose=verbose,
            log_format=engine_config.log_format,
        )
        data = json.loads(Path(document).read_text(encoding="utf-8"))
        store = InMemoryDocumentStore.from_snapshot(data)
        catalog = load_tokens(tokens)
    except LintRollerError as e:
        click.echo(e.format(), err=True)
        sys.exit(1)
    except (OSError, json.JSONDecodeError, KeyError) as e:
        click.echo(f"❌ Could not load {document}: {e}", err=True)
        sys.exit(1)

    return LintSession(store, tokens=catalog, config=engine_config), store


def save_document(
    store: InMemoryDocumentStore, document: str, write: bool, output: str | None
) -> None:
    target = output or (document if write else None)
    if target is None:
        return
    Path(target).write_text(json.dumps(store.to_snapshot(), indent=2), encoding="utf-8")
    click.echo(f"💾 Saved document to {target}")


def echo_json(payload: dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2))


def report_fix(result: Any, as_json: bool) -> None:
    if as_json:
        echo_json(result.to_dict())
    elif result.success:
        action = result.action_type.value if result.action_type else "done"
        click.echo(f"✅ {action}: {result.before_value or '-'} -> {result.after_value or '-'}")
        if result.message:
            click.echo(f"   {result.message}")
    else:
        click.echo(f"❌ {result.message}", err=True)

    if not result.success:
        sys.exit(1)


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """lint-roller - bind design tokens to document variables without visual change."""


@cli.command("scan-remaps")
@click.argument("document", type=click.Path(exists=True))
@common_options
@click.option(
    "--scope",
    type=click.Choice([scope.value for scope in ScanScope]),
    default=ScanScope.FULL_DOCUMENT.value,
    show_default=True,
    help="Part of the document to scan",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def scan_remaps(
    document: str, verbose: bool, quiet: bool, config: str | None, scope: str, as_json: bool
) -> None:
    """Find stale and broken variable bindings."""
    session, _ = open_session(document, config, verbose, quiet)
    result = asyncio.run(session.scan_for_broken_bindings(ScanScope(scope)))

    if as_json:
        echo_json(result.to_dict())
    else:
        click.echo(f"🔍 {result.total_bindings} bindings scanned")
        click.echo(f"   Valid: {result.valid_bindings}")
        click.echo(f"   Stale: {result.stale_bindings}")
        click.echo(f"   Broken: {result.broken_bindings}")
        for entry in result.remap_entries:
            name = entry.old_variable_name or entry.old_variable_id
            suggestion = entry.suggested_variable
            target = (
                f"{suggestion.name} ({suggestion.match_method.value}, {suggestion.confidence.value})"
                if suggestion
                else "no suggestion"
            )
            click.echo(f"   [{entry.kind.value}] {name} x{entry.usage_count} -> {target}")

    if result.error:
        click.echo(f"❌ {result.error}", err=True)
        sys.exit(1)


@cli.command("apply-remaps")
@click.argument("document", type=click.Path(exists=True))
@common_options
@write_options
@click.option("--pair", "pairs", multiple=True, help="OLD_ID=NEW_ID remap (repeatable)")
@click.option(
    "--suggested", is_flag=True, help="Scan first and apply every suggested replacement"
)
def apply_remaps(
    document: str,
    verbose: bool,
    quiet: bool,
    config: str | None,
    write: bool,
    output: str | None,
    pairs: tuple[str, ...],
    suggested: bool,
) -> None:
    """Rebind stale or broken bindings to new variables."""
    session, store = open_session(document, config, verbose, quiet)

    remaps: list[RemapPair] = []
    for pair in pairs:
        old_id, sep, new_id = pair.partition("=")
        if not sep or not old_id or not new_id:
            click.echo(f"Error: invalid --pair {pair!r}, expected OLD_ID=NEW_ID", err=True)
            sys.exit(1)
        remaps.append(RemapPair(old_id, new_id))

    if suggested:
        scan = asyncio.run(session.scan_for_broken_bindings(ScanScope.FULL_DOCUMENT))
        remaps.extend(
            RemapPair(entry.old_variable_id, entry.suggested_variable.id)
            for entry in scan.remap_entries
            if entry.suggested_variable is not None
        )

    if not remaps:
        click.echo("✨ Nothing to remap")
        return

    result = asyncio.run(session.apply_remaps(remaps))
    click.echo(f"✅ Remapped {result.remapped} bindings, {result.failed} failed")
    for error in result.errors:
        click.echo(f"   {error}", err=True)

    save_document(store, document, write, output)
    if result.failed:
        sys.exit(1)


@cli.command()
@click.argument("document", type=click.Path(exists=True))
@common_options
@write_options
@tokens_option
@click.option("--node", "node_id", required=True, help="Node id")
@click.option("--property", "prop", required=True, help="Property, e.g. fills[0] or paddingTop")
@click.option("--token", "token_path", required=True, help="Token path to bind")
@click.option("--rule", "rule_id", required=True, help="Lint rule id")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def fix(
    document: str,
    verbose: bool,
    quiet: bool,
    config: str | None,
    write: bool,
    output: str | None,
    tokens: str | None,
    node_id: str,
    prop: str,
    token_path: str,
    rule_id: str,
    as_json: bool,
) -> None:
    """Bind the variable for a token to a node property."""
    session, store = open_session(document, config, verbose, quiet, tokens)
    result = asyncio.run(session.apply_fix(node_id, prop, token_path, rule_id))
    if result.success:
        save_document(store, document, write, output)
    report_fix(result, as_json)


@cli.command()
@click.argument("document", type=click.Path(exists=True))
@common_options
@write_options
@click.option("--node", "node_id", required=True, help="Node id")
@click.option("--property", "prop", required=True, help="Bound property")
def unbind(
    document: str,
    verbose: bool,
    quiet: bool,
    config: str | None,
    write: bool,
    output: str | None,
    node_id: str,
    prop: str,
) -> None:
    """Remove a variable binding, keeping the current value."""
    session, store = open_session(document, config, verbose, quiet)
    result = asyncio.run(session.unbind_variable(node_id, prop))
    if result.success:
        save_document(store, document, write, output)
    report_fix(result, as_json=False)


@cli.command()
@click.argument("document", type=click.Path(exists=True))
@common_options
@write_options
@click.option("--node", "node_id", required=True, help="Node id")
@click.option(
    "--style",
    "style_property",
    required=True,
    type=click.Choice(["fillStyle", "strokeStyle", "textStyle", "effectStyle"]),
    help="Style slot to detach",
)
def detach(
    document: str,
    verbose: bool,
    quiet: bool,
    config: str | None,
    write: bool,
    output: str | None,
    node_id: str,
    style_property: str,
) -> None:
    """Detach a style from a node, keeping its appearance."""
    session, store = open_session(document, config, verbose, quiet)
    result = asyncio.run(session.detach_style(node_id, style_property))
    if result.success:
        save_document(store, document, write, output)
    report_fix(result, as_json=False)


@cli.command()
@click.argument("document", type=click.Path(exists=True))
@common_options
@tokens_option
@click.option("--token", "token_path", required=True, help="Token path")
@click.option("--value", required=True, help="Current value: #rrggbb[aa] or a number")
@click.option("--property", "prop", default="", help="Property, for context scoring")
@click.option("--node-type", default="FRAME", show_default=True, help="Node type")
def match(
    document: str,
    verbose: bool,
    quiet: bool,
    config: str | None,
    tokens: str | None,
    token_path: str,
    value: str,
    prop: str,
    node_type: str,
) -> None:
    """Show which variable a token would bind to, without changing anything."""
    session, _ = open_session(document, config, verbose, quiet, tokens)

    if value.startswith("#"):
        current = CurrentValue.color(value)
        expected = ResolvedType.COLOR
    else:
        try:
            current = CurrentValue.of_number(float(value))
        except ValueError:
            click.echo(f"Error: invalid value {value!r}", err=True)
            sys.exit(1)
        expected = ResolvedType.FLOAT

    context = MatchContext(property=prop, node_type=node_type) if prop else None
    candidate = asyncio.run(
        session.engine.find_match(token_path, expected, current, context, session.tokens)
    )
    if candidate is None:
        click.echo(f"❌ No variable found for {token_path} ({current.display()})", err=True)
        for near in asyncio.run(session.engine.suggest_close_colors(current)):
            click.echo(
                f"   Closest: {near.token_path} {near.token_hex} (ΔE {near.delta_e:.2f})",
                err=True,
            )
        sys.exit(1)
    echo_json(candidate.to_dict())


if __name__ == "__main__":
    cli()
