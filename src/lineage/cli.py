"""Command-line interface for the Lineage research assistant.

Entry point: `lineage` command (defined in pyproject.toml).
Session paths are relative to the vault root.
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from tqdm import tqdm

from lineage.config import Config
from lineage.errors import LineageError
from lineage.session.manager import SessionManager
from lineage.session.validation import SessionValidationResult
from lineage.store.filesystem import FileSystemVault

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _manager(ctx: click.Context) -> SessionManager:
    config: Config = ctx.obj["config"]
    return SessionManager(FileSystemVault(config.vault_root), config)


def _fail(ctx: click.Context, exc: LineageError) -> None:
    console.print(f"[red]Error: {exc}[/red]")
    ctx.exit(1)


def _print_issues(result: SessionValidationResult) -> None:
    table = Table(title="Validation issues")
    table.add_column("Level")
    table.add_column("Field")
    table.add_column("Code")
    table.add_column("Message")
    for issue in result.issues:
        color = "red" if issue.level == "error" else "yellow"
        table.add_row(f"[{color}]{issue.level}[/{color}]", issue.field_key, issue.code, issue.text)
    console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option(
    "--vault",
    type=click.Path(file_okay=False),
    default=None,
    help="Vault root directory (default: LINEAGE_VAULT_ROOT or ./vault)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, vault: str | None) -> None:
    """Lineage genealogy research assistant."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config(vault_root=vault) if vault else Config()


@main.command()
@click.argument("title")
@click.pass_context
def new(ctx: click.Context, title: str) -> None:
    """Create a new research session note."""
    manager = _manager(ctx)
    try:
        file = manager.create_session_file(title)
    except LineageError as exc:
        _fail(ctx, exc)
        return
    console.print(f"[green]Created session:[/green] {file.path}")


@main.command()
@click.argument("session_path")
@click.pass_context
def validate(ctx: click.Context, session_path: str) -> None:
    """Validate a session note and list its issues."""
    manager = _manager(ctx)
    try:
        session = manager.load_session(session_path)
    except LineageError as exc:
        _fail(ctx, exc)
        return

    result = manager.evaluate(session)
    if not result.issues:
        console.print("[green]No issues found.[/green]")
        return

    _print_issues(result)
    if result.blocking:
        console.print(f"[red]{len(result.errors)} blocking issue(s)[/red]")
        ctx.exit(1)
    console.print(f"[yellow]{len(result.warnings)} warning(s)[/yellow]")


@main.command()
@click.argument("session_paths", nargs=-1, required=True)
@click.pass_context
def project(ctx: click.Context, session_paths: tuple[str, ...]) -> None:
    """Project one or more session notes into entity records."""
    from lineage.projection.engine import ProjectionEngine

    manager = _manager(ctx)
    engine = ProjectionEngine(manager.store, manager.config)

    failed = 0
    paths = tqdm(session_paths, desc="Projecting sessions") if len(session_paths) > 1 else session_paths
    for session_path in paths:
        try:
            session = manager.load_session(session_path)
        except LineageError as exc:
            console.print(f"[red]Skipping {session_path}: {exc}[/red]")
            failed += 1
            continue

        result = manager.evaluate(session)
        if result.blocking:
            console.print(f"[red]Skipping {session_path}: session has blocking issues[/red]")
            _print_issues(result)
            failed += 1
            continue

        summary = engine.project_session(session)
        if summary.errors and not summary.created and not summary.updated:
            failed += 1
        else:
            try:
                manager.save_session(session_path, session)
            except LineageError as exc:
                console.print(f"[red]Could not save {session_path}: {exc}[/red]")
                failed += 1

        console.print(f"\n[green]Projected {session_path}:[/green]")
        console.print(f"  Persons: {summary.persons_created} created, {summary.persons_updated} updated")
        console.print(f"  Places: {summary.places_created} created")
        console.print(f"  Events: {summary.events_created} created, {summary.events_updated} updated")
        console.print(
            f"  Relationships: {summary.relationships_created} created, "
            f"{summary.relationships_updated} updated"
        )
        console.print(f"  Sources: {summary.sources_created} created, {summary.sources_updated} updated")
        console.print(
            f"  Citations: {summary.citations_created} created, {summary.citations_updated} updated"
        )
        for error in summary.errors:
            console.print(f"  [red]- {error}[/red]")
        for note in summary.notes:
            console.print(f"  [cyan]{note}[/cyan]")

    if failed:
        ctx.exit(1)


@main.command()
@click.argument("session_path")
@click.pass_context
def conflicts(ctx: click.Context, session_path: str) -> None:
    """List assertions that compete for the same person."""
    from lineage.matching.conflicts import detect_conflicts

    manager = _manager(ctx)
    try:
        session = manager.load_session(session_path)
    except LineageError as exc:
        _fail(ctx, exc)
        return

    found = detect_conflicts(session.assertions)
    if not found:
        console.print("[green]No conflicts found.[/green]")
        return

    persons = session.persons_by_id()
    table = Table(title="Conflicts")
    table.add_column("Severity")
    table.add_column("Person")
    table.add_column("Type")
    table.add_column("Assertions")
    for conflict in found:
        person = persons.get(conflict.person_ref)
        label = person.name if person and person.name else conflict.person_ref
        table.add_row(conflict.severity, label, conflict.type, ", ".join(conflict.assertion_ids))
    console.print(table)


@main.command()
@click.argument("session_path")
@click.pass_context
def match(ctx: click.Context, session_path: str) -> None:
    """Suggest existing person records for unmatched session persons."""
    from lineage.index.vault_indexer import VaultIndexer
    from lineage.matching.duplicate_matcher import suggest_person_matches

    manager = _manager(ctx)
    config = manager.config
    try:
        session = manager.load_session(session_path)
    except LineageError as exc:
        _fail(ctx, exc)
        return

    indexer = VaultIndexer(manager.store)
    indexer.rebuild()

    unmatched = [person for person in session.persons if not person.is_matched]
    if not unmatched:
        console.print("[green]All session persons are matched.[/green]")
        return

    for person in unmatched:
        console.print(f"\n[cyan]{person.id}: {person.name or '(no name)'}[/cyan]")
        suggestions = suggest_person_matches(
            person, indexer, min_score=config.match_min_score, limit=config.match_limit
        )
        if not suggestions:
            console.print("  No suggestions")
            continue
        for candidate in suggestions:
            console.print(f"  {candidate.score:.2f}  {candidate.data}  ({candidate.id})")


@main.command()
@click.pass_context
def index(ctx: click.Context) -> None:
    """Rebuild the person/place index and show its size."""
    from lineage.index.vault_indexer import VaultIndexer

    manager = _manager(ctx)
    indexer = VaultIndexer(manager.store)
    indexer.rebuild()
    console.print(f"Indexed {len(indexer.person_entries())} person(s)")
    console.print(f"Indexed {len(indexer.place_entries())} place(s)")


if __name__ == "__main__":
    main()
