"""Command-line interface for book list imports."""

import json
import logging
import sys
from pathlib import Path

import click

from booklists import __version__
from booklists.catalog.store import SqlCatalogStore
from booklists.db.database import SessionLocal, init_db
from booklists.imports.parsers import ImportParseError
from booklists.imports.schemas import (
    BookAction,
    CommentMerge,
    FieldMerge,
    ImportSnapshot,
    ImportStrategy,
    ListAction,
)
from booklists.imports.service import ListImportService, UnresolvedConflictsError
from booklists.imports.strategy import is_detailed_mode


def setup_logging(level: str) -> None:
    """Set up logging configuration.

    Args:
        level: Log level string.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _choices(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


def _load_payload(service: ListImportService, file: Path):
    try:
        return service.parse(file.read_bytes())
    except ImportParseError as e:
        raise click.ClickException(f"{e.code.value}: {e.detail}")


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level")
def main(log_level: str):
    """booklists - merge exported book lists into the local catalog.

    Preview conflicts first, import with a strategy, and keep the snapshot
    file to undo the import later.
    """
    setup_logging(log_level)


@main.command("init-db")
def init_db_command():
    """Create the catalog tables if they don't exist."""
    init_db(force=True)
    click.echo("Database initialized.")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def preview(file: Path):
    """Show the conflicts an import of FILE would run into."""
    db = SessionLocal()
    try:
        service = ListImportService(SqlCatalogStore(db))
        payload = _load_payload(service, file)
        result = service.preview(payload)
    finally:
        db.close()

    summary = result.summary
    click.echo(
        f"Export v{summary.version} from {summary.exported_at}: "
        f"{summary.list_count} list(s), {summary.book_count} book(s)"
    )

    conflicts = result.conflicts
    if not conflicts.has_conflicts:
        click.echo("No conflicts.")
        return

    if conflicts.list_name_conflicts:
        click.echo("\nList name conflicts:")
        for conflict in conflicts.list_name_conflicts:
            click.echo(f"  '{conflict.imported_name}' (rename -> '{conflict.suggested_name}')")

    if conflicts.book_conflicts:
        click.echo("\nBook conflicts:")
        for conflict in conflicts.book_conflicts:
            fields = ", ".join(field.value for field in conflict.differing_fields) or "none"
            click.echo(
                f"  '{conflict.imported_book.title}' matched by {conflict.match_type.value} "
                f"[key: {conflict.book_key}] differing fields: {fields}"
            )


@main.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--list-action",
    type=_choices(ListAction),
    default=ListAction.RENAME.value,
    show_default=True,
    help="What to do with lists whose name already exists",
)
@click.option(
    "--book-action",
    type=_choices(BookAction),
    default=BookAction.MERGE.value,
    show_default=True,
    help="What to do with books already in the catalog",
)
@click.option(
    "--comment-merge",
    type=_choices(CommentMerge),
    default=CommentMerge.BOTH.value,
    show_default=True,
    help="How to combine comments when merging lists",
)
@click.option(
    "--field-merge",
    type=_choices(FieldMerge),
    default=FieldMerge.NON_EMPTY.value,
    show_default=True,
    help="How to merge fields of matched books",
)
@click.option(
    "--snapshot-out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the undo snapshot to this file",
)
def import_command(
    file: Path,
    list_action: str,
    book_action: str,
    comment_merge: str,
    field_merge: str,
    snapshot_out: Path | None,
):
    """Import the book lists in FILE."""
    strategy = ImportStrategy(
        default_list_action=ListAction(list_action),
        default_book_action=BookAction(book_action),
        default_comment_merge=CommentMerge(comment_merge),
        default_field_merge=FieldMerge(field_merge),
    )

    db = SessionLocal()
    try:
        service = ListImportService(SqlCatalogStore(db))
        payload = _load_payload(service, file)
        try:
            result = service.run_import(payload, strategy)
        except UnresolvedConflictsError as e:
            message = str(e)
            if is_detailed_mode(strategy):
                message += (
                    ". Detailed field merging needs per-field choices; "
                    "use the API or pick another --field-merge mode."
                )
            raise click.ClickException(message)
    finally:
        db.close()

    if snapshot_out:
        snapshot_out.write_text(result.snapshot.model_dump_json(indent=2), encoding="utf-8")
        click.echo(f"Undo snapshot written to {snapshot_out}")

    counts = result.imported
    click.echo(
        f"Lists created: {counts.lists}, books added: {counts.books_added}, "
        f"books merged: {counts.books_merged}"
    )

    if not result.success:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        click.echo("Import stopped early; undo with the snapshot to revert partial changes.")
        sys.exit(1)


@main.command()
@click.argument("snapshot_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def undo(snapshot_file: Path):
    """Undo an import using SNAPSHOT_FILE written by 'import --snapshot-out'.

    Run this at most once per snapshot.
    """
    try:
        snapshot = ImportSnapshot.model_validate(json.loads(snapshot_file.read_text("utf-8")))
    except (json.JSONDecodeError, ValueError) as e:
        raise click.ClickException(f"Invalid snapshot file: {e}")

    db = SessionLocal()
    try:
        summary = ListImportService(SqlCatalogStore(db)).restore_snapshot(snapshot)
    finally:
        db.close()

    click.echo(
        f"Removed {summary.books_removed} book(s) and {summary.lists_removed} list(s); "
        f"restored {summary.lists_restored} replaced list(s) and "
        f"{summary.books_restored} book(s)."
    )


if __name__ == "__main__":
    main()
