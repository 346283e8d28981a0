"""
CLI entry point for flashdeck.
"""

# Standard library imports
import logging
from pathlib import Path
from typing import List, NoReturn, Optional

# Third-party imports
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Local application imports
from flashdeck.config import Settings, UserConfig, normalize_theme
from flashdeck.constants import DEFAULT_NEW_CARD_LIMIT
from flashdeck.exceptions import FlashdeckError
from flashdeck.interchange import (
    filename_to_title_case,
    import_anki,
    import_backup,
    import_csv,
    import_folder,
)
from flashdeck.models import Deck
from flashdeck.stats import collect_overview
from flashdeck.storage import DeckStorage
from flashdeck.cli._export_logic import export_anki_logic, export_backup_logic
from flashdeck.cli._import_logic import save_imported_decks
from flashdeck.cli._review_logic import review_logic
from flashdeck.cli.theme import display_name


console = Console()

app = typer.Typer(
    name="flashdeck",
    help="Flashdeck: SM-2 spaced repetition flashcards with Anki import/export.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Global options and shared helpers
# ---------------------------------------------------------------------------

_decks_dir_option = typer.Option(  # noqa: B008
    None,
    "--decks-dir",
    help="Directory holding deck records. "
    "Falls back to FLASHDECK_DECKS_DIR, then the per-user data directory.",
    envvar="FLASHDECK_DECKS_DIR",
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    decks_dir: Optional[Path] = _decks_dir_option,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
):
    """Flashdeck: SM-2 spaced repetition flashcards with Anki import/export."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    ctx.obj = decks_dir


def _open_storage(ctx: typer.Context) -> DeckStorage:
    """Open the deck store named by --decks-dir or the settings. Exits on failure."""
    decks_dir = ctx.obj or Settings().decks_dir
    try:
        return DeckStorage(decks_dir)
    except FlashdeckError as e:
        console.print(f"[bold red]Error opening deck store:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _find_deck(storage: DeckStorage, ref: str) -> Deck:
    """
    Resolve a deck by id, or by name (case-insensitive). Exits with code 1 when
    no deck matches.
    """
    try:
        deck = storage.load_deck(ref) if storage.deck_id_exists(ref) else None
    except FlashdeckError as e:
        _fail(f"loading deck '{ref}'", e)
    if deck is None:
        wanted = ref.lower()
        deck = next(
            (d for d in storage.load_all_decks() if d.name.lower() == wanted),
            None,
        )
    if deck is None:
        console.print(f"[bold red]Error: Deck '{escape(ref)}' not found.[/bold red]")
        raise typer.Exit(code=1)
    return deck


def _fail(action: str, e: Exception) -> NoReturn:
    console.print(f"[bold red]Error {action}:[/bold red] {escape(str(e))}")
    raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# Deck listing and management
# ---------------------------------------------------------------------------


@app.command("list")
def list_decks(ctx: typer.Context):
    """List all decks with their card counts."""
    storage = _open_storage(ctx)
    decks = storage.load_all_decks()
    if not decks:
        console.print("[yellow]No decks found.[/yellow]")
        return

    table = Table(title="Decks")
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Cards", style="magenta", justify="right")
    table.add_column("New", style="blue", justify="right")
    table.add_column("Due", style="yellow", justify="right")
    for deck in decks:
        deck_stats = deck.get_stats()
        table.add_row(
            escape(deck.name),
            deck.id,
            str(deck_stats.total_cards),
            str(deck_stats.new_cards),
            str(deck_stats.due_cards),
        )
    console.print(table)


@app.command()
def delete(
    ctx: typer.Context,
    deck_ref: str = typer.Argument(..., help="Deck id or name."),  # noqa: B008
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
):
    """Delete a deck and all of its cards."""
    storage = _open_storage(ctx)
    try:
        deck = _find_deck(storage, deck_ref)
        if not yes:
            confirmed = typer.confirm(
                f"Delete deck '{deck.name}' and its {len(deck.cards)} card(s)?"
            )
            if not confirmed:
                console.print("Delete cancelled.")
                raise typer.Exit()
        storage.delete_deck(deck.id)
    except FlashdeckError as e:
        _fail("deleting deck", e)
    console.print(f"[bold green]Deleted deck '{escape(deck.name)}'.[/bold green]")


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


def _display_deck_stats(cons: Console, deck: Deck):
    deck_stats = deck.get_stats()
    table = Table(title=f"Deck: {escape(deck.name)}", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Total Cards", str(deck_stats.total_cards))
    table.add_row("New", str(deck_stats.new_cards))
    table.add_row("Due", str(deck_stats.due_cards))
    table.add_row("Learning", str(deck_stats.learning_cards))
    table.add_row("Mature", str(deck_stats.mature_cards))
    cons.print(table)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _display_overview(cons: Console, decks: List[Deck]):
    overview = collect_overview(decks)

    overall = Table(title="Overall Stats", show_header=False)
    overall.add_column("Metric", style="cyan")
    overall.add_column("Value", style="magenta")
    overall.add_row("Total Cards", str(overview.total_cards))
    overall.add_row("Total Reviews", str(overview.total_reviews))
    overall.add_row("Daily Streak", _plural(overview.daily_streak, "day"))
    overall.add_row("Weekly Streak", _plural(overview.weekly_streak, "week"))
    cons.print(overall)

    ease = Table(title="Ease Breakdown")
    ease.add_column("Level", style="cyan")
    ease.add_column("Cards", style="magenta", justify="right")
    ease.add_row("New", str(overview.ease.new))
    ease.add_row("Easy (>= 2.5)", str(overview.ease.easy))
    ease.add_row("Good (>= 2.0)", str(overview.ease.good))
    ease.add_row("Hard (>= 1.5)", str(overview.ease.hard))
    ease.add_row("Struggling", str(overview.ease.struggling))
    cons.print(ease)


@app.command()
def stats(
    ctx: typer.Context,
    deck_ref: Optional[str] = typer.Argument(  # noqa: B008
        None, help="Deck id or name. Omit for collection-wide stats."
    ),
):
    """Display statistics for one deck or the whole collection."""
    storage = _open_storage(ctx)
    if deck_ref is not None:
        _display_deck_stats(console, _find_deck(storage, deck_ref))
        return

    decks = storage.load_all_decks()
    if not decks:
        console.print("[yellow]No decks found.[/yellow]")
        return
    _display_overview(console, decks)


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    deck_ref: str = typer.Argument(..., help="Deck id or name."),  # noqa: B008
    new_limit: int = typer.Option(
        DEFAULT_NEW_CARD_LIMIT,
        "--new-limit",
        "-n",
        help="Maximum number of new cards to introduce.",
    ),
):
    """Starts a study session for the specified deck."""
    storage = _open_storage(ctx)
    deck = _find_deck(storage, deck_ref)
    try:
        user_config = UserConfig.load(Settings().config_path)
    except FlashdeckError as e:
        console.print(f"[yellow]Ignoring unreadable config: {escape(str(e))}[/yellow]")
        user_config = UserConfig()

    try:
        review_logic(
            storage=storage,
            deck=deck,
            new_card_limit=new_limit,
            theme_name=user_config.theme,
        )
    except FlashdeckError as e:
        _fail("during review", e)


# ---------------------------------------------------------------------------
# Import commands
# ---------------------------------------------------------------------------


@app.command("import-csv")
def import_csv_command(
    ctx: typer.Context,
    path: Path = typer.Argument(  # noqa: B008
        ..., exists=True, dir_okay=False, help="CSV file with front,back rows."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Deck name. Defaults to the file name in Title Case."
    ),
):
    """Import a CSV file as a new deck."""
    storage = _open_storage(ctx)
    deck_name = name or filename_to_title_case(path.stem) or "Imported Deck"
    if storage.deck_name_exists(deck_name):
        console.print(
            f"[yellow]A deck named '{escape(deck_name)}' already exists. Skipping.[/yellow]"
        )
        return

    try:
        deck = import_csv(path, deck_name)
        if not deck.cards:
            console.print(f"[yellow]No cards found in {escape(path.name)}.[/yellow]")
            return
        storage.save_deck(deck)
    except FlashdeckError as e:
        _fail("importing CSV", e)
    console.print(
        f"[bold green]Imported {len(deck.cards)} card(s) into '{escape(deck.name)}'.[/bold green]"
    )


@app.command("import-folder")
def import_folder_command(
    ctx: typer.Context,
    folder: Path = typer.Argument(  # noqa: B008
        ..., exists=True, file_okay=False, help="Folder of CSV files."
    ),
):
    """Import every CSV file in a folder, one deck per file."""
    storage = _open_storage(ctx)
    try:
        imported, skipped = import_folder(storage, folder)
    except FlashdeckError as e:
        _fail("importing folder", e)

    for deck_name, count in imported:
        console.print(f"- [green]{escape(deck_name)}[/green]: {count} card(s)")
    for deck_name in skipped:
        console.print(f"- [yellow]{escape(deck_name)}[/yellow]: skipped (already exists)")
    console.print(
        f"[bold green]Imported {len(imported)} deck(s), "
        f"skipped {len(skipped)}.[/bold green]"
    )


@app.command("import-anki")
def import_anki_command(
    ctx: typer.Context,
    path: Path = typer.Argument(  # noqa: B008
        ..., exists=True, dir_okay=False, help=".apkg, .txt, .tsv or .csv file."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Deck name for text imports."
    ),
):
    """Import an Anki package or text export, detecting the format."""
    storage = _open_storage(ctx)
    try:
        decks = import_anki(path, deck_name=name)
        saved, skipped = save_imported_decks(storage, decks)
    except FlashdeckError as e:
        _fail("importing from Anki", e)

    for deck in saved:
        console.print(f"- [green]{escape(deck.name)}[/green]: {len(deck.cards)} card(s)")
    for deck_name in skipped:
        console.print(f"- [yellow]{escape(deck_name)}[/yellow]: skipped (already exists)")
    console.print(
        f"[bold green]Imported {len(saved)} deck(s), skipped {len(skipped)}.[/bold green]"
    )


@app.command("import-backup")
def import_backup_command(
    ctx: typer.Context,
    path: Path = typer.Argument(  # noqa: B008
        ..., exists=True, dir_okay=False, help="Backup JSON file."
    ),
):
    """Restore decks from a backup file. Decks already present are kept."""
    storage = _open_storage(ctx)
    try:
        imported, skipped = import_backup(storage, path)
    except FlashdeckError as e:
        _fail("importing backup", e)
    console.print(
        f"[bold green]Restored {imported} deck(s)[/bold green], "
        f"[yellow]skipped {skipped} existing[/yellow]."
    )


# ---------------------------------------------------------------------------
# Export commands
# ---------------------------------------------------------------------------


@app.command("export-backup")
def export_backup_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Argument(  # noqa: B008
        None, help="Backup file. Defaults to Documents/srl_backup_<timestamp>.json."
    ),
):
    """Write every deck to a single JSON backup file."""
    storage = _open_storage(ctx)
    try:
        path = export_backup_logic(storage, output)
    except FlashdeckError as e:
        _fail("writing backup", e)
    console.print(f"[bold green]Backup written to[/bold green] [cyan]{escape(str(path))}[/cyan]")


@app.command("export-anki")
def export_anki_command(
    ctx: typer.Context,
    output: Path = typer.Argument(..., help="Output .apkg file."),  # noqa: B008
    deck_refs: Optional[List[str]] = typer.Option(  # noqa: B008
        None, "--deck", "-d", help="Deck id or name to export. Repeatable."
    ),
):
    """Export decks to an Anki package."""
    storage = _open_storage(ctx)
    decks = [_find_deck(storage, ref) for ref in deck_refs] if deck_refs else None
    try:
        count = export_anki_logic(storage, output, decks)
    except FlashdeckError as e:
        _fail("exporting to Anki", e)
    console.print(f"[bold green]Exported {count} card(s) to Anki package.[/bold green]")


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------


@app.command()
def theme(
    name: Optional[str] = typer.Argument(  # noqa: B008
        None, help="Theme to select. Omit to switch to the next theme."
    ),
):
    """Show or change the colour theme used during review."""
    config_path = Settings().config_path
    try:
        user_config = UserConfig.load(config_path)
        user_config.theme = normalize_theme(name) if name else user_config.next_theme()
        user_config.save(config_path)
    except FlashdeckError as e:
        _fail("saving theme", e)
    console.print(
        f"Theme set to [bold cyan]{display_name(user_config.theme)}[/bold cyan]."
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {escape(str(e))}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
