"""
Contains the business logic for exporting decks to Anki packages and backups.
This logic is called by the CLI commands in main.py.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from flashdeck.interchange import default_backup_path, export_apkg, export_backup
from flashdeck.models import Deck
from flashdeck.storage import DeckStorage

logger = logging.getLogger(__name__)

APKG_SUFFIX = ".apkg"


def normalize_apkg_path(output: Path) -> Path:
    """Append the ``.apkg`` suffix when the output path has none."""
    if output.suffix.lower() != APKG_SUFFIX:
        return output.with_name(output.name + APKG_SUFFIX)
    return output


def export_anki_logic(
    storage: DeckStorage, output: Path, decks: Optional[Sequence[Deck]] = None
) -> int:
    """
    Export ``decks`` (every stored deck when None) to an Anki package.

    Returns:
        int: Number of cards written.

    Raises:
        NothingToExportError: If there is no deck to export.
    """
    output = normalize_apkg_path(output)
    deck_ids = None if decks is None else [deck.id for deck in decks]
    logger.info(f"Starting Anki export to {output}")
    return export_apkg(storage, output, deck_ids=deck_ids)


def export_backup_logic(storage: DeckStorage, output: Optional[Path] = None) -> Path:
    """
    Write a backup of every deck, to ``output`` or the default backup path.

    Returns:
        Path: Where the backup was written.
    """
    path = output or default_backup_path()
    export_backup(storage, path)
    return path
