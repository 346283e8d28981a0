"""
Import of line-oriented text files: CSV (front,back) and Anki's "notes in
plain text" export (tab or semicolon separated, optional tags column).
"""

import csv
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..exceptions import RecordIOError
from ..models import Card, Deck
from ..storage import DeckStorage

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_NAME = "Imported Deck"
HEADER_MARKER = "front"


def _read_text(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise RecordIOError(
            f"Failed to read text file {path}: {e}", original_exception=e
        ) from e


def is_header_row(line: str) -> bool:
    return HEADER_MARKER in line.lower()


def _card_from_columns(columns: Sequence[str]) -> Optional[Card]:
    if len(columns) < 2:
        return None
    front = columns[0].strip()
    back = columns[1].strip()
    if not front or not back:
        return None
    return Card(front=front, back=back)


def parse_csv_text(text: str, deck_name: str) -> Deck:
    """
    Build a deck from CSV text. The first row is skipped when it looks like a
    header; rows without a non-empty front and back are skipped.
    """
    deck = Deck(name=deck_name)
    lines = text.splitlines()
    if lines and is_header_row(lines[0]):
        lines = lines[1:]

    for row in csv.reader(lines):
        card = _card_from_columns(row)
        if card is not None:
            deck.cards.append(card)
    return deck


def import_csv(path: Path, deck_name: str) -> Deck:
    """Read a CSV file into a new, unsaved deck."""
    deck = parse_csv_text(_read_text(path), deck_name)
    logger.info(f"Parsed {len(deck.cards)} cards from {path}")
    return deck


def parse_anki_text(text: str, deck_name: str) -> Deck:
    """
    Build a deck from Anki plain-text export content.

    Blank lines and ``#`` directive lines are skipped. Each line splits on tab
    when it contains one, otherwise on semicolon. A third column is read as
    whitespace-separated tags.
    """
    deck = Deck(name=deck_name)
    first_row = True
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if first_row:
            first_row = False
            if is_header_row(line):
                continue

        delimiter = "\t" if "\t" in line else ";"
        columns = line.split(delimiter)
        card = _card_from_columns(columns)
        if card is None:
            continue
        if len(columns) >= 3:
            card.tags = columns[2].split()
        deck.cards.append(card)
    return deck


def import_anki_text(path: Path, deck_name: str) -> Deck:
    """Read an Anki plain-text export into a new, unsaved deck."""
    deck = parse_anki_text(_read_text(path), deck_name)
    logger.info(f"Parsed {len(deck.cards)} cards from {path}")
    return deck


def filename_to_title_case(stem: str) -> str:
    """
    Turn a snake_case or kebab-case file stem into a Title Case deck name,
    e.g. ``"spanish_verbs-basic"`` -> ``"Spanish Verbs Basic"``.
    """
    words = [w for w in re.split(r"[_-]", stem) if w]
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def import_folder(
    storage: DeckStorage, folder: Path
) -> Tuple[List[Tuple[str, int]], List[str]]:
    """
    Import every ``.csv`` file in ``folder`` as its own deck, named from the
    file name.

    A file is skipped when its deck name matches, case-insensitively, a deck
    already in the store or one imported earlier in this run. Files that
    yield no cards are not saved.

    Returns:
        (imported, skipped): ``imported`` lists (deck name, card count) pairs,
        ``skipped`` lists the names that already existed.
    """
    folder = Path(folder)
    try:
        csv_files = sorted(
            p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == ".csv"
        )
    except OSError as e:
        raise RecordIOError(
            f"Failed to read folder {folder}: {e}", original_exception=e
        ) from e

    taken_names = {info.name.lower() for info in storage.list_decks()}
    imported: List[Tuple[str, int]] = []
    skipped: List[str] = []

    for csv_path in csv_files:
        deck_name = filename_to_title_case(csv_path.stem) or DEFAULT_IMPORT_NAME
        if deck_name.lower() in taken_names:
            logger.info(f"Skipping {csv_path.name}: deck '{deck_name}' already exists")
            skipped.append(deck_name)
            continue

        try:
            deck = import_csv(csv_path, deck_name)
        except RecordIOError as e:
            logger.warning(f"Failed to import {csv_path}: {e}")
            continue

        if not deck.cards:
            logger.info(f"No cards found in {csv_path.name}; nothing imported")
            continue

        storage.save_deck(deck)
        taken_names.add(deck_name.lower())
        imported.append((deck_name, len(deck.cards)))

    return imported, skipped
