"""
Utility functions for marshalling between Pydantic models and the on-disk
JSON record format. Keeps the record store free of conversion details.
"""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..exceptions import CorruptRecordError, RecordIOError
from ..models import Deck

RECORD_SUFFIX = ".json"


def record_path(decks_dir: Path, deck_id: str) -> Path:
    """Path of the record file for ``deck_id`` inside ``decks_dir``."""
    return decks_dir / f"{deck_id}{RECORD_SUFFIX}"


def deck_to_record(deck: Deck) -> str:
    """
    Serialize a deck and all of its cards to record text.

    Absent optional timestamps are left out of the record rather than written
    as null.
    """
    return deck.model_dump_json(indent=2, exclude_none=True)


def record_to_deck(text: str, source: Optional[Path] = None) -> Deck:
    """
    Parse record text into a Deck.

    Raises:
        CorruptRecordError: If the text is not valid JSON or does not match the
            deck structure (wraps the original ValidationError).
    """
    try:
        return Deck.model_validate_json(text)
    except ValidationError as e:
        where = f" in {source}" if source else ""
        raise CorruptRecordError(
            f"Failed to parse deck record{where}: {e}",
            original_exception=e,
        ) from e


def read_record(path: Path) -> str:
    """Read a record file, wrapping filesystem failures in RecordIOError."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise RecordIOError(
            f"Could not read record {path}: {e}", original_exception=e
        ) from e


def write_record_atomic(path: Path, text: str) -> None:
    """
    Write ``text`` to ``path`` so that readers see either the old or the new
    record, never a partial one.

    The text is written to a temporary sibling file which then replaces the
    target in a single rename.
    """
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise RecordIOError(
            f"Could not write record {path}: {e}", original_exception=e
        ) from e
