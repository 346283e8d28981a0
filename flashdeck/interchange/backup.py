"""
Whole-store JSON backups: one file holding every deck with its full scheduling
state.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import CorruptRecordError, RecordIOError
from ..models import Deck, ensure_utc
from ..storage import DeckStorage
from ..storage.record_utils import read_record, write_record_atomic

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1


class Backup(BaseModel):
    version: int = BACKUP_VERSION
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    decks: List[Deck] = Field(default_factory=list)


def default_backup_path(now: Optional[datetime] = None) -> Path:
    """
    ``srl_backup_<YYYYmmdd_HHMMSS>.json`` in the user's Documents folder,
    falling back to the home directory when there is none.
    """
    now = now or datetime.now()
    documents = Path.home() / "Documents"
    base = documents if documents.is_dir() else Path.home()
    return base / f"srl_backup_{now.strftime('%Y%m%d_%H%M%S')}.json"


def export_backup(storage: DeckStorage, path: Path) -> int:
    """
    Write every loadable deck to a backup file at ``path``.

    Returns:
        int: Number of decks written.
    """
    backup = Backup(decks=storage.load_all_decks())
    write_record_atomic(Path(path), backup.model_dump_json(indent=2, exclude_none=True))
    logger.info(f"Backed up {len(backup.decks)} deck(s) to {path}")
    return len(backup.decks)


def read_backup(path: Path) -> Backup:
    """
    Raises:
        RecordIOError: If the file cannot be read.
        CorruptRecordError: If the file is not a valid backup.
    """
    path = Path(path)
    text = read_record(path)
    try:
        backup = Backup.model_validate_json(text)
    except ValidationError as e:
        raise CorruptRecordError(
            f"Failed to parse backup {path}: {e}", original_exception=e
        ) from e
    backup.created_at = ensure_utc(backup.created_at)
    return backup


def import_backup(storage: DeckStorage, path: Path) -> Tuple[int, int]:
    """
    Restore decks from a backup file. Decks whose id is already in the store
    are left untouched.

    The whole file is parsed before anything is written, so a bad backup
    leaves the store unchanged.

    Returns:
        (imported, skipped) deck counts.
    """
    backup = read_backup(path)
    if backup.version != BACKUP_VERSION:
        logger.warning(
            f"Backup {path} has version {backup.version}; expected {BACKUP_VERSION}."
        )

    imported = skipped = 0
    for deck in backup.decks:
        if storage.deck_id_exists(deck.id):
            logger.info(f"Skipping deck '{deck.name}': id {deck.id} already exists")
            skipped += 1
            continue
        storage.save_deck(deck)
        imported += 1

    logger.info(f"Restored {imported} deck(s) from {path}, skipped {skipped}")
    return imported, skipped
