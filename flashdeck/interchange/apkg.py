"""
Export and import of Anki ``.apkg`` packages.

An ``.apkg`` file is a zip archive holding a SQLite collection database and a
media manifest. Export builds a fresh collection from native decks; import
reads the notes and cards of any collection back into native decks, keeping
the interval, ease, repetition and lapse counts of each card.
"""

import io
import logging
import os
import sqlite3
import tempfile
import zipfile
from contextlib import closing, contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..constants import DEFAULT_EASE_FACTOR
from ..exceptions import (
    CorruptRecordError,
    EmptyContainerError,
    NothingToExportError,
    RecordIOError,
    SchemaError,
    UnsupportedContainerError,
)
from ..models import Card, Deck, ensure_utc
from ..storage import DeckStorage
from . import anki_schema as schema
from .anki_models import (
    AnkiDeckConfig,
    AnkiDeckEntry,
    CollectionMetadata,
    basic_note_type,
    parse_deck_lookup,
)
from .markup import strip_html

logger = logging.getLogger(__name__)


# --- Helpers ---


@contextmanager
def temporary_database(prefix: str) -> Iterator[Path]:
    """
    Provide a path for a scratch SQLite file and remove it on exit, whether
    the block succeeds or raises.
    """
    try:
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=".db")
        os.close(fd)
    except OSError as e:
        raise RecordIOError(
            f"Failed to create temporary database file: {e}",
            original_exception=e,
        ) from e
    path = Path(name)
    try:
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Could not remove temporary database {path}: {e}")


def foreign_deck_id(index: int) -> int:
    """Anki deck id for the ``index``-th exported deck. Id 1 is reserved for
    the Default deck."""
    return (index + 2) * schema.DECK_ID_STRIDE + 1


def field_checksum(text: str) -> int:
    """Additive checksum over the UTF-8 bytes of a field."""
    return sum(text.encode("utf-8")) % schema.CHECKSUM_MODULUS


def encode_ease(ease_factor: float) -> int:
    """Ease as a per-mille integer, truncated. Rounding to 6 places first
    keeps float noise (2.36 * 1000 == 2359.9999...) from losing a unit."""
    return int(round(ease_factor * 1000, 6))


def decode_ease(factor: int) -> float:
    if factor <= 0:
        return DEFAULT_EASE_FACTOR
    return factor / 1000.0


def classify_card(card: Card, note_id: int, now_s: int) -> Tuple[int, int, int]:
    """
    Map a card's lifecycle stage onto Anki's (type, queue, due) columns.

    New cards are due in note id order, learning cards at a timestamp, and
    review cards at a day offset.
    """
    if card.repetitions == 0:
        return schema.CARD_TYPE_NEW, schema.CARD_TYPE_NEW, note_id
    if card.interval == 0:
        return schema.CARD_TYPE_LEARNING, schema.CARD_TYPE_LEARNING, now_s
    return schema.CARD_TYPE_REVIEW, schema.CARD_TYPE_REVIEW, card.interval


# --- Export ---


def _collection_metadata(decks: Sequence[Deck], now_s: int) -> CollectionMetadata:
    entries = [AnkiDeckEntry(id=schema.DEFAULT_DECK_ID, name="Default", mod=now_s)]
    entries.extend(
        AnkiDeckEntry(
            id=foreign_deck_id(idx), name=deck.name, mod=now_s, desc=deck.description
        )
        for idx, deck in enumerate(decks)
    )
    return CollectionMetadata(
        decks=entries,
        models=[basic_note_type(now_s)],
        deck_configs=[AnkiDeckConfig()],
    )


def _note_and_card_rows(
    decks: Sequence[Deck], now_s: int, now_ms: int
) -> Tuple[List[Tuple], List[Tuple]]:
    """
    Build insert parameters for the notes and cards tables. Note and card ids
    start at ``now_ms`` and increase by one per card.
    """
    note_rows: List[Tuple] = []
    card_rows: List[Tuple] = []
    next_id = now_ms

    for idx, deck in enumerate(decks):
        deck_id = foreign_deck_id(idx)
        for card in deck.cards:
            next_id += 1
            note_id = card_id = next_id

            note_rows.append(
                (
                    note_id,
                    card.id,
                    schema.BASIC_MODEL_ID,
                    now_s,
                    " ".join(card.tags),
                    f"{card.front}{schema.FIELD_SEPARATOR}{card.back}",
                    card.front,
                    field_checksum(card.front),
                )
            )

            card_type, queue, due = classify_card(card, note_id, now_s)
            card_rows.append(
                (
                    card_id,
                    note_id,
                    deck_id,
                    now_s,
                    card_type,
                    queue,
                    due,
                    card.interval,
                    encode_ease(card.ease_factor),
                    card.repetitions,
                    card.lapses,
                )
            )
    return note_rows, card_rows


def _write_collection(
    db_path: Path, decks: Sequence[Deck], now_s: int, now_ms: int
) -> None:
    metadata = _collection_metadata(decks, now_s)
    note_rows, card_rows = _note_and_card_rows(decks, now_s, now_ms)
    try:
        with closing(sqlite3.connect(db_path)) as conn:
            conn.executescript(schema.COLLECTION_SCHEMA_SQL)
            conn.execute(
                schema.INSERT_COLLECTION_SQL,
                (
                    now_s,
                    now_s,
                    now_ms,
                    schema.SCHEMA_VERSION,
                    metadata.models_json(),
                    metadata.decks_json(),
                    metadata.dconf_json(),
                ),
            )
            conn.executemany(schema.INSERT_NOTE_SQL, note_rows)
            conn.executemany(schema.INSERT_CARD_SQL, card_rows)
            conn.commit()
    except sqlite3.Error as e:
        logger.error(f"Failed to build collection database: {e}")
        raise SchemaError(
            f"Failed to build collection database: {e}", original_exception=e
        ) from e


def _package(db_bytes: bytes) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(schema.EXPORT_COLLECTION_ENTRY, db_bytes)
        archive.writestr(schema.MEDIA_ENTRY, schema.EMPTY_MEDIA_MANIFEST)
    return buffer.getvalue()


def build_apkg(decks: Sequence[Deck], now: Optional[datetime] = None) -> bytes:
    """
    Build ``.apkg`` archive bytes holding ``decks``.

    Raises:
        NothingToExportError: If ``decks`` is empty.
        SchemaError: If the collection database cannot be built.
        RecordIOError: If the temporary database cannot be created or read.
    """
    if not decks:
        raise NothingToExportError("No decks to export.")

    now = ensure_utc(now or datetime.now(timezone.utc))
    now_s = int(now.timestamp())
    now_ms = now_s * 1000

    with temporary_database("flashdeck_export_") as db_path:
        _write_collection(db_path, decks, now_s, now_ms)
        try:
            db_bytes = db_path.read_bytes()
        except OSError as e:
            raise RecordIOError(
                f"Could not read temporary database: {e}", original_exception=e
            ) from e

    return _package(db_bytes)


def _select_decks(
    storage: DeckStorage, deck_ids: Optional[Sequence[str]]
) -> List[Deck]:
    if deck_ids is None:
        return storage.load_all_decks()

    decks = []
    for deck_id in deck_ids:
        try:
            deck = storage.load_deck(deck_id)
        except CorruptRecordError as e:
            logger.warning(f"Leaving unreadable deck {deck_id} out of export: {e}")
            continue
        if deck is None:
            logger.warning(f"Deck {deck_id} not found; leaving it out of export.")
            continue
        decks.append(deck)
    return decks


def export_apkg(
    storage: DeckStorage,
    path: Path,
    deck_ids: Optional[Sequence[str]] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Export the selected decks (all decks when ``deck_ids`` is None) to an
    ``.apkg`` file at ``path``. Nothing is written if the selection is empty.

    Returns:
        int: Number of cards exported.
    """
    decks = _select_decks(storage, deck_ids)
    data = build_apkg(decks, now=now)

    try:
        Path(path).write_bytes(data)
    except OSError as e:
        raise RecordIOError(
            f"Failed to write package {path}: {e}", original_exception=e
        ) from e

    card_count = sum(len(deck.cards) for deck in decks)
    logger.info(f"Exported {card_count} cards in {len(decks)} deck(s) to {path}")
    return card_count


# --- Import ---


def _find_collection_entry(names: Sequence[str]) -> Optional[str]:
    for candidate in schema.COLLECTION_ENTRY_NAMES:
        if candidate in names:
            return candidate
    return None


def _extract_collection(data: bytes) -> bytes:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            entry = _find_collection_entry(archive.namelist())
            if entry is None:
                raise UnsupportedContainerError(
                    "No Anki database found in package (expected "
                    + " or ".join(schema.COLLECTION_ENTRY_NAMES)
                    + ")."
                )
            return archive.read(entry)
    except zipfile.BadZipFile as e:
        raise UnsupportedContainerError(
            f"Failed to read package as a zip archive: {e}", original_exception=e
        ) from e


def _read_collection(db_path: Path) -> Tuple[Dict[int, AnkiDeckEntry], List[Tuple]]:
    try:
        with closing(sqlite3.connect(db_path)) as conn:
            row = conn.execute(schema.SELECT_DECKS_SQL).fetchone()
            lookup = parse_deck_lookup(row[0] if row else None)
            rows = conn.execute(schema.SELECT_CARD_ROWS_SQL).fetchall()
    except sqlite3.Error as e:
        logger.error(f"Failed to query collection database: {e}")
        raise SchemaError(
            f"Failed to query collection database: {e}", original_exception=e
        ) from e
    return lookup, rows


def _row_to_card(row: Tuple, now: datetime) -> Optional[Card]:
    """Rebuild a card from a joined notes/cards row, or None if the note has
    no usable front and back."""
    flds, tags, _did, ivl, factor, reps, lapses = row
    fields = (flds or "").split(schema.FIELD_SEPARATOR)
    if len(fields) < 2:
        return None

    front = strip_html(fields[0])
    back = strip_html(fields[1])
    if not front or not back:
        return None

    interval = min(max(0, int(ivl or 0)), schema.MAX_INTERVAL_DAYS)
    return Card(
        front=front,
        back=back,
        interval=interval,
        ease_factor=decode_ease(int(factor or 0)),
        repetitions=max(0, int(reps or 0)),
        lapses=max(0, int(lapses or 0)),
        tags=(tags or "").split(),
        due_date=now + timedelta(days=interval) if interval > 0 else None,
    )


def read_apkg(data: bytes, now: Optional[datetime] = None) -> List[Deck]:
    """
    Parse ``.apkg`` archive bytes into decks, one per Anki deck id.

    Only the interval length of each card is trusted: due dates are re-anchored
    to ``now + interval`` days. Nothing is persisted.

    Raises:
        UnsupportedContainerError: If the data is not an archive holding a
            collection database.
        SchemaError: If the collection database cannot be queried.
        EmptyContainerError: If no importable card is found.
    """
    now = ensure_utc(now or datetime.now(timezone.utc))
    db_bytes = _extract_collection(data)

    with temporary_database("flashdeck_import_") as db_path:
        try:
            db_path.write_bytes(db_bytes)
        except OSError as e:
            raise RecordIOError(
                f"Failed to extract collection database: {e}", original_exception=e
            ) from e
        lookup, rows = _read_collection(db_path)

    cards_by_deck: Dict[int, List[Card]] = {}
    skipped = 0
    for row in rows:
        card = _row_to_card(row, now)
        if card is None:
            skipped += 1
            continue
        cards_by_deck.setdefault(int(row[2]), []).append(card)

    if skipped:
        logger.warning(f"Skipped {skipped} note(s) without a usable front and back.")

    decks = []
    for did, cards in cards_by_deck.items():
        entry = lookup.get(did)
        decks.append(
            Deck(
                name=entry.name if entry else f"Imported Deck {did}",
                description=entry.desc if entry else "",
                cards=cards,
            )
        )

    if not decks:
        raise EmptyContainerError("No cards found in package.")

    logger.info(
        f"Read {sum(len(d.cards) for d in decks)} cards in {len(decks)} deck(s) from package."
    )
    return decks


def import_apkg(path: Path, now: Optional[datetime] = None) -> List[Deck]:
    """Read an ``.apkg`` file from disk. See :func:`read_apkg`."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise RecordIOError(
            f"Failed to open package {path}: {e}", original_exception=e
        ) from e
    return read_apkg(data, now=now)
