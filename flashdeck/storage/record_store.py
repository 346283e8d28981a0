"""
File-backed deck record store for flashdeck.
Implements the DeckStorage class: one JSON record per deck, named by deck id.
"""

import logging
import os
from importlib import resources
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from ..exceptions import CorruptRecordError, RecordIOError
from ..models import Deck, DeckInfo
from . import record_utils

logger = logging.getLogger(__name__)

BUNDLED_DECK_FILES = ("development-workflow.json",)


def _default_data_dir() -> Path:
    """Per-user data directory, following XDG on POSIX and LOCALAPPDATA on
    Windows."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA")
        if base:
            return Path(base)
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".local" / "share"


class DeckStorage:
    """
    Maps deck ids to persisted deck records.

    The store assumes exclusive single-process access to its directory and
    performs no locking. On construction it creates the directory and, if no
    deck records exist yet, installs the bundled starter decks.
    """

    def __init__(self, decks_dir: Union[str, Path]):
        """
        Create a DeckStorage rooted at ``decks_dir``.

        Raises:
            RecordIOError: If the directory cannot be created.
        """
        self.decks_dir = Path(decks_dir)
        try:
            self.decks_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RecordIOError(
                f"Failed to create decks directory {self.decks_dir}: {e}",
                original_exception=e,
            ) from e
        logger.info(f"DeckStorage initialized at: {self.decks_dir}")
        self.install_bundled_decks()

    @staticmethod
    def default_path() -> Path:
        return _default_data_dir() / "flashdeck" / "decks"

    # --- Seeding ---

    def _record_files(self) -> List[Path]:
        return sorted(self.decks_dir.glob(f"*{record_utils.RECORD_SUFFIX}"))

    def has_records(self) -> bool:
        return bool(self._record_files())

    def install_bundled_decks(self) -> int:
        """
        Install the bundled starter decks, reset to the new state, if the store
        holds no records. Returns the number of decks installed.
        """
        if self.has_records():
            return 0

        installed = 0
        bundled = resources.files("flashdeck.storage") / "bundled"
        for filename in BUNDLED_DECK_FILES:
            try:
                text = (bundled / filename).read_text(encoding="utf-8")
                deck = record_utils.record_to_deck(text)
            except (OSError, CorruptRecordError) as e:
                logger.warning(f"Skipping bundled deck {filename}: {e}")
                continue
            for card in deck.cards:
                card.reset_progress()
            self.save_deck(deck)
            installed += 1
        logger.info(f"Installed {installed} bundled deck(s).")
        return installed

    # --- Record operations ---

    def deck_path(self, deck_id: str) -> Path:
        return record_utils.record_path(self.decks_dir, deck_id)

    def save_deck(self, deck: Deck) -> Path:
        """
        Persist a deck and all its cards, replacing any previous record.

        Returns:
            Path: Location of the written record.

        Raises:
            RecordIOError: If the record cannot be written.
        """
        path = self.deck_path(deck.id)
        record_utils.write_record_atomic(path, record_utils.deck_to_record(deck))
        logger.debug(f"Saved deck '{deck.name}' ({len(deck.cards)} cards) to {path}")
        return path

    def load_deck(self, deck_id: str) -> Optional[Deck]:
        """
        Load a deck by id.

        Returns:
            The deck, or None if no record exists.

        Raises:
            RecordIOError: If the record exists but cannot be read.
            CorruptRecordError: If the record cannot be parsed.
        """
        path = self.deck_path(deck_id)
        if not path.exists():
            return None
        return record_utils.record_to_deck(record_utils.read_record(path), path)

    def delete_deck(self, deck_id: str) -> bool:
        """Remove a deck record. Returns whether it existed."""
        path = self.deck_path(deck_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise RecordIOError(
                f"Could not delete record {path}: {e}", original_exception=e
            ) from e
        logger.info(f"Deleted deck record {path}")
        return True

    def _parse_attempts(self) -> Iterator[Tuple[Path, Optional[Deck]]]:
        """Lazily yield (path, deck) for every record; deck is None when the
        record could not be read or parsed."""
        for path in self._record_files():
            try:
                yield path, record_utils.record_to_deck(
                    record_utils.read_record(path), path
                )
            except (RecordIOError, CorruptRecordError) as e:
                logger.warning(f"Skipping unreadable deck record {path.name}: {e}")
                yield path, None

    def _loadable_decks(self) -> List[Deck]:
        decks = [deck for _, deck in self._parse_attempts() if deck is not None]
        decks.sort(key=lambda d: d.name)
        return decks

    def list_decks(self) -> List[DeckInfo]:
        """
        Summaries of all loadable decks, sorted by name (case-sensitive).
        Unparsable records are left out rather than failing the listing.
        """
        return [deck.to_info() for deck in self._loadable_decks()]

    def load_all_decks(self) -> List[Deck]:
        """Every loadable deck, in listing order."""
        return self._loadable_decks()

    def deck_name_exists(self, name: str) -> bool:
        wanted = name.lower()
        return any(info.name.lower() == wanted for info in self.list_decks())

    def deck_id_exists(self, deck_id: str) -> bool:
        """True if a record file exists for ``deck_id``, parsable or not."""
        return self.deck_path(deck_id).exists()
