"""
Contains the business logic for saving imported decks into the store.
This logic is called by the CLI commands in main.py.
"""

import logging
from typing import List, Sequence, Tuple

from flashdeck.models import Deck
from flashdeck.storage import DeckStorage

logger = logging.getLogger(__name__)


def save_imported_decks(
    storage: DeckStorage, decks: Sequence[Deck]
) -> Tuple[List[Deck], List[str]]:
    """
    Persist freshly imported decks, skipping any whose name collides,
    case-insensitively, with a stored deck or with a deck saved earlier in the
    same batch. Decks without cards are not saved.

    Returns:
        (saved, skipped): the decks written and the names that were skipped.
    """
    taken = {info.name.lower() for info in storage.list_decks()}
    saved: List[Deck] = []
    skipped: List[str] = []

    for deck in decks:
        key = deck.name.lower()
        if key in taken:
            logger.info(f"Skipping imported deck '{deck.name}': name already exists")
            skipped.append(deck.name)
            continue
        if not deck.cards:
            logger.info(f"Imported deck '{deck.name}' has no cards; not saved")
            continue
        storage.save_deck(deck)
        taken.add(key)
        saved.append(deck)

    logger.info(f"Saved {len(saved)} imported deck(s), skipped {len(skipped)}")
    return saved, skipped
