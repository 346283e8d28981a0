"""
This module defines the StudySession class, which walks a learner through the
due and new cards of one deck, applies each rating through the scheduler and
writes the deck back to the store after every review.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List, Optional, Tuple

from .constants import DEFAULT_NEW_CARD_LIMIT
from .models import Card, Deck, Rating
from .scheduler import RatingLike, SM2Scheduler
from .storage import DeckStorage

logger = logging.getLogger(__name__)


class StudySession:
    """
    A single pass over a deck's review queue.

    The queue holds the due cards that have been reviewed before, in deck
    order, followed by at most ``new_card_limit`` new cards. A card rated
    Again goes back to the end of the queue.
    """

    def __init__(
        self,
        storage: DeckStorage,
        deck: Deck,
        scheduler: Optional[SM2Scheduler] = None,
        new_card_limit: int = DEFAULT_NEW_CARD_LIMIT,
        now: Optional[datetime] = None,
    ):
        self.storage = storage
        self.deck = deck
        self.scheduler = scheduler or SM2Scheduler()
        self.new_card_limit = new_card_limit
        self.cards_studied = 0
        self.queue: Deque[str] = deque(self._build_queue(now))
        logger.info(
            f"Study session for '{deck.name}' started with {len(self.queue)} cards."
        )

    def _build_queue(self, now: Optional[datetime]) -> List[str]:
        due = [
            c.id for c in self.deck.cards if not c.is_new() and c.is_due(now)
        ]
        new = [c.id for c in self.deck.get_new_cards()][: max(0, self.new_card_limit)]
        return due + new

    @property
    def remaining(self) -> int:
        return len(self.queue)

    @property
    def is_complete(self) -> bool:
        return not self.queue

    def next_card(self) -> Optional[Card]:
        """The card at the head of the queue, or None when the session is done."""
        while self.queue:
            card = self.deck.get_card(self.queue[0])
            if card is not None:
                return card
            # Deleted from the deck mid-session.
            self.queue.popleft()
        return None

    def preview(self, now: Optional[datetime] = None) -> List[Tuple[Rating, str]]:
        card = self.next_card()
        if card is None:
            return []
        return self.scheduler.preview(card, now)

    def rate(self, rating: RatingLike, now: Optional[datetime] = None) -> Card:
        """
        Apply ``rating`` to the current card and persist the deck.

        Raises:
            ValueError: If the session is complete or the rating is invalid.
            RecordIOError: If the deck cannot be saved.
        """
        card = self.next_card()
        if card is None:
            raise ValueError("No card to rate: the study session is complete.")

        ts = now or datetime.now(timezone.utc)
        updated = self.scheduler.review_card(card, rating, ts)
        self.deck.replace_card(updated)
        self.deck.last_studied = ts

        card_id = self.queue.popleft()
        if Rating(rating) is Rating.Again:
            self.queue.append(card_id)
        self.cards_studied += 1

        self.storage.save_deck(self.deck)
        return updated
