"""
Card, Deck and rating models shared by the scheduler, the record store and the
interchange codecs.
"""

from __future__ import annotations

import uuid
from enum import IntEnum
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DECK_ID_PATTERN,
    DEFAULT_EASE_FACTOR,
    MATURE_INTERVAL_DAYS,
    SHORT_ID_LENGTH,
)


def _short_id() -> str:
    return uuid.uuid4().hex[:SHORT_ID_LENGTH]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """Ensures the given datetime is timezone-aware. Assumes UTC if naive."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


class Rating(IntEnum):
    """
    Represents the learner's rating of their recall performance.

    Values are ordered by increasing recall quality; the value doubles as the
    key the learner presses.
    """

    Again = 1
    Hard = 2
    Good = 3
    Easy = 4

    @classmethod
    def from_key(cls, key: str) -> Optional["Rating"]:
        """Map an input key ("1".."4") to a rating, or None if unmapped."""
        key = key.strip()
        for rating in cls:
            if key == rating.key:
                return rating
        return None

    @property
    def key(self) -> str:
        return str(self.value)

    @property
    def color(self) -> str:
        """Base terminal colour; themes may refine it through ``style_name``."""
        return _RATING_COLORS[self]

    @property
    def style_name(self) -> str:
        return f"rating.{self.name.lower()}"


_RATING_COLORS = {
    Rating.Again: "red",
    Rating.Hard: "yellow",
    Rating.Good: "blue",
    Rating.Easy: "green",
}


class Card(BaseModel):
    """
    A single flashcard with its SM-2 scheduling state.

    A card with no due date is always due. Unknown keys in a stored record are
    ignored so that newer records still load.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    id: str = Field(
        default_factory=_short_id,
        min_length=1,
        description="Short opaque id, unique within the deck.",
    )
    front: str = Field(..., description="Prompt text.")
    back: str = Field(..., description="Answer text.")

    ease_factor: float = Field(
        default=DEFAULT_EASE_FACTOR,
        gt=0,
        description="Multiplier applied to the interval on recall.",
    )
    interval: int = Field(
        default=0, ge=0, description="Days until the next review."
    )
    repetitions: int = Field(
        default=0,
        ge=0,
        description="Consecutive successful reviews since the last lapse.",
    )

    due_date: Optional[datetime] = Field(
        default=None,
        description="When the card is next due (None means due now).",
    )
    last_reviewed: Optional[datetime] = Field(
        default=None, description="Timestamp of the last review."
    )
    total_reviews: int = Field(default=0, ge=0)
    lapses: int = Field(default=0, ge=0)

    tags: List[str] = Field(default_factory=list)
    notes: str = ""
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("due_date", "last_reviewed", "created_at")
    @classmethod
    def _aware_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None

    def is_new(self) -> bool:
        return self.repetitions == 0

    def is_due(self, now: Optional[datetime] = None) -> bool:
        if self.due_date is None:
            return True
        return ensure_utc(now or _utc_now()) >= self.due_date

    def reset_progress(self) -> None:
        """Return the card to the never-reviewed state, keeping its content."""
        self.ease_factor = DEFAULT_EASE_FACTOR
        self.interval = 0
        self.repetitions = 0
        self.due_date = None
        self.last_reviewed = None
        self.total_reviews = 0
        self.lapses = 0


class DeckStats(BaseModel):
    """Derived counts for a deck. Recomputed on demand, never persisted."""

    total_cards: int = 0
    new_cards: int = 0
    due_cards: int = 0
    learning_cards: int = 0
    mature_cards: int = 0


class DeckInfo(BaseModel):
    """Summary of a stored deck, as produced by the record listing."""

    id: str
    name: str
    card_count: int
    description: str = ""


class Deck(BaseModel):
    """An ordered collection of cards, persisted as a single record."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    id: str = Field(default_factory=_short_id, pattern=DECK_ID_PATTERN)
    name: str
    description: str = ""
    cards: List[Card] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now)
    last_studied: Optional[datetime] = None

    @field_validator("created_at", "last_studied")
    @classmethod
    def _aware_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None

    def add_card(self, front: str, back: str) -> Card:
        card = Card(front=front, back=back)
        self.cards.append(card)
        return card

    def get_card(self, card_id: str) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def update_card(self, card_id: str, front: str, back: str) -> bool:
        """Edit a card's content. Returns False if the id is unknown."""
        card = self.get_card(card_id)
        if card is None:
            return False
        card.front = front
        card.back = back
        return True

    def replace_card(self, card: Card) -> bool:
        """Swap in an updated copy of a card, matched by id."""
        for idx, existing in enumerate(self.cards):
            if existing.id == card.id:
                self.cards[idx] = card
                return True
        return False

    def delete_card(self, card_id: str) -> bool:
        before = len(self.cards)
        self.cards = [c for c in self.cards if c.id != card_id]
        return len(self.cards) < before

    def get_due_cards(self, now: Optional[datetime] = None) -> List[Card]:
        return [c for c in self.cards if c.is_due(now)]

    def get_new_cards(self) -> List[Card]:
        return [c for c in self.cards if c.is_new()]

    def get_stats(self, now: Optional[datetime] = None) -> DeckStats:
        """Count new, due, learning and mature cards."""
        stats = DeckStats(total_cards=len(self.cards))
        for card in self.cards:
            if card.is_new():
                stats.new_cards += 1
            elif card.is_due(now):
                stats.due_cards += 1

            if card.interval >= MATURE_INTERVAL_DAYS:
                stats.mature_cards += 1
            elif not card.is_new():
                stats.learning_cards += 1
        return stats

    def to_info(self) -> DeckInfo:
        return DeckInfo(
            id=self.id,
            name=self.name,
            card_count=len(self.cards),
            description=self.description,
        )
