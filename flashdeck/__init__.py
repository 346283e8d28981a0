"""Flashdeck - SM-2 spaced repetition flashcards with Anki interchange."""

from .models import Card, Deck, DeckInfo, DeckStats, Rating
from .constants import DEFAULT_EASE_FACTOR, MINIMUM_EASE_FACTOR
from .scheduler import SM2Scheduler
from .storage import DeckStorage
from .study_session import StudySession

__all__ = [
    "Card",
    "Deck",
    "DeckInfo",
    "DeckStats",
    "Rating",
    "DEFAULT_EASE_FACTOR",
    "MINIMUM_EASE_FACTOR",
    "SM2Scheduler",
    "DeckStorage",
    "StudySession",
]
