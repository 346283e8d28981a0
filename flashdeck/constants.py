"""
SM-2 scheduling and deck constants.

This module contains static parameters for the SM-2 scheduler, deck statistics
and study queue construction. No runtime configuration or path defaults - pure
constants only.
"""
from typing import Dict

# Ease factor given to a card that has never been reviewed.
DEFAULT_EASE_FACTOR: float = 2.5

# Ease factor floor. Repeated failures never push a card below this.
MINIMUM_EASE_FACTOR: float = 1.3

# Fixed ease penalty applied on an "Again" rating.
LAPSE_EASE_PENALTY: float = 0.2

# Bootstrap intervals (days) for the first and second successful reviews.
FIRST_INTERVAL_DAYS: int = 1
SECOND_INTERVAL_DAYS: int = 6

# Interval (days) assigned after a lapse.
RELEARN_INTERVAL_DAYS: int = 1

# SM-2 quality score (0-5 scale) used for each passing rating name when
# computing the ease delta.
SM2_QUALITY_BY_RATING: Dict[str, int] = {
    "Hard": 3,
    "Good": 4,
    "Easy": 5,
}

# Cards with an interval at or above this many days are "mature".
MATURE_INTERVAL_DAYS: int = 21

# Maximum number of new cards introduced in one study session.
DEFAULT_NEW_CARD_LIMIT: int = 20

# Length of the short opaque ids given to cards and decks.
SHORT_ID_LENGTH: int = 8

# Deck ids name record files, so they must be a plain file name.
DECK_ID_PATTERN: str = r"^[A-Za-z0-9_-]+$"
