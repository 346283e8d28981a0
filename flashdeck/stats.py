"""
Collection-wide review statistics: card and review totals, a breakdown of
cards by ease level, and daily/weekly review streaks.
"""

from datetime import date, timedelta
from typing import Iterable, Optional, Set, Tuple

from pydantic import BaseModel, Field

from .models import Card, Deck

EASY_THRESHOLD = 2.5
GOOD_THRESHOLD = 2.0
HARD_THRESHOLD = 1.5


class EaseBreakdown(BaseModel):
    new: int = 0
    easy: int = 0
    good: int = 0
    hard: int = 0
    struggling: int = 0

    def count(self, card: Card) -> None:
        if card.is_new():
            self.new += 1
        elif card.ease_factor >= EASY_THRESHOLD:
            self.easy += 1
        elif card.ease_factor >= GOOD_THRESHOLD:
            self.good += 1
        elif card.ease_factor >= HARD_THRESHOLD:
            self.hard += 1
        else:
            self.struggling += 1


class CollectionOverview(BaseModel):
    total_cards: int = 0
    total_reviews: int = 0
    ease: EaseBreakdown = Field(default_factory=EaseBreakdown)
    daily_streak: int = 0
    weekly_streak: int = 0


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def calculate_streaks(
    dates: Iterable[date], today: Optional[date] = None
) -> Tuple[int, int]:
    """
    Daily and weekly review streaks.

    The daily streak counts consecutive days with a review, ending today, or
    yesterday when there is nothing today. The weekly streak does the same for
    Monday-based weeks, ending this week or last week.
    """
    days: Set[date] = set(dates)
    if not days:
        return 0, 0
    today = today or date.today()

    daily = 0
    day = today if today in days else today - timedelta(days=1)
    while day in days:
        daily += 1
        day -= timedelta(days=1)

    weeks = {_week_start(d) for d in days}
    weekly = 0
    week = _week_start(today)
    if week not in weeks:
        week -= timedelta(days=7)
    while week in weeks:
        weekly += 1
        week -= timedelta(days=7)

    return daily, weekly


def collect_overview(
    decks: Iterable[Deck], today: Optional[date] = None
) -> CollectionOverview:
    """Aggregate statistics over every card of ``decks``."""
    overview = CollectionOverview()
    review_dates = []
    for deck in decks:
        for card in deck.cards:
            overview.total_cards += 1
            overview.total_reviews += card.total_reviews
            overview.ease.count(card)
            if card.last_reviewed is not None:
                review_dates.append(card.last_reviewed.astimezone().date())

    overview.daily_streak, overview.weekly_streak = calculate_streaks(
        review_dates, today
    )
    return overview
