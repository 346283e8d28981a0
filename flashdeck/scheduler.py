# flashdeck/scheduler.py

"""
Defines the BaseScheduler abstract class and the SM2Scheduler, the SM-2
variant used to schedule flashdeck reviews.
"""

import logging
from abc import ABC, abstractmethod
import datetime
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from .constants import (
    FIRST_INTERVAL_DAYS,
    LAPSE_EASE_PENALTY,
    MINIMUM_EASE_FACTOR,
    RELEARN_INTERVAL_DAYS,
    SECOND_INTERVAL_DAYS,
    SM2_QUALITY_BY_RATING,
)
from .models import Card, Rating, ensure_utc

logger = logging.getLogger(__name__)

RatingLike = Union[Rating, int]


@dataclass(frozen=True)
class SchedulerOutput:
    ease_factor: float
    interval: int
    repetitions: int
    lapses: int
    due_date: datetime.datetime
    last_reviewed: datetime.datetime
    total_reviews: int


class BaseScheduler(ABC):
    """
    Abstract base class for all schedulers in flashdeck.
    """

    @abstractmethod
    def compute_next_state(
        self, card: Card, rating: RatingLike, review_ts: datetime.datetime
    ) -> SchedulerOutput:
        """
        Computes the next scheduling state of a card for a new rating.

        Args:
            card: The Card object holding the current scheduling state.
            rating: The rating given for the current review.
            review_ts: The timestamp of the current review.

        Returns:
            A SchedulerOutput object containing the new state.

        Raises:
            ValueError: If the rating is invalid.
        """
        pass


class SM2SchedulerConfig(BaseModel):
    """Configuration for the SM-2 scheduler."""

    minimum_ease: float = Field(default=MINIMUM_EASE_FACTOR, gt=0)
    lapse_penalty: float = Field(default=LAPSE_EASE_PENALTY, ge=0)
    first_interval: int = Field(default=FIRST_INTERVAL_DAYS, ge=1)
    second_interval: int = Field(default=SECOND_INTERVAL_DAYS, ge=1)
    relearn_interval: int = Field(default=RELEARN_INTERVAL_DAYS, ge=1)


def format_interval(days: int) -> str:
    """Short label for an interval, e.g. ``"13d"``."""
    return f"{days}d"


def sm2_ease_delta(quality: int) -> float:
    """Standard SM-2 ease adjustment for a 0-5 quality score."""
    miss = 5 - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


class SM2Scheduler(BaseScheduler):
    """
    SM-2 scheduler.

    Failing a card (Again) resets its repetitions and schedules it for the
    next day with an ease penalty. Passing ratings step through the 1 day and
    6 day bootstrap intervals, then multiply the interval by the ease factor,
    nudging the ease by the SM-2 delta for the rating.
    """

    def __init__(self, config: Optional[SM2SchedulerConfig] = None):
        if config is None:
            config = SM2SchedulerConfig()
        self.config = config

    def _validate_rating(self, rating: RatingLike) -> Rating:
        """Maps a rating value (1-4) to Rating and validates it."""
        try:
            return Rating(rating)
        except ValueError:
            raise ValueError(
                f"Invalid rating: {rating}. Must be 1-4 (1=Again, 2=Hard, 3=Good, 4=Easy)."
            ) from None

    def _floor_ease(self, ease: float) -> float:
        return max(self.config.minimum_ease, ease)

    def _next_interval_and_ease(
        self, card: Card, rating: Rating
    ) -> Tuple[int, float]:
        if card.repetitions == 0:
            return self.config.first_interval, card.ease_factor
        if card.repetitions == 1:
            return self.config.second_interval, card.ease_factor

        interval = max(1, round(card.interval * card.ease_factor))
        quality = SM2_QUALITY_BY_RATING[rating.name]
        ease = self._floor_ease(card.ease_factor + sm2_ease_delta(quality))
        return interval, ease

    def compute_next_state(
        self, card: Card, rating: RatingLike, review_ts: datetime.datetime
    ) -> SchedulerOutput:
        """
        Computes the next state of a card from its cached scheduling fields.
        Pure: the card is not modified.
        """
        rating = self._validate_rating(rating)
        review_ts = ensure_utc(review_ts)

        if rating is Rating.Again:
            interval = self.config.relearn_interval
            repetitions = 0
            lapses = card.lapses + 1
            ease = self._floor_ease(card.ease_factor - self.config.lapse_penalty)
        else:
            interval, ease = self._next_interval_and_ease(card, rating)
            repetitions = card.repetitions + 1
            lapses = card.lapses

        return SchedulerOutput(
            ease_factor=ease,
            interval=interval,
            repetitions=repetitions,
            lapses=lapses,
            due_date=review_ts + datetime.timedelta(days=interval),
            last_reviewed=review_ts,
            total_reviews=card.total_reviews + 1,
        )

    def review_card(
        self,
        card: Card,
        rating: RatingLike,
        review_ts: Optional[datetime.datetime] = None,
    ) -> Card:
        """Returns an updated copy of ``card`` after applying ``rating``."""
        ts = review_ts or datetime.datetime.now(datetime.timezone.utc)
        output = self.compute_next_state(card, rating, ts)
        logger.debug(
            f"Card {card.id} rated {Rating(rating).name}: "
            f"interval {card.interval} -> {output.interval}, "
            f"ease {card.ease_factor:.2f} -> {output.ease_factor:.2f}"
        )
        return card.model_copy(
            update={
                "ease_factor": output.ease_factor,
                "interval": output.interval,
                "repetitions": output.repetitions,
                "lapses": output.lapses,
                "due_date": output.due_date,
                "last_reviewed": output.last_reviewed,
                "total_reviews": output.total_reviews,
            }
        )

    def preview(
        self, card: Card, now: Optional[datetime.datetime] = None
    ) -> List[Tuple[Rating, str]]:
        """
        Interval label each rating would produce, in rating order. The card
        is left untouched.
        """
        ts = now or datetime.datetime.now(datetime.timezone.utc)
        return [
            (
                rating,
                format_interval(
                    self.compute_next_state(card, rating, ts).interval
                ),
            )
            for rating in Rating
        ]
