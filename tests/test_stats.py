from datetime import date, datetime, timedelta, timezone

import pytest

from flashdeck.models import Card, Deck
from flashdeck.stats import calculate_streaks, collect_overview

# A Wednesday.
TODAY = date(2024, 3, 6)


def _days_ago(*offsets):
    return [TODAY - timedelta(days=n) for n in offsets]


@pytest.mark.parametrize(
    "dates, expected_daily",
    [
        ([], 0),
        (_days_ago(0), 1),
        (_days_ago(0, 1, 2), 3),
        (_days_ago(1, 2), 2),
        (_days_ago(0, 2, 3), 1),
        (_days_ago(2, 3, 4), 0),
        (_days_ago(0, 0, 1), 2),
    ],
)
def test_daily_streak(dates, expected_daily):
    daily, _ = calculate_streaks(dates, TODAY)
    assert daily == expected_daily


@pytest.mark.parametrize(
    "dates, expected_weekly",
    [
        ([], 0),
        # Monday of this week only.
        (_days_ago(2), 1),
        # This week, last week and the week before.
        (_days_ago(0, 7, 14), 3),
        # Nothing this week yet: counts from last week.
        (_days_ago(3, 10), 2),
        # Gap of a whole week.
        (_days_ago(0, 14), 1),
        (_days_ago(10, 17), 0),
    ],
)
def test_weekly_streak(dates, expected_weekly):
    _, weekly = calculate_streaks(dates, TODAY)
    assert weekly == expected_weekly


def test_collect_overview():
    reviewed_at = datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc)

    def reviewed(ease):
        return Card(
            front="Q", back="A", repetitions=2, interval=6, ease_factor=ease,
            total_reviews=2, last_reviewed=reviewed_at,
        )

    decks = [
        Deck(name="A", cards=[Card(front="Q", back="A"), reviewed(2.5), reviewed(2.1)]),
        Deck(name="B", cards=[reviewed(1.6), reviewed(1.3), reviewed(3.0)]),
    ]
    overview = collect_overview(decks, today=reviewed_at.astimezone().date())

    assert overview.total_cards == 6
    assert overview.total_reviews == 10
    assert overview.ease.new == 1
    assert overview.ease.easy == 2
    assert overview.ease.good == 1
    assert overview.ease.hard == 1
    assert overview.ease.struggling == 1
    assert overview.daily_streak == 1
    assert overview.weekly_streak == 1


def test_collect_overview_empty():
    overview = collect_overview([])
    assert overview.total_cards == 0
    assert (overview.daily_streak, overview.weekly_streak) == (0, 0)
