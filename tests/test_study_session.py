"""
Tests for the StudySession queue and persistence.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from flashdeck.exceptions import RecordIOError
from flashdeck.models import Card, Deck, Rating
from flashdeck.scheduler import SM2Scheduler
from flashdeck.storage import DeckStorage
from flashdeck.study_session import StudySession


@pytest.fixture
def session(empty_storage, sample_deck, fixed_now) -> StudySession:
    empty_storage.save_deck(sample_deck)
    return StudySession(empty_storage, sample_deck, now=fixed_now)


def test_queue_has_due_reviews_then_new_cards(session):
    assert list(session.queue) == ["c-due", "c-new"]
    assert session.remaining == 2
    assert not session.is_complete
    assert session.next_card().id == "c-due"


def test_new_card_limit(empty_storage, fixed_now):
    deck = Deck(name="Many", cards=[Card(front=f"Q{i}", back="A") for i in range(30)])
    session = StudySession(empty_storage, deck, new_card_limit=20, now=fixed_now)
    assert session.remaining == 20

    assert StudySession(empty_storage, deck, new_card_limit=0, now=fixed_now).is_complete


def test_rate_updates_card_and_persists(session, empty_storage, fixed_now):
    updated = session.rate(Rating.Good, now=fixed_now)
    assert updated.id == "c-due"
    assert updated.interval == round(6 * 2.36)
    assert updated.repetitions == 3

    stored = empty_storage.load_deck("sample01")
    assert stored.get_card("c-due").interval == updated.interval
    assert stored.last_studied == fixed_now
    assert session.cards_studied == 1
    assert session.next_card().id == "c-new"


def test_again_requeues_card_at_end(session, fixed_now):
    session.rate(Rating.Again, now=fixed_now)
    assert list(session.queue) == ["c-new", "c-due"]
    session.rate(Rating.Good, now=fixed_now)
    session.rate(Rating.Good, now=fixed_now)
    assert session.is_complete
    assert session.cards_studied == 3
    assert session.next_card() is None


def test_preview_for_current_card(session, fixed_now):
    labels = [label for _, label in session.preview(fixed_now)]
    assert labels == ["1d", "14d", "14d", "14d"]


def test_preview_when_complete(empty_storage, fixed_now):
    session = StudySession(empty_storage, Deck(name="Empty"), now=fixed_now)
    assert session.preview() == []


def test_rate_when_complete_raises(empty_storage, fixed_now):
    session = StudySession(empty_storage, Deck(name="Empty"), now=fixed_now)
    with pytest.raises(ValueError):
        session.rate(Rating.Good)


def test_card_deleted_mid_session_is_skipped(session, sample_deck):
    sample_deck.delete_card("c-due")
    assert session.next_card().id == "c-new"
    assert session.remaining == 1


def test_uses_injected_scheduler(empty_storage, sample_deck, fixed_now):
    scheduler = MagicMock(spec=SM2Scheduler)
    scheduler.review_card.side_effect = lambda card, rating, ts: card.model_copy(
        update={"interval": 99}
    )
    session = StudySession(empty_storage, sample_deck, scheduler=scheduler, now=fixed_now)
    assert session.rate(3, now=fixed_now).interval == 99
    scheduler.review_card.assert_called_once()


def test_save_failure_propagates(sample_deck, fixed_now):
    storage = MagicMock(spec=DeckStorage)
    storage.save_deck.side_effect = RecordIOError("disk full")
    session = StudySession(storage, sample_deck, scheduler=SM2Scheduler(), now=fixed_now)
    with pytest.raises(RecordIOError):
        session.rate(Rating.Easy, now=fixed_now + timedelta(minutes=1))
