import pytest
from datetime import datetime, timezone, timedelta

from pydantic import ValidationError

from flashdeck.constants import DEFAULT_EASE_FACTOR
from flashdeck.models import Card, Deck, Rating, ensure_utc


# --- Rating Tests ---

class TestRating:
    def test_values_are_ordered_by_recall_quality(self):
        assert [r.value for r in Rating] == [1, 2, 3, 4]
        assert Rating.Again < Rating.Hard < Rating.Good < Rating.Easy

    @pytest.mark.parametrize(
        "key, expected",
        [("1", Rating.Again), ("2", Rating.Hard), (" 3 ", Rating.Good), ("4", Rating.Easy)],
    )
    def test_from_key(self, key, expected):
        assert Rating.from_key(key) is expected

    @pytest.mark.parametrize("key", ["0", "5", "a", ""])
    def test_from_key_unmapped(self, key):
        assert Rating.from_key(key) is None

    def test_colors_and_styles(self):
        assert [r.color for r in Rating] == ["red", "yellow", "blue", "green"]
        assert Rating.Hard.style_name == "rating.hard"


# --- Card Model Tests ---

class TestCardModel:
    def test_card_creation_defaults(self):
        """A new card starts with SM-2 defaults and no schedule."""
        card = Card(front="Q", back="A")
        assert len(card.id) == 8
        assert card.ease_factor == DEFAULT_EASE_FACTOR
        assert card.interval == 0
        assert card.repetitions == 0
        assert card.total_reviews == 0
        assert card.lapses == 0
        assert card.due_date is None
        assert card.last_reviewed is None
        assert card.tags == []
        assert card.created_at.tzinfo is not None

    def test_card_ids_are_unique(self):
        assert Card(front="Q", back="A").id != Card(front="Q", back="A").id

    def test_naive_timestamps_become_utc(self):
        card = Card(front="Q", back="A", due_date=datetime(2024, 1, 1, 9, 0))
        assert card.due_date.tzinfo == timezone.utc

    @pytest.mark.parametrize(
        "field, value",
        [("ease_factor", 0), ("interval", -1), ("repetitions", -1), ("lapses", -2)],
    )
    def test_invalid_scheduling_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Card(front="Q", back="A", **{field: value})

    def test_unknown_fields_are_ignored(self):
        card = Card.model_validate({"front": "Q", "back": "A", "future_field": 1})
        assert not hasattr(card, "future_field")

    def test_card_without_due_date_is_due(self):
        assert Card(front="Q", back="A").is_due()

    def test_is_due_compares_against_now(self, fixed_now):
        card = Card(front="Q", back="A", due_date=fixed_now)
        assert card.is_due(fixed_now)
        assert not card.is_due(fixed_now - timedelta(seconds=1))

    def test_reset_progress_keeps_content(self, sample_deck):
        card = sample_deck.get_card("c-due")
        card.reset_progress()
        assert card.front == "Gato"
        assert card.tags == ["animals"]
        assert card.is_new()
        assert card.ease_factor == DEFAULT_EASE_FACTOR
        assert card.interval == 0
        assert card.lapses == 0
        assert card.total_reviews == 0
        assert card.due_date is None
        assert card.last_reviewed is None


def test_ensure_utc_leaves_aware_datetimes_alone():
    aware = datetime(2024, 1, 1, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(aware) is aware


# --- Deck Model Tests ---

class TestDeckModel:
    def test_add_and_get_card(self):
        deck = Deck(name="D")
        card = deck.add_card("Front", "Back")
        assert deck.get_card(card.id) is card
        assert deck.get_card("missing") is None

    def test_update_card(self, sample_deck):
        assert sample_deck.update_card("c-new", "Buenos días", "Good morning")
        card = sample_deck.get_card("c-new")
        assert (card.front, card.back) == ("Buenos días", "Good morning")
        assert not sample_deck.update_card("missing", "x", "y")

    def test_replace_card_keeps_position(self, sample_deck):
        updated = sample_deck.get_card("c-due").model_copy(update={"interval": 15})
        assert sample_deck.replace_card(updated)
        assert sample_deck.cards[1].interval == 15
        assert not sample_deck.replace_card(Card(id="other", front="x", back="y"))

    def test_delete_card(self, sample_deck):
        assert sample_deck.delete_card("c-new")
        assert [c.id for c in sample_deck.cards] == ["c-due", "c-mature"]
        assert not sample_deck.delete_card("c-new")

    def test_due_and_new_cards(self, sample_deck, fixed_now):
        assert [c.id for c in sample_deck.get_due_cards(fixed_now)] == ["c-new", "c-due"]
        assert [c.id for c in sample_deck.get_new_cards()] == ["c-new"]

    def test_get_stats(self, sample_deck, fixed_now):
        stats = sample_deck.get_stats(fixed_now)
        assert stats.total_cards == 3
        assert stats.new_cards == 1
        assert stats.due_cards == 1
        assert stats.learning_cards == 1
        assert stats.mature_cards == 1

    def test_to_info(self, sample_deck):
        info = sample_deck.to_info()
        assert info.id == "sample01"
        assert info.name == "Spanish"
        assert info.card_count == 3
        assert info.description == "Basic vocabulary"

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            Deck(id="", name="D")
