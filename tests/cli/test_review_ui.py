"""
Unit tests for the flashdeck.cli.review_ui module.
"""

from unittest.mock import MagicMock, patch

import pytest

from flashdeck.cli._review_logic import review_logic
from flashdeck.cli.review_ui import _format_choices, start_review_flow
from flashdeck.exceptions import RecordIOError
from flashdeck.models import Card, Deck, Rating
from flashdeck.study_session import StudySession


@pytest.fixture
def session(empty_storage, sample_deck, fixed_now) -> StudySession:
    empty_storage.save_deck(sample_deck)
    return StudySession(empty_storage, sample_deck, now=fixed_now)


def test_start_review_flow_nothing_to_study(empty_storage, capsys):
    """Tests the review flow when no cards are queued."""
    session = StudySession(empty_storage, Deck(name="Empty"))

    with patch("rich.console.Console.input") as mock_input:
        assert start_review_flow(session) == 0

    captured = capsys.readouterr()
    assert "No cards to study in 'Empty'." in captured.out
    mock_input.assert_not_called()


def test_start_review_flow_full_pass(session, empty_storage, capsys):
    """Rates the due card Good, fails the new card, then quits."""
    with patch("rich.console.Console.input", side_effect=["", "3", "", "1", "", "q"]):
        studied = start_review_flow(session)

    output = capsys.readouterr().out
    assert studied == 2
    assert "Card 1" in output
    assert "Gato" in output
    assert "Cat" in output
    assert "Next due in 14 day(s)." in output
    assert "Card will be shown again this session." in output
    assert "Session ended early." in output
    assert "You studied 2 card(s)." in output

    stored = empty_storage.load_deck("sample01")
    assert stored.get_card("c-due").interval == 14
    assert stored.get_card("c-new").lapses == 1


def test_start_review_flow_invalid_rating_input(session, capsys):
    """Tests that the review flow re-prompts on invalid rating input."""
    with patch(
        "rich.console.Console.input", side_effect=["", "abc", "5", "2", "", "q"]
    ):
        start_review_flow(session)

    output = capsys.readouterr().out
    assert output.count("Invalid rating. Please enter a number between 1 and 4.") == 2
    assert session.cards_studied == 1
    assert session.deck.get_card("c-due").repetitions == 3


def test_start_review_flow_save_error_stops_session(sample_deck, fixed_now, capsys):
    storage = MagicMock()
    storage.save_deck.side_effect = RecordIOError("disk full")
    session = StudySession(storage, sample_deck, now=fixed_now)

    with patch("rich.console.Console.input", side_effect=["", "4"]):
        start_review_flow(session)

    output = capsys.readouterr().out
    assert "Could not save your review: disk full" in output
    assert "Session finished." in output


def test_format_choices_includes_interval_labels():
    text = _format_choices([(Rating.Again, "1d"), (Rating.Good, "6d")])
    assert "1:Again (1d)" in text
    assert "3:Good (6d)" in text
    assert "[rating.again]" in text


@pytest.mark.parametrize("theme_name", ["default", "kanagawa-wave"])
def test_review_logic_runs_flow_with_theme(empty_storage, theme_name):
    deck = Deck(name="One", cards=[Card(front="Q", back="A")])
    empty_storage.save_deck(deck)

    with patch(
        "flashdeck.cli._review_logic.review_ui.start_review_flow", return_value=1
    ) as mock_flow:
        assert review_logic(empty_storage, deck, new_card_limit=20, theme_name=theme_name) == 1

    (session,) = mock_flow.call_args.args
    assert session.deck is deck
    assert session.remaining == 1


def test_card_text_is_shown_literally(empty_storage, capsys):
    """Brackets in card text are printed as-is rather than read as styling."""
    deck = Deck(
        name="Syntax [/b]",
        cards=[Card(front="Close bold with [/b]", back="Index with list[i]")],
    )
    empty_storage.save_deck(deck)
    session = StudySession(empty_storage, deck)

    with patch("rich.console.Console.input", side_effect=["", "3"]):
        assert start_review_flow(session) == 1

    output = capsys.readouterr().out
    assert "Close bold with [/b]" in output
    assert "Index with list[i]" in output
    assert "Studying Syntax [/b]" in output
