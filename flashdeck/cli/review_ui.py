"""
Command-line interface for studying a deck.
"""

import logging
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from flashdeck.exceptions import FlashdeckError
from flashdeck.models import Card, Rating
from flashdeck.study_session import StudySession
from flashdeck.cli.theme import get_theme

logger = logging.getLogger(__name__)
console = Console(theme=get_theme())

QUIT_KEYS = ("q", "quit")


def _format_choices(preview: List[Tuple[Rating, str]]) -> str:
    return "  ".join(
        f"[{rating.style_name}]{rating.key}:{rating.name} ({label})[/{rating.style_name}]"
        for rating, label in preview
    )


def _get_user_rating(preview: List[Tuple[Rating, str]]) -> Optional[Rating]:
    """
    Prompt for a rating until a valid key is entered.

    Returns:
        The chosen rating, or None if the learner asked to quit.
    """
    prompt = f"{_format_choices(preview)}  [muted]q:Quit[/muted]\n[bold]Rating: [/bold]"
    while True:
        answer = console.input(prompt).strip().lower()
        if answer in QUIT_KEYS:
            return None
        rating = Rating.from_key(answer)
        if rating is not None:
            return rating
        console.print(
            "[error]Invalid rating. Please enter a number between 1 and 4.[/error]"
        )


def _display_card(card: Card) -> None:
    """Show the front, wait for Enter, then reveal the back."""
    console.print(
        Panel(Text(card.front), title="Front", border_style="card.border", style="card.front")
    )
    console.input("[italic muted]Press Enter to see the back...[/italic muted]")
    console.print(
        Panel(Text(card.back), title="Back", border_style="card.border", style="card.back")
    )


def start_review_flow(session: StudySession) -> int:
    """
    Run the interactive study loop until the queue is empty or the learner
    quits.

    Returns:
        int: Number of ratings applied.
    """
    deck_name = escape(session.deck.name)
    if session.is_complete:
        console.print(f"[warning]No cards to study in '{deck_name}'.[/warning]")
        return 0

    console.print(f"[primary]Studying {deck_name}[/primary]")
    while (card := session.next_card()) is not None:
        console.rule(
            f"[bold]Card {session.cards_studied + 1}[/bold] "
            f"[muted]({session.remaining} remaining)[/muted]"
        )
        _display_card(card)
        rating = _get_user_rating(session.preview())
        if rating is None:
            console.print("[muted]Session ended early.[/muted]")
            break

        try:
            updated = session.rate(rating)
        except FlashdeckError as e:
            logger.error(f"Failed to save review of card {card.id}: {e}")
            console.print(f"[error]Could not save your review: {escape(str(e))}[/error]")
            break

        if rating is Rating.Again:
            console.print("[warning]Card will be shown again this session.[/warning]")
        else:
            console.print(
                f"[success]Reviewed.[/success] Next due in "
                f"[bold]{updated.interval} day(s)[/bold]."
            )

    console.print(
        f"[primary]Session finished.[/primary] "
        f"You studied {session.cards_studied} card(s)."
    )
    return session.cards_studied
