from flashdeck.cli import review_ui
from flashdeck.cli.theme import get_theme
from flashdeck.models import Deck
from flashdeck.scheduler import SM2Scheduler
from flashdeck.storage import DeckStorage
from flashdeck.study_session import StudySession


def review_logic(
    storage: DeckStorage,
    deck: Deck,
    new_card_limit: int,
    theme_name: str,
) -> int:
    """
    Set up and run an interactive study session for ``deck``.

    Builds an SM-2 scheduler and a study session bound to the store, applies
    the user's colour theme to the review console and launches the review
    flow.

    Returns:
        int: Number of ratings applied during the session.
    """
    session = StudySession(
        storage=storage,
        deck=deck,
        scheduler=SM2Scheduler(),
        new_card_limit=new_card_limit,
    )
    review_ui.console.push_theme(get_theme(theme_name))
    try:
        return review_ui.start_review_flow(session)
    finally:
        review_ui.console.pop_theme()
