"""Record store package for flashdeck.

Only DeckStorage is exported as the public API.
"""

from .record_store import DeckStorage

__all__ = ["DeckStorage"]
