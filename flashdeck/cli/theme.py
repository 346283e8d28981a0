"""
Rich colour palettes for the CLI, one per theme name known to the user config.
"""

from typing import Dict

from rich.theme import Theme

from flashdeck.config import DEFAULT_THEME, normalize_theme
from flashdeck.models import Rating

_PALETTES: Dict[str, Dict[str, str]] = {
    "default": {
        "primary": "bold #6366f1",
        "secondary": "#8b5cf6",
        "success": "#22c55e",
        "warning": "#facc15",
        "error": "bold #ef4444",
        "muted": "#94a3b8",
        "dim": "#64748b",
        "card.front": "bold #f8fafc",
        "card.back": "#22c55e",
        "card.border": "#6366f1",
        "rating.again": "#ef4444",
        "rating.hard": "#fbbf24",
        "rating.good": "#3b82f6",
        "rating.easy": "#22c55e",
    },
    # Kanagawa Wave: crystalBlue, oniViolet, springGreen, roninYellow, samuraiRed.
    "kanagawa-wave": {
        "primary": "bold #7e9cd8",
        "secondary": "#957fb8",
        "success": "#98bb6c",
        "warning": "#ff9e3b",
        "error": "bold #e82424",
        "muted": "#c8c093",
        "dim": "#54546d",
        "card.front": "bold #dcd7ba",
        "card.back": "#98bb6c",
        "card.border": "#7e9cd8",
        "rating.again": "#e82424",
        "rating.hard": "#ff9e3b",
        "rating.good": "#7e9cd8",
        "rating.easy": "#98bb6c",
    },
}

DISPLAY_NAMES = {"default": "Default", "kanagawa-wave": "Kanagawa Wave"}


def get_theme(name: str = DEFAULT_THEME) -> Theme:
    styles = {rating.style_name: rating.color for rating in Rating}
    styles.update(_PALETTES[normalize_theme(name)])
    return Theme(styles)


def display_name(name: str) -> str:
    return DISPLAY_NAMES[normalize_theme(name)]
