# shapecast/display.py
"""Terminal display utilities using Rich."""

from __future__ import annotations

from rich.console import Console

console = Console()

SHAPECAST_COLORS = {
    "primary": "#ff79c6",
    "secondary": "#6272a4",
    "success": "#50fa7b",
    "warning": "#f1fa8c",
    "error": "#ff5555",
    "info": "#8be9fd",
    "accent": "#bd93f9",
    "muted": "#44475a",
}


def styled_message(message: str, style: str = "info") -> None:
    """Print a styled message."""
    color = SHAPECAST_COLORS.get(style, SHAPECAST_COLORS["info"])
    console.print(message, style=color)
