"""vm-cleanup UI - Terminal output components."""

from .console import console, CleanupConsole
from .theme import COLORS, SYMBOLS, VMCLEAN_THEME
from .progress import spinner, steps, StepsProgress
from .errors import show_error, show_warning
from .panels import status_panel, summary_panel

__all__ = [
    "console", "CleanupConsole", "COLORS", "SYMBOLS", "VMCLEAN_THEME",
    "spinner", "steps", "StepsProgress",
    "show_error", "show_warning",
    "status_panel", "summary_panel",
]
