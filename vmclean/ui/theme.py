"""vm-cleanup UI Theme - colors, status symbols and the rich theme built from them."""

from rich.theme import Theme
from rich.style import Style

COLORS = {
    "success": "#22c55e",
    "error": "#ef4444",
    "warning": "#eab308",
    "info": "#3b82f6",
    "command": "#06b6d4",
    "secondary": "#6b7280",
    "primary": "#ffffff",
    "brand": "#8b5cf6",
    "panel_border": "#4b5563",
    "muted": "#9ca3af",
}

SYMBOLS = {
    "success": "✓",
    "error": "✗",
    "warning": "⚠",
    "info": "●",
    "command": "→",
    "skip": "•",
}

# Status words are bold; their leading symbols use the plain color
_STATUS = ("success", "warning", "info")

VMCLEAN_THEME = Theme({
    "success": Style(color=COLORS["success"], bold=True),
    "error": Style(color=COLORS["error"], bold=True),
    "warning": Style(color=COLORS["warning"], bold=True),
    "info": Style(color=COLORS["info"]),
    "command": Style(color=COLORS["command"], dim=True),
    "secondary": Style(color=COLORS["secondary"], dim=True),
    "primary": Style(color=COLORS["primary"]),
    "brand": Style(color=COLORS["brand"], bold=True),
    "muted": Style(color=COLORS["muted"]),
    "panel_border": Style(color=COLORS["panel_border"]),
    **{f"{name}_symbol": Style(color=COLORS[name]) for name in _STATUS},
})
