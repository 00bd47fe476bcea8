"""vm-cleanup Errors - Structured error display with suggested fixes."""

from typing import List, Optional
from rich.markup import escape
from rich.panel import Panel
from .theme import SYMBOLS
from .console import console


def show_error(title: str, message: str, suggested_fix: Optional[str] = None, fix_description: Optional[str] = None) -> None:
    lines = [f"[error]{SYMBOLS['error']} FAILED:[/] [primary]{escape(title)}[/]", "", f"  [error]Error:[/] {escape(message)}"]
    console.print(Panel("\n".join(lines), border_style="error", padding=(1, 2)))
    if suggested_fix:
        fix_content = []
        if fix_description:
            fix_content.append(f"[muted]{fix_description}[/]")
            fix_content.append("")
        fix_content.append(f"[command]{escape(suggested_fix)}[/]")
        console.print(Panel("\n".join(fix_content), title="[success]─ SUGGESTED FIX [/]", border_style="success", padding=(0, 2)))


def show_warning(title: str, message: str, details: Optional[List[str]] = None) -> None:
    lines = [f"[warning]{SYMBOLS['warning']}  {escape(title)}[/]", "", f"[primary]{escape(message)}[/]"]
    if details:
        lines.append("")
        for detail in details:
            lines.append(f"  [secondary]• {escape(detail)}[/]")
    console.print(Panel("\n".join(lines), border_style="warning", padding=(1, 2)))
