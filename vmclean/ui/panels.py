"""vm-cleanup Panels - Run settings and summary panels."""

from typing import List, Optional
from rich.panel import Panel
from .console import console


def status_panel(title: str, items: List[str]) -> None:
    content = "\n".join(f"  {item}" for item in items)
    console.print(Panel(content, title=f"─ {title} ", border_style="panel_border", padding=(1, 2)))


def summary_panel(title: str, summary: str, details: Optional[dict] = None) -> None:
    lines = [summary]
    if details:
        lines.append("")
        for key, value in details.items():
            lines.append(f"[muted]{key}:[/] {value}")
    console.print(Panel("\n".join(lines), title=f"[brand]─ {title} [/]", border_style="brand", padding=(1, 2)))
