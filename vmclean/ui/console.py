"""vm-cleanup Console - Themed console singleton with semantic message methods."""

from typing import Optional
from rich.console import Console as RichConsole
from rich.markup import escape
from .theme import VMCLEAN_THEME, SYMBOLS


class CleanupConsole:
    """Themed console with semantic message methods."""

    _instance: Optional['CleanupConsole'] = None

    def __new__(cls) -> 'CleanupConsole':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._console = RichConsole(theme=VMCLEAN_THEME, highlight=False)
        return cls._instance

    @property
    def rich(self) -> RichConsole:
        return self._console

    def print(self, *args, **kwargs) -> None:
        self._console.print(*args, **kwargs)

    def success(self, message: str) -> None:
        self._console.print(f"[success_symbol]{SYMBOLS['success']}[/] [success]{escape(message)}[/]")

    def warning(self, message: str) -> None:
        self._console.print(f"[warning_symbol]{SYMBOLS['warning']}[/]  [warning]{escape(message)}[/]")

    def info(self, message: str) -> None:
        self._console.print(f"[info_symbol]{SYMBOLS['info']}[/] [info]{escape(message)}[/]")

    def command(self, cmd: str) -> None:
        self._console.print(f"  [command]{SYMBOLS['command']} {escape(cmd)}[/]")

    def step(self, message: str, current: int, total: int) -> None:
        self._console.print(f"[brand]{escape(f'[{current}/{total}]')}[/] [info]{escape(message)}[/]")

    def skipped(self, message: str) -> None:
        self._console.print(f"  [muted]{SYMBOLS['skip']} {escape(message)}[/]")

    def secondary(self, message: str) -> None:
        self._console.print(f"  [secondary]{escape(message)}[/]")

    def blank(self) -> None:
        self._console.print()


console = CleanupConsole()
