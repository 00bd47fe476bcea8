"""vm-cleanup Progress - Step counters and spinners."""

from contextlib import contextmanager
from rich.progress import Progress, SpinnerColumn, TextColumn
from .console import console


class StepsProgress:
    def __init__(self, title: str, total: int):
        self.title = title
        self.total = total
        self.current = 0

    def step(self, name: str) -> None:
        self.current += 1
        console.step(name, self.current, self.total)

    def complete(self) -> None:
        console.success(f"{self.title} complete")


@contextmanager
def spinner(message: str):
    progress = Progress(SpinnerColumn(style="brand"), TextColumn("[info]{task.description}[/]"), console=console.rich, transient=True)
    with progress:
        progress.add_task(message, total=None)
        yield progress


@contextmanager
def steps(title: str, total: int):
    tracker = StepsProgress(title, total)
    console.info(f"{title} ({total} steps)")
    try:
        yield tracker
    finally:
        if tracker.current >= tracker.total:
            tracker.complete()
