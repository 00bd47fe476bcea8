"""
Ordered cleanup pipeline.

Steps are plain descriptors (name, label, gate, action) run by a single
driver loop. A step's failure stays inside that step: it is logged, recorded
in the outcome list and the loop moves on.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from vmclean.capabilities import CapabilitySet
from vmclean.config import RunConfig
from vmclean.privileges import InvokerIdentity
from vmclean.report import DiskUsageReporter
from vmclean.runner import CommandRunner
from vmclean.ui import console, steps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemPaths:
    """System locations touched by cleanup; overridable for tests."""

    tmp_dir: Path = Path("/tmp")
    log_dir: Path = Path("/var/log")
    apt_lists_dir: Path = Path("/var/lib/apt/lists")
    zero_fill_file: Path = Path("/EMPTY")


@dataclass(frozen=True)
class StepContext:
    """Read-only state shared by every step of a run."""

    config: RunConfig
    identity: InvokerIdentity
    capabilities: CapabilitySet
    runner: CommandRunner
    reporter: DiskUsageReporter
    paths: SystemPaths = field(default_factory=SystemPaths)


StepAction = Callable[[StepContext], None]
StepGate = Callable[[StepContext], bool]


def always(ctx: StepContext) -> bool:
    return True


class StepStatus(Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class StepOutcome:
    name: str
    status: StepStatus
    error: Optional[str] = None


@dataclass(frozen=True)
class PipelineStep:
    """One unit of cleanup.

    Attributes:
        name: Stable identifier
        label: Progress text shown to the operator
        action: Performs the side effects; may raise, the driver contains it
        enabled: Gate evaluated once before the run starts
        skip_message: Shown instead of running when the gate is closed
    """

    name: str
    label: str
    action: StepAction
    enabled: StepGate = always
    skip_message: str = ""


class Pipeline:
    """Runs steps strictly in order, numbering only the enabled ones."""

    def __init__(self, steps: Sequence[PipelineStep], title: str = "VM cleanup"):
        self.steps = list(steps)
        self.title = title

    def plan(self, ctx: StepContext) -> list[tuple[PipelineStep, bool]]:
        """Evaluate every gate up front so the [k/N] total is known."""
        return [(step, bool(step.enabled(ctx))) for step in self.steps]

    def run(self, ctx: StepContext) -> list[StepOutcome]:
        planned = self.plan(ctx)
        total = sum(1 for _, enabled in planned if enabled)
        outcomes = []

        with steps(self.title, total) as tracker:
            for step, enabled in planned:
                if not enabled:
                    if step.skip_message:
                        console.skipped(step.skip_message)
                    outcomes.append(StepOutcome(step.name, StepStatus.SKIPPED))
                    continue

                tracker.step(step.label)
                outcomes.append(self._run_step(step, ctx))

        return outcomes

    def _run_step(self, step: PipelineStep, ctx: StepContext) -> StepOutcome:
        try:
            step.action(ctx)
        except Exception as e:
            logger.debug("Step %s raised", step.name, exc_info=True)
            console.warning(f"{step.label} failed, continuing: {e}")
            return StepOutcome(step.name, StepStatus.FAILED, str(e))
        return StepOutcome(step.name, StepStatus.COMPLETED)
