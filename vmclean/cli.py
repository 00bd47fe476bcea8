import logging
import shlex
import sys
from typing import Optional, Sequence

from vmclean.capabilities import OPTIONAL_TOOLS, probe_capabilities
from vmclean.config import RunConfig, parse_args
from vmclean.pipeline import Pipeline, StepContext, StepOutcome, StepStatus
from vmclean.privileges import PrivilegeError, require_root, resolve_invoker
from vmclean.report import DiskUsageReporter
from vmclean.runner import CommandRunner
from vmclean.steps import build_steps
from vmclean.ui import console, show_error, status_panel, summary_panel


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.WARNING)


class CleanupCLI:
    def __init__(self, config: RunConfig, argv: Optional[Sequence[str]] = None):
        self.config = config
        self.argv = list(sys.argv[1:] if argv is None else argv)
        self.verbose = config.verbose

    def _debug(self, message: str):
        """Print debug info only in verbose mode"""
        if self.verbose:
            console.print(f"[dim][DEBUG] {message}[/dim]")

    def check_privileges(self) -> bool:
        """Refuse to start without root; nothing has been touched at this point."""
        try:
            require_root()
        except PrivilegeError as e:
            show_error(
                "Insufficient privileges",
                str(e),
                suggested_fix=shlex.join(["sudo", "vm-cleanup", *self.argv]),
                fix_description="Re-run with elevated privileges",
            )
            return False
        return True

    def build_context(self) -> StepContext:
        identity = resolve_invoker()
        self._debug(f"Invoker home: {identity.home}")
        capabilities = probe_capabilities(OPTIONAL_TOOLS)
        if capabilities.missing:
            self._debug(f"Tools not found: {', '.join(capabilities.missing)}")
        return StepContext(
            config=self.config,
            identity=identity,
            capabilities=capabilities,
            runner=CommandRunner(verbose=self.verbose),
            reporter=DiskUsageReporter(),
        )

    def show_settings(self, ctx: StepContext) -> None:
        cfg = ctx.config
        status_panel(
            "VM Cleanup starting",
            [
                f"Keeping journal logs for: {cfg.journal_vacuum_window}",
                f"Docker prune:  {cfg.prune_containers}",
                f"Snap prune:    {cfg.prune_snap_packages}",
                f"Flatpak prune: {cfg.prune_flatpak_packages}",
                f"Zero-fill:     {cfg.reclaim_free_space}",
                f"User caches:   {ctx.identity.cache_dir}",
            ],
        )

    def show_summary(self, outcomes: list[StepOutcome]) -> None:
        counts = {status: 0 for status in StepStatus}
        for outcome in outcomes:
            counts[outcome.status] += 1

        details = {
            "Completed": counts[StepStatus.COMPLETED],
            "Skipped": counts[StepStatus.SKIPPED],
            "Failed": counts[StepStatus.FAILED],
        }
        failed = [o.name for o in outcomes if o.status == StepStatus.FAILED]
        if failed:
            details["Failed steps"] = ", ".join(failed)

        summary_panel(
            "Cleanup finished",
            "NEXT: Power off the VM and compact the virtual disk on the host.",
            details,
        )

    def run(self) -> int:
        """Run the whole cleanup.

        Returns:
            int: 0 once the pipeline has run, whatever individual steps did;
                1 if the privilege check failed.
        """
        if not self.check_privileges():
            return 1

        ctx = self.build_context()
        self.show_settings(ctx)
        outcomes = Pipeline(build_steps()).run(ctx)
        self.show_summary(outcomes)
        return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    # argparse exits on its own for --help, --version and usage errors
    config = parse_args(argv)
    configure_logging(config.verbose)

    try:
        return CleanupCLI(config, argv).run()
    except KeyboardInterrupt:
        print("\n❌ Operation cancelled", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
