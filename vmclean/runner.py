"""
External command execution for cleanup steps.

Every call returns a CommandResult; a missing binary or a non-zero exit is
reported in the result, never raised. Steps decide whether a failure matters.
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence

from vmclean.ui import console

logger = logging.getLogger(__name__)

# Shell conventions for "command not found" / "not executable"
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

DEFAULT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


class CommandRunner:
    """Runs external tools without a shell and without timeouts."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.env = {**os.environ, **DEFAULT_ENV}

    def run(self, argv: Sequence[str], capture: bool = False, quiet: bool = False) -> CommandResult:
        """Execute a command and report its outcome.

        Args:
            argv: Program and arguments
            capture: Collect stdout/stderr into the result instead of the terminal
            quiet: Hide output and the command echo unless verbose

        Returns:
            CommandResult; returncode 127 when the program is missing, 126 when
            it cannot be started.
        """
        argv = tuple(argv)
        cmd_str = shlex.join(argv)
        if not quiet or self.verbose:
            console.command(cmd_str)

        collect = capture or quiet
        try:
            proc = subprocess.run(
                list(argv),
                env=self.env,
                stdin=subprocess.DEVNULL,
                capture_output=collect,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.info("Executable not found: %s", argv[0])
            return CommandResult(argv, EXIT_NOT_FOUND, "", f"{argv[0]}: command not found")
        except OSError as e:
            logger.warning("Could not start %s: %s", argv[0], e)
            return CommandResult(argv, EXIT_NOT_EXECUTABLE, "", str(e))

        result = CommandResult(argv, proc.returncode, proc.stdout or "", proc.stderr or "")
        if not result.ok:
            # Quiet calls are the "remove if present" kind; failure is routine there
            logger.log(logging.DEBUG if quiet else logging.WARNING, "Command failed (%d): %s", result.returncode, cmd_str)
            if result.stderr:
                logger.debug("stderr: %s", result.stderr.strip())
        return result
