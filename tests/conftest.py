"""Shared fixtures for vm-cleanup tests."""

import os
import sys
from pathlib import Path

import pytest

# Add parent directory
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from vmclean.capabilities import CapabilitySet, OPTIONAL_TOOLS
from vmclean.config import RunConfig
from vmclean.pipeline import StepContext, SystemPaths
from vmclean.privileges import InvokerIdentity
from vmclean.runner import CommandResult


class FakeRunner:
    """Records commands instead of running them."""

    def __init__(self, responses=None):
        self.calls = []
        self.responses = responses or {}

    def run(self, argv, capture=False, quiet=False):
        argv = tuple(argv)
        self.calls.append(argv)
        response = self.responses.get(argv)
        if isinstance(response, CommandResult):
            return response
        return CommandResult(argv, 0, response or "", "")

    def programs(self):
        return [call[0] for call in self.calls]


class FakeReporter:
    def __init__(self):
        self.reports_printed = 0
        self.titles = []

    def report(self, title):
        self.reports_printed += 1
        self.titles.append(title)


def capability_set(*present):
    return CapabilitySet({tool: tool in present for tool in OPTIONAL_TOOLS})


@pytest.fixture
def system_paths(tmp_path: Path) -> SystemPaths:
    paths = SystemPaths(
        tmp_dir=tmp_path / "tmp",
        log_dir=tmp_path / "var" / "log",
        apt_lists_dir=tmp_path / "var" / "lib" / "apt" / "lists",
        zero_fill_file=tmp_path / "EMPTY",
    )
    for directory in (paths.tmp_dir, paths.log_dir, paths.apt_lists_dir):
        directory.mkdir(parents=True)
    return paths


@pytest.fixture
def identity(tmp_path: Path) -> InvokerIdentity:
    home = tmp_path / "home" / "alice"
    home.mkdir(parents=True)
    return InvokerIdentity(username="alice", home=home)


@pytest.fixture
def make_ctx(system_paths, identity):
    """Build a StepContext wired to fakes; override any piece by keyword."""

    def _make(config=None, capabilities=None, runner=None, reporter=None):
        return StepContext(
            config=config or RunConfig(),
            identity=identity,
            capabilities=capabilities if capabilities is not None else capability_set("journalctl", "fstrim"),
            runner=runner or FakeRunner(),
            reporter=reporter or FakeReporter(),
            paths=system_paths,
        )

    return _make
