"""Flutter/Dart runner selection.

When the ``fvm`` version manager is installed, every ``flutter`` and
``dart`` invocation must go through it (``fvm flutter pub get``); otherwise
the SDK executables are called directly. The detected mode lives on a
``RunnerSelector`` owned by a single provisioning run, so repeated runs
never observe a stale detection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mtdevkit.toolchain.probe import command_exists


class RunnerMode(str, Enum):
    """How logical toolchain commands are invoked."""

    WRAPPED = "wrapped"
    DIRECT = "direct"


@dataclass(frozen=True)
class RunnerSelector:
    """Rewrites logical ``(command, args)`` pairs for the detected mode."""

    mode: RunnerMode
    wrapper: str = "fvm"

    @property
    def wrapped(self) -> bool:
        return self.mode is RunnerMode.WRAPPED

    def resolve_command(self, logical: str) -> str:
        """Return the executable to run for *logical* (``"flutter"``/``"dart"``)."""
        return self.wrapper if self.wrapped else logical

    def resolve_args(self, logical: str, args: list[str]) -> list[str]:
        """Return the argument list to pass to :meth:`resolve_command`."""
        return [logical, *args] if self.wrapped else list(args)

    def resolve(self, logical: str, args: list[str]) -> tuple[str, list[str]]:
        return self.resolve_command(logical), self.resolve_args(logical, args)

    def describe(self) -> str:
        if self.wrapped:
            return self.wrapper
        return f"flutter/dart ({self.wrapper} not found)"


def detect_runner(wrapper: str = "fvm") -> RunnerSelector:
    """Probe for *wrapper* on PATH and return the matching selector."""
    mode = RunnerMode.WRAPPED if command_exists(wrapper) else RunnerMode.DIRECT
    return RunnerSelector(mode=mode, wrapper=wrapper)
