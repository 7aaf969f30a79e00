"""Exception hierarchy for MTDevKit.

Every failure the service surfaces to a caller is one of these classes.
None of them are retried; the boundary operations in ``mtdevkit.tools``
turn them into error results verbatim.
"""

from __future__ import annotations


class DevKitError(Exception):
    """Base class for every MTDevKit failure."""


class RequestValidationError(DevKitError):
    """Raised when a provisioning request has a bad name, org or template."""


# ---------------------------------------------------------------------------
# Child processes
# ---------------------------------------------------------------------------


class CommandFailedError(DevKitError):
    """Raised when an external process cannot be started or exits non-zero.

    Attributes:
        command: The executable that was invoked.
        args: Its argument list.
        diagnostic: The child's stderr if non-empty, else its stdout, else a
            generic description of the failure.
        exit_code: The child's exit status, or ``None`` if it never ran.
    """

    def __init__(
        self,
        command: str,
        args: list[str] | tuple[str, ...],
        diagnostic: str,
        exit_code: int | None = None,
    ) -> None:
        self.command = command
        self.args_list = list(args)
        self.diagnostic = diagnostic
        self.exit_code = exit_code
        super().__init__(f"Command failed: {self.command_line}\n{diagnostic}")

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.args_list])


class OutputLimitExceededError(CommandFailedError):
    """Raised when a child writes more than the configured output ceiling."""


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class PipelineError(DevKitError):
    """Raised when a provisioning step fails irrecoverably.

    ``step`` is the 1-based step number, or 0 for pre-flight checks.
    """

    def __init__(self, step: int, message: str) -> None:
        self.step = step
        self.message = message
        super().__init__(message)


class PreflightError(PipelineError):
    """Missing toolchain, missing git, or the target directory already exists."""

    def __init__(self, message: str) -> None:
        super().__init__(0, message)


class StepExecutionError(PipelineError):
    """A step's child process failed."""

    def __init__(self, step: int, cause: CommandFailedError) -> None:
        self.command = cause.command
        self.args_list = cause.args_list
        self.diagnostic = cause.diagnostic
        super().__init__(step, str(cause))


class StructuralTemplateError(PipelineError):
    """A file the template is expected to generate is absent or unpatchable."""


class BlockNotFoundError(DevKitError):
    """Raised by the build-script patcher when an anchored block is missing."""

    def __init__(self, block: str) -> None:
        self.block = block
        super().__init__(f"No '{block} {{ ... }}' block found in build script")


# ---------------------------------------------------------------------------
# Scanner / inspector
# ---------------------------------------------------------------------------


class NotFoundError(DevKitError):
    """Raised when a scan or inspect target does not exist."""

    def __init__(self, path: object, label: str) -> None:
        self.path = path
        super().__init__(f"{label}: {path}")


class DirectoryNotFoundError(NotFoundError):
    def __init__(self, path: object) -> None:
        super().__init__(path, "Directory not found")


class ProjectNotFoundError(NotFoundError):
    def __init__(self, path: object) -> None:
        super().__init__(path, "Project not found")
