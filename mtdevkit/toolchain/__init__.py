"""MTDevKit toolchain module.

Wraps every interaction with external executables: availability probing,
plain and terminal-backed command execution, and fvm runner selection.

Key names:
    command_exists   - PATH lookup that never raises
    run_command      - Async child process with merged output
    run_interactive  - PTY-backed execution with auto-confirmation
    RunnerSelector   - fvm / direct command rewriting
"""

from .executor import combine_output, run_command
from .interactive import build_expect_script, extract_confirmations, run_interactive
from .probe import command_exists
from .runner import RunnerMode, RunnerSelector, detect_runner

__all__ = [
    # Probing
    "command_exists",
    # Execution
    "run_command",
    "combine_output",
    "run_interactive",
    "build_expect_script",
    "extract_confirmations",
    # Runner selection
    "RunnerMode",
    "RunnerSelector",
    "detect_runner",
]
