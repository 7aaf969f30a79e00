"""Execution of commands that insist on a real terminal.

The flavor generator's logger checks ``stdout.hasTerminal`` and refuses to
run without one. Neither ``CI=true`` nor piped stdin satisfies it reliably,
so when ``expect`` is available the command is spawned under a
pseudo-terminal allocated by the OS, and every yes/no confirmation prompt
is answered with ``y``. Without ``expect`` the command runs directly with
environment hints as a best-effort fallback.
"""

from __future__ import annotations

import re
from pathlib import Path

from rich.markup import escape

from mtdevkit.config import DEFAULT_CONFIRMATION_PATTERNS
from mtdevkit.toolchain.executor import DEFAULT_MAX_OUTPUT_BYTES, run_command
from mtdevkit.toolchain.probe import command_exists
from mtdevkit.utils import console, print_warning

CONFIRM_MARKER = "AUTO-CONFIRM:"

FALLBACK_ENV: dict[str, str] = {"CI": "true", "TERM": "dumb"}

_TCL_BARE_WORD = re.compile(r"[A-Za-z0-9_./:@=+,%-]+")


def _tcl_word(value: str) -> str:
    """Quote *value* as a single Tcl word."""
    if _TCL_BARE_WORD.fullmatch(value):
        return value
    if "{" in value or "}" in value or "\\" in value:
        escaped = re.sub(r'([\\"$\[\]{}])', r"\\\1", value)
        return f'"{escaped}"'
    return "{" + value + "}"


def build_expect_script(
    command: str,
    args: list[str],
    patterns: list[str] | None = None,
    timeout: int = 300,
) -> str:
    """Build the ``expect`` program that drives *command* under a PTY.

    Every match of *patterns* (case-insensitive) is reported on the
    session's output as a ``AUTO-CONFIRM:`` line and answered with ``y``.
    Exceeding *timeout* seconds without reaching EOF exits with status 1;
    otherwise the session exits with the child's own status.
    """
    alternatives = "|".join(patterns or DEFAULT_CONFIRMATION_PATTERNS)
    spawn = " ".join(_tcl_word(part) for part in [command, *args])
    return "\n".join(
        [
            f"set timeout {timeout}",
            f"spawn {spawn}",
            "expect {",
            f"  -nocase -re {{{alternatives}}} {{",
            f'    send_user "\\n{CONFIRM_MARKER} $expect_out(0,string)\\n"',
            '    send "y\\r"',
            "    exp_continue",
            "  }",
            "  timeout { exit 1 }",
            "  eof",
            "}",
            "lassign [wait] pid spawnid os_error_flag value",
            "exit $value",
        ]
    )


def extract_confirmations(output: str) -> list[str]:
    """Return the prompt text of every auto-answered confirmation in *output*."""
    answered: list[str] = []
    for line in output.splitlines():
        line = line.strip()
        if line.startswith(CONFIRM_MARKER):
            answered.append(line[len(CONFIRM_MARKER):].strip())
    return answered


async def run_interactive(
    command: str,
    args: list[str],
    cwd: str | Path | None = None,
    *,
    pty_helper: str = "expect",
    patterns: list[str] | None = None,
    timeout: int = 300,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
) -> str:
    """Run *command* so that it sees a terminal, and return its output.

    Args:
        command: Executable to run.
        args: Its arguments.
        cwd: Working directory.
        pty_helper: Name of the terminal-allocation helper to look for.
        patterns: Confirmation-prompt regexes to auto-answer.
        timeout: Hard ceiling, in seconds, of the PTY session.
        max_output_bytes: Output ceiling passed to the executor.

    Raises:
        CommandFailedError: The command (or the session wrapping it) failed.
    """
    if command_exists(pty_helper):
        script = build_expect_script(command, args, patterns, timeout)
        output = await run_command(
            pty_helper, ["-c", script], cwd, max_output_bytes=max_output_bytes
        )
        for prompt in extract_confirmations(output):
            console.print(f"  [cyan]auto-confirmed prompt:[/cyan] {escape(prompt)}")
        return output

    print_warning(
        f"  {escape(pty_helper)} not found -- running without a terminal (CI=true, TERM=dumb)"
    )
    return await run_command(
        command, args, cwd, FALLBACK_ENV, max_output_bytes=max_output_bytes
    )
