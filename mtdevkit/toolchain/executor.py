"""Async external command execution.

Runs a child process to completion and returns its merged output, raising
``CommandFailedError`` with the most useful diagnostic text on failure.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from mtdevkit.errors import CommandFailedError, OutputLimitExceededError

DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace").strip()


def combine_output(stdout: str, stderr: str) -> str:
    """Join stdout and stderr, dropping whichever is empty."""
    return "\n".join(part for part in (stdout, stderr) if part).strip()


async def run_command(
    command: str,
    args: list[str] | None = None,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
    *,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    timeout: float | None = None,
) -> str:
    """Run *command* with *args* and return its combined stdout/stderr.

    Args:
        command: Executable name or path (never interpreted by a shell).
        args: Argument list.
        cwd: Working directory for the child process.
        env: Extra environment variables merged on top of ``os.environ``.
        max_output_bytes: Ceiling for each output stream. Exceeding it is
            an error, never a silent truncation.
        timeout: Optional wall-clock limit in seconds; ``None`` waits for
            the child however long it takes.

    Returns:
        stdout and stderr joined by a newline, stripped.

    Raises:
        CommandFailedError: The executable could not be started, exited
            non-zero, or timed out.
        OutputLimitExceededError: A stream exceeded *max_output_bytes*.
    """
    args = list(args or [])

    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    except OSError as exc:
        raise CommandFailedError(command, args, str(exc)) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise CommandFailedError(command, args, f"Command timed out after {timeout}s")

    for stream, data in (("stdout", stdout_bytes), ("stderr", stderr_bytes)):
        if data and len(data) > max_output_bytes:
            raise OutputLimitExceededError(
                command,
                args,
                f"{stream} exceeded {max_output_bytes} bytes ({len(data)} bytes written)",
                exit_code=process.returncode,
            )

    stdout = _decode(stdout_bytes)
    stderr = _decode(stderr_bytes)

    if process.returncode != 0:
        diagnostic = stderr or stdout or f"Process exited with code {process.returncode}"
        raise CommandFailedError(command, args, diagnostic, exit_code=process.returncode)

    return combine_output(stdout, stderr)
