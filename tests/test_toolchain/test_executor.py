"""Unit tests for command execution (mtdevkit.toolchain.executor).

Tests cover:
- combine_output joining rules
- run_command success (merged stdout/stderr, cwd and env forwarding)
- Diagnostic selection on failure (stderr > stdout > generic message)
- Spawn errors surfaced as CommandFailedError
- Output ceiling enforcement
- Timeouts
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mtdevkit.errors import CommandFailedError, OutputLimitExceededError
from mtdevkit.toolchain.executor import combine_output, run_command


# ---------------------------------------------------------------------------
# combine_output
# ---------------------------------------------------------------------------

class TestCombineOutput:
    @pytest.mark.unit
    def test_both_streams(self):
        assert combine_output("out", "err") == "out\nerr"

    @pytest.mark.unit
    def test_empty_streams_dropped(self):
        assert combine_output("", "err") == "err"
        assert combine_output("out", "") == "out"
        assert combine_output("", "") == ""


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------

class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_returns_combined_output(self, mock_subprocess):
        proc = mock_subprocess(stdout="Resolving dependencies...\n", stderr="warning: x\n")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            output = await run_command("flutter", ["pub", "get"])
        assert output == "Resolving dependencies...\nwarning: x"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_arguments_cwd_and_env_forwarded(self, mock_subprocess, tmp_path: Path):
        proc = mock_subprocess(stdout="ok")
        exec_mock = AsyncMock(return_value=proc)
        with patch("asyncio.create_subprocess_exec", exec_mock):
            await run_command("git", ["init"], tmp_path, {"CI": "true"})

        args, kwargs = exec_mock.call_args
        assert args == ("git", "init")
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["env"]["CI"] == "true"
        assert kwargs["env"]["PATH"] == os.environ.get("PATH")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_extra_env_inherits_parent(self, mock_subprocess):
        proc = mock_subprocess()
        exec_mock = AsyncMock(return_value=proc)
        with patch("asyncio.create_subprocess_exec", exec_mock):
            await run_command("git", ["status"])
        assert exec_mock.call_args.kwargs["env"] is None
        assert exec_mock.call_args.kwargs["cwd"] is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_prefers_stderr(self, mock_subprocess):
        proc = mock_subprocess(stdout="some output", stderr="fatal: not a repo", returncode=128)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(CommandFailedError) as info:
                await run_command("git", ["status"])

        err = info.value
        assert err.command == "git"
        assert err.args_list == ["status"]
        assert err.diagnostic == "fatal: not a repo"
        assert err.exit_code == 128
        assert str(err) == "Command failed: git status\nfatal: not a repo"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_falls_back_to_stdout(self, mock_subprocess):
        proc = mock_subprocess(stdout="Because x depends on y", returncode=1)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(CommandFailedError) as info:
                await run_command("flutter", ["pub", "get"])
        assert info.value.diagnostic == "Because x depends on y"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_generic_message(self, mock_subprocess):
        proc = mock_subprocess(returncode=3)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(CommandFailedError, match="exited with code 3"):
                await run_command("flutter", ["gen-l10n"])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_executable(self):
        exec_mock = AsyncMock(side_effect=FileNotFoundError(2, "No such file or directory"))
        with patch("asyncio.create_subprocess_exec", exec_mock):
            with pytest.raises(CommandFailedError) as info:
                await run_command("fvm", ["flutter", "doctor"])
        assert info.value.exit_code is None
        assert "No such file or directory" in info.value.diagnostic

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_output_over_limit_fails_loudly(self, mock_subprocess):
        proc = mock_subprocess(stdout=b"x" * 2048)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(OutputLimitExceededError, match="stdout exceeded 1024 bytes"):
                await run_command("flutter", ["pub", "get"], max_output_bytes=1024)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_large_output_within_default_limit(self, mock_subprocess):
        payload = "y" * (5 * 1024 * 1024)
        proc = mock_subprocess(stdout=payload)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            output = await run_command("flutter", ["pub", "get"])
        assert len(output) == len(payload)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        proc = AsyncMock()

        async def _communicate():
            await asyncio.sleep(10)
            return (b"", b"")

        proc.communicate = _communicate
        proc.kill = MagicMock()
        proc.wait = AsyncMock(return_value=-9)
        proc.returncode = None

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(CommandFailedError, match="timed out"):
                await run_command("flutter", ["pub", "get"], timeout=0.01)
        proc.kill.assert_called_once()


@pytest.mark.integration
class TestRunCommandReal:
    @pytest.mark.asyncio
    async def test_real_process(self, tmp_path: Path):
        output = await run_command("sh", ["-c", "echo out; echo err >&2"], tmp_path)
        assert output == "out\nerr"

    @pytest.mark.asyncio
    async def test_real_failure(self):
        with pytest.raises(CommandFailedError) as info:
            await run_command("sh", ["-c", "echo broken >&2; exit 4"])
        assert info.value.exit_code == 4
        assert info.value.diagnostic == "broken"

    @pytest.mark.asyncio
    async def test_real_env_hint(self):
        output = await run_command("sh", ["-c", "echo $TERM"], env={"TERM": "dumb"})
        assert output == "dumb"
