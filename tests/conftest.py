"""Shared pytest fixtures for the MTDevKit test suite.

Provides reusable fixtures for:
- Mock subprocess helpers
- A fake cloned template tree (flavorizr.yaml, build.gradle.kts, lib/)
- A fake toolchain that records every command the pipeline issues
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mtdevkit.errors import CommandFailedError


# ---------------------------------------------------------------------------
# Template content
# ---------------------------------------------------------------------------

SAMPLE_BUILD_GRADLE = textwrap.dedent(
    """\
    plugins {
        id("com.android.application")
        id("kotlin-android")
        // The Flutter Gradle Plugin must be applied after the Android and Kotlin Gradle plugins.
        id("dev.flutter.flutter-gradle-plugin")
    }

    android {
        namespace = "mu.mt.logisticsapp"
        compileSdk = flutter.compileSdkVersion
        ndkVersion = flutter.ndkVersion

        compileOptions {
            sourceCompatibility = JavaVersion.VERSION_11
            targetCompatibility = JavaVersion.VERSION_11
        }

        kotlinOptions {
            jvmTarget = JavaVersion.VERSION_11.toString()
        }

        defaultConfig {
            applicationId = "mu.mt.logisticsapp"
            minSdk = flutter.minSdkVersion
            targetSdk = flutter.targetSdkVersion
            versionCode = flutter.versionCode
            versionName = flutter.versionName
        }

        buildTypes {
            release {
                // Signing with the debug keys for now, so `flutter run --release` works.
                signingConfig = signingConfigs.getByName("debug")
            }
        }
    }

    flutter {
        source = "../.."
    }
    """
)

SAMPLE_PUBSPEC = textwrap.dedent(
    """\
    name: logistics_app
    description: A new Flutter project.
    publish_to: 'none'
    version: 1.0.0+1

    environment:
      sdk: ^3.5.0
    """
)


def write_template_tree(
    project_dir: Path,
    *,
    flavorizr: bool = True,
    build_script: bool = True,
    githooks: bool = True,
) -> Path:
    """Create the files a freshly cloned template would contain."""
    project_dir.mkdir(parents=True, exist_ok=True)
    (project_dir / "pubspec.yaml").write_text(SAMPLE_PUBSPEC, encoding="utf-8")
    lib = project_dir / "lib"
    lib.mkdir(exist_ok=True)
    (lib / "main.dart").write_text("void main() {}\n", encoding="utf-8")
    (lib / "app.dart").write_text("class App {}\n", encoding="utf-8")
    if flavorizr:
        (project_dir / "flavorizr.yaml").write_text("flavors: {}\n", encoding="utf-8")
    if build_script:
        app = project_dir / "android" / "app"
        app.mkdir(parents=True, exist_ok=True)
        (app / "build.gradle.kts").write_text(SAMPLE_BUILD_GRADLE, encoding="utf-8")
    if githooks:
        (project_dir / ".githooks").mkdir(exist_ok=True)
    return project_dir


@pytest.fixture
def sample_build_gradle() -> str:
    """A stock ``android/app/build.gradle.kts`` from ``flutter create``."""
    return SAMPLE_BUILD_GRADLE


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str | bytes = "",
        stderr: str | bytes = "",
        returncode: int = 0,
    ) -> AsyncMock:
        out = stdout.encode("utf-8") if isinstance(stdout, str) else stdout
        err = stderr.encode("utf-8") if isinstance(stderr, str) else stderr
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(return_value=(out, err))
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Fake toolchain
# ---------------------------------------------------------------------------

@dataclass
class FakeToolchain:
    """Records pipeline commands and simulates their filesystem effects.

    Attributes:
        available: Executables reported as present on PATH.
        calls: ``(command, args, cwd)`` for every ``run_command`` call.
        interactive_calls: Same, for ``run_interactive``.
        fail_on: Predicate selecting a call that should fail.
        tree_options: Keyword arguments for ``write_template_tree`` when the
            template clone command runs.
        on_clone: Called with the project directory after the clone.
    """

    available: set[str] = field(default_factory=lambda: {"fvm", "git", "flutter", "expect"})
    calls: list[tuple[str, list[str], Path | None]] = field(default_factory=list)
    interactive_calls: list[tuple[str, list[str], Path | None]] = field(default_factory=list)
    fail_on: Callable[[str, list[str]], bool] | None = None
    interactive_output: str = ""
    tree_options: dict[str, Any] = field(default_factory=dict)
    on_clone: Callable[[Path], None] | None = None

    def exists(self, name: str) -> bool:
        return name in self.available

    async def run_command(self, command, args=None, cwd=None, env=None, **kwargs) -> str:
        args = list(args or [])
        self.calls.append((command, args, Path(cwd) if cwd else None))
        if self.fail_on is not None and self.fail_on(command, args):
            raise CommandFailedError(command, args, "simulated failure", exit_code=1)
        if "--name" in args and cwd is not None:
            name = args[args.index("--name") + 1]
            project = write_template_tree(Path(cwd) / name, **self.tree_options)
            if self.on_clone is not None:
                self.on_clone(project)
        if args[:1] == ["init"] and cwd is not None:
            (Path(cwd) / ".git").mkdir(exist_ok=True)
        return ""

    async def run_interactive(self, command, args, cwd=None, **kwargs) -> str:
        self.interactive_calls.append((command, list(args), Path(cwd) if cwd else None))
        if self.fail_on is not None and self.fail_on(command, list(args)):
            raise CommandFailedError(command, list(args), "simulated failure", exit_code=1)
        return self.interactive_output

    def command_lines(self) -> list[str]:
        return [" ".join([c, *a]) for c, a, _ in self.calls]


@pytest.fixture
def fake_toolchain():
    """Patch probing and execution in the pipeline with a ``FakeToolchain``."""
    toolchain = FakeToolchain()
    with (
        patch("mtdevkit.pipeline.command_exists", side_effect=toolchain.exists),
        patch("mtdevkit.toolchain.runner.command_exists", side_effect=toolchain.exists),
        patch("mtdevkit.pipeline.run_command", side_effect=toolchain.run_command),
        patch("mtdevkit.pipeline.run_interactive", side_effect=toolchain.run_interactive),
    ):
        yield toolchain
