"""Read-only inspection of existing Flutter projects.

``list_projects`` finds the Flutter projects directly below a directory and
``describe_project`` summarises one project's manifest, fvm pin, config
files and git branch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from mtdevkit.errors import CommandFailedError, DirectoryNotFoundError, ProjectNotFoundError
from mtdevkit.toolchain import run_command

MANIFEST = "pubspec.yaml"
FVM_PIN = ".fvmrc"


def list_projects(directory: str | Path) -> list[str]:
    """Return the sorted names of subdirectories that contain a ``pubspec.yaml``.

    Raises:
        DirectoryNotFoundError: *directory* does not exist.
    """
    scan_dir = Path(directory).expanduser().resolve()
    if not scan_dir.is_dir():
        raise DirectoryNotFoundError(scan_dir)
    return sorted(
        entry.name
        for entry in scan_dir.iterdir()
        if entry.is_dir() and (entry / MANIFEST).is_file()
    )


def _manifest_field(text: str, key: str) -> str | None:
    match = re.search(rf"^{key}:\s*(.+)$", text, re.MULTILINE)
    return match.group(1).strip() if match else None


@dataclass
class ProjectReport:
    """Summary of an existing Flutter project."""

    path: Path
    has_manifest: bool = False
    name: str = "unknown"
    version: str = "unknown"
    description: str = "—"
    fvm_config: str | None = None
    config_files: list[str] = field(default_factory=list)
    has_config_dir: bool = False
    git_initialised: bool = False
    git_branch: str | None = None

    def render(self) -> str:
        lines = [f"Project: {self.path}", ""]
        if self.has_manifest:
            lines.append(f"Name:        {self.name}")
            lines.append(f"Version:     {self.version}")
            lines.append(f"Description: {self.description}")
        else:
            lines.append(f"⚠ No {MANIFEST} found — may not be a Flutter project")

        if self.fvm_config is not None:
            lines.append(f"FVM config:  {self.fvm_config}")

        if self.has_config_dir:
            lines.append("")
            lines.append(f"Config files ({len(self.config_files)}):")
            lines.extend(f"  • config/{name}" for name in self.config_files)

        lines.append("")
        if not self.git_initialised:
            lines.append("Git:         not initialised")
        elif self.git_branch is None:
            lines.append("Git:         initialised (could not read branch)")
        else:
            lines.append(f"Git branch:  {self.git_branch}")
        return "\n".join(lines)


async def describe_project(path: str | Path, git_binary: str = "git") -> ProjectReport:
    """Inspect the project at *path*.

    The branch lookup is best-effort: a failing ``git`` leaves
    ``git_branch`` unset instead of raising.

    Raises:
        ProjectNotFoundError: *path* does not exist.
    """
    root = Path(path).expanduser().resolve()
    if not root.exists():
        raise ProjectNotFoundError(root)

    report = ProjectReport(path=root)

    manifest = root / MANIFEST
    if manifest.is_file():
        text = manifest.read_text(encoding="utf-8", errors="replace")
        report.has_manifest = True
        report.name = _manifest_field(text, "name") or "unknown"
        report.version = _manifest_field(text, "version") or "unknown"
        report.description = _manifest_field(text, "description") or "—"

    fvm_pin = root / FVM_PIN
    if fvm_pin.is_file():
        report.fvm_config = fvm_pin.read_text(encoding="utf-8", errors="replace").strip()

    config_dir = root / "config"
    if config_dir.is_dir():
        report.has_config_dir = True
        report.config_files = sorted(
            p.name for p in config_dir.iterdir() if p.is_file() and p.suffix == ".json"
        )

    if (root / ".git").exists():
        report.git_initialised = True
        try:
            report.git_branch = await run_command(
                git_binary, ["branch", "--show-current"], root
            )
        except CommandFailedError:
            report.git_branch = None

    return report
