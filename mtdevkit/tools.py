"""Boundary operations exposed to calling agents.

Each operation takes plain parameters and returns a ``ToolResult`` whose
text is ready to hand back to the caller. Every MTDevKit error becomes an
error result; nothing here raises for expected failures.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mtdevkit.config import DevKitConfig
from mtdevkit.errors import NotFoundError, RequestValidationError
from mtdevkit.inspector import describe_project, list_projects
from mtdevkit.models import ProvisioningRequest
from mtdevkit.pipeline import ProvisioningPipeline, ProvisioningResult


@dataclass
class ToolResult:
    """Text payload of an operation, flagged when it reports a failure."""

    text: str
    is_error: bool = False
    provisioning: ProvisioningResult | None = None


async def create_flutter_project(
    name: str,
    org: str,
    template: str | None = None,
    dir: str | Path | None = None,
    dry_run: bool | None = None,
    *,
    config: DevKitConfig | None = None,
    verbose: bool = False,
) -> ToolResult:
    """Scaffold a new Flutter project from the clean-architecture template."""
    config = config or DevKitConfig()
    try:
        request = ProvisioningRequest.build(
            name=name,
            org=org,
            template=template or config.default_template,
            directory=dir,
            dry_run=dry_run,
        )
    except RequestValidationError as exc:
        return ToolResult(text=f"❌ {exc}", is_error=True)

    result = await ProvisioningPipeline(config, verbose=verbose).run(request)
    return ToolResult(text=result.render(), is_error=not result.success, provisioning=result)


async def list_flutter_projects(dir: str | Path | None = None) -> ToolResult:
    """List Flutter projects (directories holding ``pubspec.yaml``) in *dir*."""
    scan_dir = Path(dir or Path.cwd()).expanduser().resolve()
    try:
        projects = list_projects(scan_dir)
    except NotFoundError as exc:
        return ToolResult(text=str(exc), is_error=True)

    if not projects:
        return ToolResult(text=f"No Flutter projects found in {scan_dir}")
    bullets = "\n".join(f"  • {name}" for name in projects)
    return ToolResult(text=f"Flutter projects in {scan_dir}:\n{bullets}")


async def get_project_info(
    path: str | Path, *, config: DevKitConfig | None = None
) -> ToolResult:
    """Describe an existing Flutter project."""
    config = config or DevKitConfig()
    try:
        report = await describe_project(path, git_binary=config.git_binary)
    except NotFoundError as exc:
        return ToolResult(text=str(exc), is_error=True)
    return ToolResult(text=report.render())
