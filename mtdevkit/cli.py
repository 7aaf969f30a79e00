"""Command-line entry point for ``mtdevkit``.

Usage::

    mtdevkit create telecom_app --org mu.mt --dry-run
    mtdevkit list --dir ~/projects
    mtdevkit info ~/projects/telecom_app
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from rich.markup import escape
from rich.panel import Panel

from mtdevkit.config import DevKitConfig
from mtdevkit.pipeline import TOTAL_STEPS
from mtdevkit.toolchain import detect_runner
from mtdevkit.tools import ToolResult, create_flutter_project, get_project_info, list_flutter_projects
from mtdevkit.utils import (
    console,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mtdevkit",
        description="MTDevKit -- Flutter project provisioning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  mtdevkit create telecom_app --org mu.mt --dry-run\n"
            "  mtdevkit create telecom_app --org mu.mt --dir ~/projects\n"
            "  mtdevkit list --dir ~/projects\n"
            "  mtdevkit info ~/projects/telecom_app\n"
        ),
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Scaffold a new Flutter project")
    create.add_argument("name", help="Dart/Flutter project name, e.g. telecom_app_enterprise")
    create.add_argument("--org", required=True, help="Organisation identifier, e.g. mu.mt")
    create.add_argument("--template", default=None, help="Template repo URL")
    create.add_argument(
        "--dir", default=None, help="Parent directory (default: current working directory)"
    )
    create.add_argument(
        "--dry-run", action="store_true", help="Report what would happen without executing"
    )

    list_cmd = sub.add_parser("list", help="List Flutter projects in a directory")
    list_cmd.add_argument("--dir", default=None, help="Directory to scan (default: cwd)")

    info = sub.add_parser("info", help="Show details about an existing Flutter project")
    info.add_argument("path", help="Path to the Flutter project root")

    return parser


async def _dispatch(args: argparse.Namespace, config: DevKitConfig) -> ToolResult:
    if args.command == "create":
        runner = detect_runner(config.runner_binary)
        console.print(
            Panel(
                f"[bold bright_cyan]MTDevKit[/bold bright_cyan]\n"
                f"Runner : {escape(runner.describe())}",
                title="[bold]Provisioning[/bold]",
                border_style="bright_cyan",
            )
        )
        return await create_flutter_project(
            args.name,
            args.org,
            template=args.template,
            dir=args.dir,
            dry_run=args.dry_run,
            config=config,
            verbose=True,
        )
    if args.command == "list":
        return await list_flutter_projects(args.dir)
    return await get_project_info(args.path, config=config)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit status."""
    args = _build_parser().parse_args(argv)
    config = DevKitConfig.from_env()

    result = asyncio.run(_dispatch(args, config))

    provisioning = result.provisioning
    if provisioning is not None:
        print_summary_table(
            {
                "Status": "success" if provisioning.success else "failed",
                "Steps completed": f"{provisioning.completed_steps}/{TOTAL_STEPS}",
                "Location": str(provisioning.project_dir),
                "Duration": format_duration(provisioning.duration_seconds),
            },
            title="Provisioning Summary",
        )

    print(result.text)
    if result.is_error:
        print_error("Operation failed.")
        return 1
    print_success("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
