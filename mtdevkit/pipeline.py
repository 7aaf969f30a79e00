"""MTDevKit Provisioning Pipeline.

Implements the 11-step Flutter project setup:

Step  1: Install/update app_starter_plus
Step  2: Clone template & rename project
Step  3: Initialise Git (+ hooks if present)
Step  4: Install Flutter dependencies
Step  5: Generate localisations
Step  6: Update flavorizr.yaml with project name & org
Step  7: Commit all files before flavorizr
Step  8: Generate flavors (flavorizr, under a PTY)
Step  9: Revert main.dart & app.dart (overwritten by flavorizr)
Step 10: Create config files (dev / uat / prod)
Step 11: Configure Android build (desugaring, HMS, ProGuard)

Steps run strictly in order and the first failure aborts the run. In dry-run
mode every step still runs but only records the action it would take.
The run is not resumable: after a partial failure the project directory
exists and the pre-flight check rejects a second attempt until it is
removed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

from rich.markup import escape

from mtdevkit.config import DevKitConfig
from mtdevkit.errors import (
    BlockNotFoundError,
    CommandFailedError,
    PipelineError,
    PreflightError,
    StepExecutionError,
    StructuralTemplateError,
)
from mtdevkit.models import ProvisioningRequest
from mtdevkit.scaffolder import patchers
from mtdevkit.toolchain import (
    RunnerSelector,
    command_exists,
    detect_runner,
    extract_confirmations,
    run_command,
    run_interactive,
)
from mtdevkit.utils import console, ensure_dir, shell_join, write_file

TOTAL_STEPS = 11


def step_msg(number: int, message: str) -> str:
    """Format a step progress line, e.g. ``[3/11] Initialising Git repository``."""
    return f"[{number}/{TOTAL_STEPS}] {message}"


# ---------------------------------------------------------------------------
# Run state and result
# ---------------------------------------------------------------------------


@dataclass
class RunContext:
    """Everything one provisioning run needs, detected once at run entry."""

    request: ProvisioningRequest
    runner: RunnerSelector
    has_git: bool
    log: list[str] = field(default_factory=list)
    current_step: int = 0
    completed_steps: int = 0

    @property
    def dry_run(self) -> bool:
        return self.request.dry_run

    @property
    def project_dir(self) -> Path:
        return self.request.project_dir


@dataclass
class ProvisioningResult:
    """Outcome of one pipeline run.

    ``log`` holds the step lines accumulated before success or failure; it
    is empty when pre-flight checks reject the request.
    """

    success: bool
    dry_run: bool
    project_dir: Path
    header: list[str] = field(default_factory=list)
    log: list[str] = field(default_factory=list)
    completed_steps: int = 0
    failed_step: int | None = None
    error: str | None = None
    duration_seconds: float = 0.0

    def render(self) -> str:
        """Return the caller-facing report text."""
        body = "\n".join(self.header + self.log)
        if self.success:
            return body
        return f"❌ Setup failed:\n{self.error}\n\nProgress so far:\n{body}"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ProvisioningPipeline:
    """Drives the eleven provisioning steps for one request at a time.

    Attributes:
        config: Toolchain names, limits and confirmation patterns.
        verbose: Echo every log line to the console as it is recorded.
    """

    _STEP_METHODS: dict[int, str] = {
        1: "step_install_generator",
        2: "step_clone_template",
        3: "step_init_git",
        4: "step_install_dependencies",
        5: "step_generate_localisations",
        6: "step_write_flavor_descriptor",
        7: "step_snapshot",
        8: "step_generate_flavors",
        9: "step_restore_sources",
        10: "step_write_config_files",
        11: "step_patch_android_build",
    }

    def __init__(self, config: DevKitConfig | None = None, verbose: bool = False) -> None:
        self.config = config or DevKitConfig()
        self.verbose = verbose

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, request: ProvisioningRequest) -> ProvisioningResult:
        """Provision the project described by *request*.

        Never raises for pipeline failures; they are reported through the
        returned ``ProvisioningResult``.
        """
        started = time.monotonic()
        ctx = RunContext(
            request=request,
            runner=detect_runner(self.config.runner_binary),
            has_git=command_exists(self.config.git_binary),
        )
        header = self._header(ctx)
        for line in header:
            self._echo(line)

        try:
            await self._preflight(ctx)
            for number, method_name in self._STEP_METHODS.items():
                ctx.current_step = number
                try:
                    await getattr(self, method_name)(ctx)
                except CommandFailedError as exc:
                    raise StepExecutionError(number, exc) from exc
                except BlockNotFoundError as exc:
                    raise StructuralTemplateError(number, str(exc)) from exc
                except OSError as exc:
                    raise PipelineError(number, f"{type(exc).__name__}: {exc}") from exc
                ctx.completed_steps = number
            self._epilogue(ctx)
        except PipelineError as exc:
            if self.verbose:
                console.print(f"[bold red]Setup failed:[/bold red] {escape(exc.message)}")
            return ProvisioningResult(
                success=False,
                dry_run=ctx.dry_run,
                project_dir=ctx.project_dir,
                header=header,
                log=ctx.log,
                completed_steps=ctx.completed_steps,
                failed_step=exc.step,
                error=exc.message,
                duration_seconds=time.monotonic() - started,
            )

        return ProvisioningResult(
            success=True,
            dry_run=ctx.dry_run,
            project_dir=ctx.project_dir,
            header=header,
            log=ctx.log,
            completed_steps=ctx.completed_steps,
            duration_seconds=time.monotonic() - started,
        )

    # ------------------------------------------------------------------
    # Log helpers
    # ------------------------------------------------------------------

    def _echo(self, message: str, style: str | None = None) -> None:
        if self.verbose:
            console.print(escape(message), style=style, highlight=False)

    def _push(self, ctx: RunContext, message: str) -> None:
        ctx.log.append(message)
        if message.startswith("["):
            self._echo(message, style="bold cyan")
        elif message.startswith("✔"):
            self._echo(message, style="green")
        elif message.startswith("⚠"):
            self._echo(message, style="yellow")
        else:
            self._echo(message, style="dim")

    def _begin(self, ctx: RunContext, message: str) -> None:
        self._push(ctx, step_msg(ctx.current_step, message))

    def _header(self, ctx: RunContext) -> list[str]:
        req = ctx.request
        lines = [
            f"Project:  {req.name}",
            f"Org:      {req.org}",
            f"Template: {req.template}",
            f"Location: {ctx.project_dir}",
            f"Runner:   {ctx.runner.describe()}",
        ]
        if req.dry_run:
            lines += ["Mode:     DRY RUN", ""]
        return lines

    # ------------------------------------------------------------------
    # Command helpers
    # ------------------------------------------------------------------

    def _tool(self, ctx: RunContext, logical: str, args: list[str]) -> tuple[str, list[str]]:
        """Resolve a ``flutter``/``dart`` invocation through the runner."""
        return ctx.runner.resolve(logical, args)

    async def _run(self, command: str, args: list[str], cwd: Path | None = None) -> str:
        return await run_command(
            command, args, cwd, max_output_bytes=self.config.max_output_bytes
        )

    async def _git(self, ctx: RunContext, *args: str) -> str:
        return await self._run(self.config.git_binary, list(args), ctx.project_dir)

    # ------------------------------------------------------------------
    # Pre-flight checks
    # ------------------------------------------------------------------

    async def _preflight(self, ctx: RunContext) -> None:
        """Verify the toolchain and target directory before any side effect."""
        if ctx.dry_run:
            self._push(
                ctx,
                f"[pre-flight] Would verify: flutter/{self.config.runner_binary}, "
                f"{self.config.git_binary} installed; {ctx.project_dir} does not exist",
            )
            return

        if not ctx.runner.wrapped and not command_exists("flutter"):
            raise PreflightError(
                f"Neither {self.config.runner_binary} nor flutter found on PATH. "
                f"Install Flutter or {self.config.runner_binary} first."
            )
        if not ctx.has_git:
            raise PreflightError(f"{self.config.git_binary} is not installed.")
        if not ctx.request.parent_directory.is_dir():
            raise PreflightError(
                f"Parent directory '{ctx.request.parent_directory}' does not exist."
            )
        if ctx.project_dir.exists():
            raise PreflightError(
                f"Directory '{ctx.project_dir}' already exists. "
                "Remove it or choose a different name."
            )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def step_install_generator(self, ctx: RunContext) -> None:
        package = self.config.generator_package
        self._begin(ctx, f"Installing {package}")
        command, args = self._tool(ctx, "dart", ["pub", "global", "activate", package])
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] {shell_join(command, args)}")
        else:
            await self._run(command, args)
        self._push(ctx, f"✔ {package} ready")

    async def step_clone_template(self, ctx: RunContext) -> None:
        req = ctx.request
        package = self.config.generator_package
        self._begin(ctx, f"Cloning template into {req.name}")
        starter_args = [
            "pub", "global", "run", f"{package}:{package}",
            "--name", req.name,
            "--org", req.org,
            "--template", req.template,
        ]
        if ctx.runner.wrapped:
            starter_args.append(f"--{self.config.runner_binary}")
        command, args = self._tool(ctx, "dart", starter_args)
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] {shell_join(command, args)}")
        else:
            await self._run(command, args, req.parent_directory)
        self._push(ctx, "✔ Template cloned")

    async def step_init_git(self, ctx: RunContext) -> None:
        self._begin(ctx, "Initialising Git repository")
        if ctx.dry_run:
            self._push(ctx, "  [dry-run] git init (if .git/ does not exist)")
            self._push(ctx, "  [dry-run] git config core.hooksPath .githooks/ (if .githooks/ exists)")
            return

        if not (ctx.project_dir / ".git").exists():
            await self._git(ctx, "init")
            self._push(ctx, "✔ Git repository initialised")
        else:
            self._push(ctx, "✔ Git repository already exists")

        if (ctx.project_dir / ".githooks").is_dir():
            await self._git(ctx, "config", "core.hooksPath", ".githooks/")
            self._push(ctx, "✔ Git hooks configured (.githooks/)")
        else:
            self._push(ctx, "⚠ No .githooks/ directory found — skipping hook setup")

    async def step_install_dependencies(self, ctx: RunContext) -> None:
        self._begin(ctx, "Installing Flutter dependencies")
        command, args = self._tool(ctx, "flutter", ["pub", "get"])
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] {shell_join(command, args)}")
        else:
            await self._run(command, args, ctx.project_dir)
        self._push(ctx, "✔ Dependencies installed")

    async def step_generate_localisations(self, ctx: RunContext) -> None:
        self._begin(ctx, "Generating localisations")
        command, args = self._tool(ctx, "flutter", ["gen-l10n"])
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] {shell_join(command, args)}")
        else:
            await self._run(command, args, ctx.project_dir)
        self._push(ctx, "✔ Localisations generated")

    async def step_write_flavor_descriptor(self, ctx: RunContext) -> None:
        self._begin(ctx, f"Updating {patchers.FLAVOR_DESCRIPTOR}")
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] Update {patchers.FLAVOR_DESCRIPTOR} with project name & org")
        else:
            descriptor = ctx.project_dir / patchers.FLAVOR_DESCRIPTOR
            if not descriptor.is_file():
                raise StructuralTemplateError(
                    ctx.current_step, f"{patchers.FLAVOR_DESCRIPTOR} not found at {descriptor}"
                )
            write_file(descriptor, patchers.flavor_descriptor(ctx.request.name, ctx.request.org))
        self._push(ctx, f"✔ {patchers.FLAVOR_DESCRIPTOR} updated")

    async def step_snapshot(self, ctx: RunContext) -> None:
        self._begin(ctx, "Committing all files before flavorizr")
        if ctx.dry_run:
            self._push(ctx, "  [dry-run] git add -A && git commit")
        else:
            await self._git(ctx, "add", "-A")
            await self._git(ctx, "commit", "-m", self.config.snapshot_message)
        self._push(ctx, "✔ All files committed")

    async def step_generate_flavors(self, ctx: RunContext) -> None:
        self._begin(ctx, "Generating flavors (flavorizr)")
        command, args = self._tool(
            ctx, "flutter", ["pub", "run", self.config.flavor_generator_package]
        )
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] {shell_join(command, args)}")
            self._push(ctx, f"  [dry-run] (will use {self.config.pty_helper} for PTY allocation)")
        else:
            output = await run_interactive(
                command,
                args,
                ctx.project_dir,
                pty_helper=self.config.pty_helper,
                patterns=self.config.confirmation_patterns,
                timeout=self.config.interactive_timeout,
                max_output_bytes=self.config.max_output_bytes,
            )
            for prompt in extract_confirmations(output):
                self._push(ctx, f"  ↳ auto-confirmed prompt: {prompt}")
        self._push(ctx, "✔ Flavors generated")

    async def step_restore_sources(self, ctx: RunContext) -> None:
        files = self.config.restored_files
        names = " & ".join(Path(f).name for f in files)
        self._begin(ctx, f"Reverting {names} (overwritten by flavorizr)")
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] git checkout -- {' '.join(files)}")
        else:
            await self._git(ctx, "checkout", "--", *files)
        self._push(ctx, f"✔ {names} reverted")

    async def step_write_config_files(self, ctx: RunContext) -> None:
        envs = self.config.environments
        pattern = f"{patchers.CONFIG_DIR}/app_config_{{{','.join(envs)}}}.json"
        self._begin(ctx, "Creating config files")
        if ctx.dry_run:
            self._push(ctx, f"  [dry-run] mkdir -p {patchers.CONFIG_DIR}")
            self._push(ctx, f"  [dry-run] Write {pattern}")
        else:
            ensure_dir(ctx.project_dir / patchers.CONFIG_DIR)
            for env in envs:
                write_file(ctx.project_dir / patchers.config_path(env), patchers.config_json(env))
        self._push(ctx, f"✔ Config files created ({pattern})")

    async def step_patch_android_build(self, ctx: RunContext) -> None:
        self._begin(ctx, "Configuring Android build (desugaring, HMS, ProGuard)")
        if ctx.dry_run:
            self._push(
                ctx,
                f"  [dry-run] Patch {patchers.BUILD_SCRIPT} (compileOptions, buildTypes, dependencies)",
            )
            self._push(ctx, f"  [dry-run] Create {patchers.RULES_FILE}")
            return

        script = ctx.project_dir / patchers.BUILD_SCRIPT
        if not script.is_file():
            raise StructuralTemplateError(
                ctx.current_step, f"{patchers.BUILD_SCRIPT} not found at {script}"
            )
        patched = patchers.patch_build_script(script.read_text(encoding="utf-8"))
        write_file(script, patched)
        self._push(ctx, f"✔ {patchers.BUILD_SCRIPT} updated (desugaring, buildTypes, dependencies)")

        write_file(ctx.project_dir / patchers.RULES_FILE, patchers.proguard_rules())
        self._push(ctx, f"✔ {patchers.RULES_FILE} created")

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def _epilogue(self, ctx: RunContext) -> None:
        self._push(ctx, "")
        if ctx.dry_run:
            self._push(ctx, "── Dry run complete! No changes were made. ──")
            return
        self._push(ctx, "── Setup complete! ──")
        self._push(ctx, f"Project location: {ctx.project_dir}")
        self._push(ctx, "")
        self._push(ctx, "Next steps:")
        self._push(ctx, f"  1. Fill in {patchers.CONFIG_DIR}/app_config_*.json with your API keys")
        self._push(ctx, f"  2. Open {ctx.project_dir} in your IDE and start building")
