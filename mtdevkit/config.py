"""MTDevKit configuration.

Centralised, typed configuration for the provisioning service. All settings
use Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_TEMPLATE = "https://bitbucket.org/mtinnovation/flutter_clean_template_2025"

DEFAULT_CONFIRMATION_PATTERNS: list[str] = [
    r"\(Y/n\)",
    r"\(y/N\)",
    r"\[Y/n\]",
    r"\[y/N\]",
    r"proceed",
]


class DevKitConfig(BaseModel):
    """Global MTDevKit configuration.

    Holds the toolchain executable names, the template default, and the
    limits applied to child processes. Instances are typically created once
    by the CLI or the boundary operations and then passed to every
    ``ProvisioningPipeline`` run.
    """

    default_template: str = Field(default=DEFAULT_TEMPLATE)

    # Toolchain executables
    runner_binary: str = Field(default="fvm", description="Optional version-manager wrapper")
    git_binary: str = Field(default="git")
    pty_helper: str = Field(default="expect", description="Terminal-allocation helper")

    # Packages driven by the pipeline
    generator_package: str = Field(default="app_starter_plus")
    flavor_generator_package: str = Field(default="flutter_flavorizr")

    # Child-process limits
    interactive_timeout: int = Field(
        default=300, ge=1, description="Hard ceiling of the PTY session in seconds"
    )
    max_output_bytes: int = Field(
        default=10 * 1024 * 1024, ge=1024, description="Per-stream output ceiling"
    )

    confirmation_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CONFIRMATION_PATTERNS)
    )

    # Files clobbered by the flavor generator and restored from the snapshot.
    restored_files: list[str] = Field(default=["lib/main.dart", "lib/app.dart"])
    environments: list[str] = Field(default=["dev", "prod", "uat"])
    snapshot_message: str = Field(default="Initial project setup before flavorizr")

    @field_validator("confirmation_patterns")
    @classmethod
    def _patterns_are_tcl_safe(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one confirmation pattern is required")
        for pattern in value:
            if not pattern:
                raise ValueError("confirmation patterns must not be empty")
            if "{" in pattern or "}" in pattern:
                raise ValueError(f"confirmation pattern may not contain braces: {pattern!r}")
        return value

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "DevKitConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "DevKitConfig":
        """Build a ``DevKitConfig`` from environment variables.

        Recognised variables (all optional):
            MTDEVKIT_TEMPLATE, MTDEVKIT_RUNNER, MTDEVKIT_GIT,
            MTDEVKIT_PTY_HELPER, MTDEVKIT_INTERACTIVE_TIMEOUT,
            MTDEVKIT_MAX_OUTPUT_BYTES, MTDEVKIT_CONFIRM_PATTERNS (JSON list).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MTDEVKIT_TEMPLATE"):
            kwargs["default_template"] = os.environ["MTDEVKIT_TEMPLATE"]
        if os.environ.get("MTDEVKIT_RUNNER"):
            kwargs["runner_binary"] = os.environ["MTDEVKIT_RUNNER"]
        if os.environ.get("MTDEVKIT_GIT"):
            kwargs["git_binary"] = os.environ["MTDEVKIT_GIT"]
        if os.environ.get("MTDEVKIT_PTY_HELPER"):
            kwargs["pty_helper"] = os.environ["MTDEVKIT_PTY_HELPER"]
        if os.environ.get("MTDEVKIT_INTERACTIVE_TIMEOUT"):
            kwargs["interactive_timeout"] = int(os.environ["MTDEVKIT_INTERACTIVE_TIMEOUT"])
        if os.environ.get("MTDEVKIT_MAX_OUTPUT_BYTES"):
            kwargs["max_output_bytes"] = int(os.environ["MTDEVKIT_MAX_OUTPUT_BYTES"])
        if os.environ.get("MTDEVKIT_CONFIRM_PATTERNS"):
            kwargs["confirmation_patterns"] = json.loads(os.environ["MTDEVKIT_CONFIRM_PATTERNS"])

        return cls(**kwargs)
