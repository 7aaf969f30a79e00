"""Request model for the provisioning pipeline."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mtdevkit.config import DEFAULT_TEMPLATE
from mtdevkit.errors import RequestValidationError

DART_PACKAGE_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")


class ProvisioningRequest(BaseModel):
    """A validated request to scaffold one Flutter project.

    ``name`` is a Dart package name, so the derived project directory is
    always a single path segment under ``parent_directory``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Dart/Flutter project name, e.g. telecom_app_enterprise")
    org: str = Field(min_length=1, description="Organisation identifier, e.g. mu.mt")
    template: str = Field(default=DEFAULT_TEMPLATE)
    parent_directory: Path = Field(default_factory=Path.cwd)
    dry_run: bool = False

    @field_validator("name")
    @classmethod
    def _dart_package_name(cls, value: str) -> str:
        if not DART_PACKAGE_NAME_RE.fullmatch(value):
            raise ValueError("Must be lowercase, start with a letter, contain only [a-z0-9_]")
        return value

    @field_validator("org")
    @classmethod
    def _org_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Organisation identifier must not be blank")
        return value

    @field_validator("template")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Template must be an absolute URL: {value!r}")
        return value

    @field_validator("parent_directory")
    @classmethod
    def _absolute_parent(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @property
    def project_dir(self) -> Path:
        """Absolute path of the project to create."""
        return self.parent_directory / self.name

    @classmethod
    def build(
        cls,
        name: str,
        org: str,
        template: str | None = None,
        directory: str | Path | None = None,
        dry_run: bool | None = None,
    ) -> "ProvisioningRequest":
        """Create a request from optional boundary parameters.

        Raises:
            RequestValidationError: Any field failed validation.
        """
        fields: dict[str, object] = {"name": name, "org": org, "dry_run": bool(dry_run)}
        if template is not None:
            fields["template"] = template
        if directory is not None:
            fields["parent_directory"] = Path(directory)
        try:
            return cls(**fields)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise RequestValidationError(f"Invalid request -- {problems}") from exc
