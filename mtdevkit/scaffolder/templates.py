"""Jinja2 template rendering for generated project artifacts.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``mtdevkit/scaffolder/templates/`` directory and renders them with
project-specific context data (flavors, gradle variants, keep rules).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for generated project files.

    Templates are loaded from a configurable template directory. Undefined
    context variables are an error so a template/context mismatch never
    produces a silently broken file.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"android/proguard-rules.pro.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)


# ---------------------------------------------------------------------------
# Name transforms
# ---------------------------------------------------------------------------


def to_display_name(package_name: str) -> str:
    """Convert a Dart package name to a display name.

    ``my_super_app`` becomes ``My Super App``.
    """
    return " ".join(word[:1].upper() + word[1:] for word in package_name.split("_"))


def to_app_id(package_name: str) -> str:
    """Strip underscores for use in an applicationId / bundleId segment."""
    return package_name.replace("_", "")
