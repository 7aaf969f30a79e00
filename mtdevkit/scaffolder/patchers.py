"""Content of the files the provisioning pipeline writes or patches.

Every function here is pure: it turns the project name/org (or an existing
build script) into the full text of a generated artifact.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from mtdevkit.scaffolder.gradle import AppendText, Edit, InsertFirstLine, ReplaceBlock, apply_edits
from mtdevkit.scaffolder.templates import TemplateRenderer, to_app_id, to_display_name

FLAVOR_DESCRIPTOR = "flavorizr.yaml"
CONFIG_DIR = "config"
BUILD_SCRIPT = "android/app/build.gradle.kts"
RULES_FILE = "android/app/proguard-rules.pro"

DESUGARING_FLAG = "isCoreLibraryDesugaringEnabled = true"

ANDROID_DEPENDENCIES: list[tuple[str, str]] = [
    ("implementation", "com.huawei.hms:push:6.11.0.300"),
    ("implementation", "androidx.multidex:multidex:2.0.1"),
    ("coreLibraryDesugaring", "com.android.tools:desugar_jdk_libs:2.1.4"),
]

HMS_KEEP_PACKAGES: list[str] = [
    "com.hianalytics.android",
    "com.huawei.updatesdk",
    "com.huawei.hms",
]

_renderer = TemplateRenderer()


@dataclass(frozen=True)
class Flavor:
    """One build flavor entry of the flavor descriptor."""

    key: str
    app_name: str
    application_id: str


def build_flavors(name: str, org: str) -> list[Flavor]:
    """Return the dev/prod/uat flavors for project *name* under *org*."""
    display_name = to_display_name(name)
    base_id = f"{org}.{to_app_id(name)}"
    return [
        Flavor("dev", f"[DEV] {display_name}", f"{base_id}.dev"),
        Flavor("prod", display_name, base_id),
        Flavor("uat", f"[UAT] {display_name}", f"{base_id}.uat"),
    ]


def flavor_descriptor(name: str, org: str) -> str:
    """Render ``flavorizr.yaml`` for the project."""
    return _renderer.render("flavorizr.yaml.j2", {"flavors": build_flavors(name, org)})


def config_json(env: str) -> str:
    """Return the ``config/app_config_<env>.json`` content for *env*."""
    payload = {
        "secretKey": env.upper(),
        "baseUrl": "",
        "xAPIKey": "",
        "oneSignalKey": "",
    }
    return json.dumps(payload, indent=2) + "\n"


def config_path(env: str) -> str:
    return f"{CONFIG_DIR}/app_config_{env}.json"


def proguard_rules() -> str:
    """Return the fixed ``proguard-rules.pro`` content."""
    return _renderer.render("android/proguard-rules.pro.j2", {"hms_packages": HMS_KEEP_PACKAGES})


def build_script_edits(variant: str = "debug") -> list[Edit]:
    """The three structural edits applied to ``android/app/build.gradle.kts``."""
    build_types = _renderer.render(
        "android/build_types.gradle.kts.j2",
        {"variant": variant, "rules_file": "proguard-rules.pro"},
    )
    dependencies = _renderer.render(
        "android/dependencies.gradle.kts.j2", {"dependencies": ANDROID_DEPENDENCIES}
    )
    return [
        InsertFirstLine("compileOptions", DESUGARING_FLAG),
        ReplaceBlock("buildTypes", build_types),
        AppendText(dependencies),
    ]


def patch_build_script(text: str) -> str:
    """Apply desugaring, debug build-type and dependency edits to *text*.

    Raises:
        BlockNotFoundError: ``compileOptions`` or ``buildTypes`` is missing.
    """
    return apply_edits(text, build_script_edits())
