"""MTDevKit scaffolder -- content of generated and patched project files.

Quick usage::

    from mtdevkit.scaffolder import flavor_descriptor, config_json

    yaml_text = flavor_descriptor("telecom_app", "mu.mt")
    dev_json = config_json("dev")
"""

from mtdevkit.scaffolder.gradle import (
    AppendText,
    Block,
    InsertFirstLine,
    ReplaceBlock,
    apply_edits,
    find_block,
)
from mtdevkit.scaffolder.patchers import (
    BUILD_SCRIPT,
    CONFIG_DIR,
    FLAVOR_DESCRIPTOR,
    RULES_FILE,
    Flavor,
    build_flavors,
    build_script_edits,
    config_json,
    config_path,
    flavor_descriptor,
    patch_build_script,
    proguard_rules,
)
from mtdevkit.scaffolder.templates import TemplateRenderer, to_app_id, to_display_name

__all__ = [
    "AppendText",
    "BUILD_SCRIPT",
    "Block",
    "CONFIG_DIR",
    "FLAVOR_DESCRIPTOR",
    "Flavor",
    "InsertFirstLine",
    "RULES_FILE",
    "ReplaceBlock",
    "TemplateRenderer",
    "apply_edits",
    "build_flavors",
    "build_script_edits",
    "config_json",
    "config_path",
    "find_block",
    "flavor_descriptor",
    "patch_build_script",
    "proguard_rules",
    "to_app_id",
    "to_display_name",
]
