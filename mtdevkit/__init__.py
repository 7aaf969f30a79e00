"""MTDevKit -- Flutter project provisioning over an external toolchain.

Drives app_starter_plus, fvm/flutter, git and flutter_flavorizr through an
eleven-step pipeline that turns a project name and org into a
ready-to-build project tree.
"""

from mtdevkit.config import DevKitConfig
from mtdevkit.models import ProvisioningRequest
from mtdevkit.pipeline import ProvisioningPipeline, ProvisioningResult
from mtdevkit.tools import ToolResult, create_flutter_project, get_project_info, list_flutter_projects

__version__ = "1.0.0"

__all__ = [
    "DevKitConfig",
    "ProvisioningPipeline",
    "ProvisioningRequest",
    "ProvisioningResult",
    "ToolResult",
    "create_flutter_project",
    "get_project_info",
    "list_flutter_projects",
]
