"""
terracmd - command-style client for the Terraform Cloud API, plus a
helper that imports existing Azure resources into local Terraform state.
"""

from .api import TerraformCloud
from .config import ApiSettings
from .core import StateImporter, VariableCategory, WorkspaceVariable
from .errors import (
    ConfigurationMissing,
    ExternalToolFailed,
    RequestFailed,
    TerraCmdError,
    ValidationFailed,
)

__version__ = "1.0.0"

__all__ = [
    "TerraformCloud",
    "ApiSettings",
    "StateImporter",
    "VariableCategory",
    "WorkspaceVariable",
    "ConfigurationMissing",
    "ExternalToolFailed",
    "RequestFailed",
    "TerraCmdError",
    "ValidationFailed",
]
