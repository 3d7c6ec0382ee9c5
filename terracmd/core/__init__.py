"""
Core functionality for terracmd.

This module provides the pieces that do not talk to the remote API:
- The WorkspaceVariable value object and its decoders
- .tfvars import
- Running terraform to import existing resources into local state
"""

from .variable import (
    VariableCategory,
    WorkspaceVariable,
    load_variables,
    variables_from_records,
)
from .tfvars_handler import TfvarsHandler
from .terraform_runner import TerraformRunner, CommandResult
from .state_importer import (
    SUPPORTED_RESOURCE_TYPES,
    ImportPaths,
    ImportResult,
    StateImporter,
)

__all__ = [
    "VariableCategory",
    "WorkspaceVariable",
    "load_variables",
    "variables_from_records",
    "TfvarsHandler",
    "TerraformRunner",
    "CommandResult",
    "SUPPORTED_RESOURCE_TYPES",
    "ImportPaths",
    "ImportResult",
    "StateImporter",
]
