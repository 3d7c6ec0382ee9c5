"""
Terraform Cloud API operations.

Each manager method maps to one endpoint and one HTTP verb. TerraformCloud
bundles a single ApiClient with all of them.
"""

from typing import Optional

import httpx

from ..config.settings import ApiSettings
from .client import ApiClient, envelope, unwrap
from .oauth import OAuthManager
from .organizations import OrganizationManager
from .variables import VariableManager
from .workspaces import WorkspaceManager


class TerraformCloud:
    """
    Entry point for API calls.

    Example:
        >>> with TerraformCloud(ApiSettings.from_environment(strict=True)) as tfc:
        ...     ws_id = tfc.workspaces.get(name="network-prod")
        ...     tfc.variables.list(ws_id)
    """

    def __init__(self, settings: ApiSettings, http_client: Optional[httpx.Client] = None):
        self.client = ApiClient(settings, http_client)
        self.organizations = OrganizationManager(self.client)
        self.workspaces = WorkspaceManager(self.client)
        self.variables = VariableManager(self.client)
        self.oauth = OAuthManager(self.client)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        self.client.close()


__all__ = [
    "TerraformCloud",
    "ApiClient",
    "envelope",
    "unwrap",
    "OAuthManager",
    "OrganizationManager",
    "VariableManager",
    "WorkspaceManager",
]
