"""
Workspace endpoints.

Organization names and VCS identifiers fall back to the defaults in
ApiSettings when a call omits them.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from ..errors import ValidationFailed
from ..security.sanitizer import InputSanitizer
from .client import ApiClient, envelope

logger = logging.getLogger(__name__)

DEFAULT_WORKING_DIRECTORY = "/src"


class WorkspaceManager:
    """Create, list, look up and delete remote workspaces."""

    def __init__(self, client: ApiClient):
        self.client = client

    def _organization(self, organization: Optional[str]) -> str:
        return InputSanitizer.sanitize_identifier(
            self.client.settings.resolve_organization(organization),
            "organization name",
        )

    def create(
        self,
        name: str,
        organization: Optional[str] = None,
        working_directory: str = DEFAULT_WORKING_DIRECTORY,
        vcs_identifier: Optional[str] = None,
        repository: Optional[str] = None,
        oauth_token_id: Optional[str] = None,
        global_remote_state: bool = True,
    ) -> Dict[str, Any]:
        """
        Create a workspace, optionally linked to a VCS repository.

        POST /organizations/{org}/workspaces

        The workspace is linked to a repository when oauth_token_id is
        given. The repository identifier is vcs_identifier if passed,
        otherwise it is built from the configured VCS organization (and
        project) and `repository`, which defaults to the workspace name.

        Args:
            name: Workspace name; naming rules are enforced remotely
            organization: Owning organization (default: configured one)
            working_directory: Relative path terraform runs in
            vcs_identifier: "org/repo" or "org/project/_git/repo"
            repository: Repository name used to build the identifier
            oauth_token_id: OAuth token used for the VCS connection
            global_remote_state: Share state with every workspace in the org

        Returns:
            The created workspace (`id` and `attributes`)
        """
        if not isinstance(name, str) or not name:
            raise ValidationFailed("Workspace name must be a non-empty string")
        org = self._organization(organization)

        attributes: Dict[str, Any] = {
            "name": name,
            "working-directory": working_directory,
            "global-remote-state": global_remote_state,
        }

        if oauth_token_id:
            InputSanitizer.sanitize_identifier(oauth_token_id, "OAuth token id")
            identifier = self.client.settings.resolve_vcs_identifier(
                vcs_identifier, repository or name
            )
            attributes["vcs-repo"] = {
                "identifier": identifier,
                "oauth-token-id": oauth_token_id,
            }
        elif vcs_identifier:
            raise ValidationFailed("vcs_identifier requires oauth_token_id")

        body = envelope("workspaces", attributes)
        result = self.client.post(f"/organizations/{org}/workspaces", body)
        logger.info(f"Created workspace {name} in {org}")
        return result

    def list(self, organization: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List the workspaces of an organization.

        GET /organizations/{org}/workspaces
        """
        org = self._organization(organization)
        return self.client.get(f"/organizations/{org}/workspaces")

    def get(
        self,
        name: Optional[str] = None,
        organization: Optional[str] = None,
    ) -> Union[List[Dict[str, Any]], str, None]:
        """
        Get workspaces, or the id of the one called `name`.

        Without a name this is list(). With a name the full list is
        fetched and matched exactly on attributes.name; the id of the
        match is returned, or None if there is none.
        """
        workspaces = self.list(organization)
        if name is None:
            return workspaces

        for workspace in workspaces:
            if workspace.get("attributes", {}).get("name") == name:
                return workspace["id"]

        logger.debug(f"No workspace named {name}")
        return None

    def delete(self, workspace_id: str) -> Any:
        """
        Delete a workspace.

        DELETE /workspaces/{id}

        Returns:
            The raw transport result (usually None)
        """
        InputSanitizer.sanitize_identifier(workspace_id, "workspace id")
        result = self.client.delete(f"/workspaces/{workspace_id}")
        logger.info(f"Deleted workspace {workspace_id}")
        return result
