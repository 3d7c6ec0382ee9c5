"""Workspace variable endpoints."""

import logging
from typing import Any, Dict, Iterable, List

from ..core.variable import WorkspaceVariable
from ..errors import ValidationFailed
from ..security.sanitizer import InputSanitizer
from .client import ApiClient, envelope

logger = logging.getLogger(__name__)


def _require_variable(variable: Any) -> WorkspaceVariable:
    if not isinstance(variable, WorkspaceVariable):
        raise ValidationFailed(
            f"Expected a WorkspaceVariable, got {type(variable).__name__}"
        )
    return variable


class VariableManager:
    """Create, list, update and delete workspace variables."""

    def __init__(self, client: ApiClient):
        self.client = client

    def create(self, workspace_id: str, variable: WorkspaceVariable) -> Dict[str, Any]:
        """
        POST /workspaces/{id}/vars

        Returns:
            The created variable (`id` and `attributes`)
        """
        InputSanitizer.sanitize_identifier(workspace_id, "workspace id")
        _require_variable(variable)

        body = envelope("vars", variable.to_attributes())
        result = self.client.post(f"/workspaces/{workspace_id}/vars", body)
        logger.info(f"Created variable {variable.key} on {workspace_id}")
        return result

    def create_many(
        self,
        workspace_id: str,
        variables: Iterable[WorkspaceVariable],
    ) -> List[Dict[str, Any]]:
        """Create each variable in order. The first failure propagates."""
        return [self.create(workspace_id, variable) for variable in variables]

    def list(self, workspace_id: str) -> List[Dict[str, Any]]:
        """GET /workspaces/{id}/vars"""
        InputSanitizer.sanitize_identifier(workspace_id, "workspace id")
        return self.client.get(f"/workspaces/{workspace_id}/vars")

    def update(
        self,
        workspace_id: str,
        variable_id: str,
        variable: WorkspaceVariable,
    ) -> Dict[str, Any]:
        """
        Replace a variable's attributes.

        PATCH /workspaces/{id}/vars/{varId}
        """
        InputSanitizer.sanitize_identifier(workspace_id, "workspace id")
        InputSanitizer.sanitize_identifier(variable_id, "variable id")
        _require_variable(variable)

        body = envelope("vars", variable.to_attributes(), resource_id=variable_id)
        result = self.client.patch(f"/workspaces/{workspace_id}/vars/{variable_id}", body)
        logger.info(f"Updated variable {variable.key} on {workspace_id}")
        return result

    def delete(self, workspace_id: str, variable_id: str) -> Any:
        """
        DELETE /workspaces/{id}/vars/{varId}

        Returns:
            The raw transport result (usually None)
        """
        InputSanitizer.sanitize_identifier(workspace_id, "workspace id")
        InputSanitizer.sanitize_identifier(variable_id, "variable id")
        result = self.client.delete(f"/workspaces/{workspace_id}/vars/{variable_id}")
        logger.info(f"Deleted variable {variable_id} from {workspace_id}")
        return result
