"""OAuth client and token endpoints (read-only)."""

from typing import Any, Dict, List, Optional

from ..security.sanitizer import InputSanitizer
from .client import ApiClient


class OAuthManager:
    """List the VCS OAuth clients of an organization and their tokens."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list_clients(self, organization: Optional[str] = None) -> List[Dict[str, Any]]:
        """GET /organizations/{org}/oauth-clients"""
        org = InputSanitizer.sanitize_identifier(
            self.client.settings.resolve_organization(organization),
            "organization name",
        )
        return self.client.get(f"/organizations/{org}/oauth-clients")

    def list_tokens(self, oauth_client_id: str) -> List[Dict[str, Any]]:
        """GET /oauth-clients/{id}/oauth-tokens"""
        InputSanitizer.sanitize_identifier(oauth_client_id, "OAuth client id")
        return self.client.get(f"/oauth-clients/{oauth_client_id}/oauth-tokens")
