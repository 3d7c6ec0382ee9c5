"""Organization endpoints."""

import logging
from typing import Any, Dict

from ..errors import ValidationFailed
from ..security.sanitizer import InputSanitizer
from .client import ApiClient, envelope

logger = logging.getLogger(__name__)


class OrganizationManager:
    """Create organizations."""

    def __init__(self, client: ApiClient):
        self.client = client

    def create(self, name: str, email: str) -> Dict[str, Any]:
        """
        Create an organization.

        POST /organizations

        Args:
            name: Organization name, unique across the service
            email: Admin email address for the organization

        Returns:
            The created organization (`id` and `attributes`)
        """
        InputSanitizer.sanitize_identifier(name, "organization name")
        if not isinstance(email, str) or not email:
            raise ValidationFailed("email must be a non-empty string")

        body = envelope("organizations", {"name": name, "email": email})
        result = self.client.post("/organizations", body)
        logger.info(f"Created organization: {name}")
        return result
