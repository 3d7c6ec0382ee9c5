"""
HTTP transport for the Terraform Cloud v2 API.

ApiClient performs exactly one request per call and turns any transport
failure or non-2xx status into RequestFailed. Request bodies use the
JSON:API envelope the service expects; unwrap() peels the `data` member
back off responses.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config.settings import ApiSettings
from ..errors import RequestFailed, TerraCmdError

logger = logging.getLogger(__name__)


def envelope(
    resource_type: str,
    attributes: Dict[str, Any],
    resource_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Build {"data": {"type": ..., "attributes": ..., ["id": ...]}}."""
    data: Dict[str, Any] = {"type": resource_type, "attributes": attributes}
    if resource_id is not None:
        data["id"] = resource_id
    return {"data": data}


def unwrap(payload: Any) -> Any:
    """Return the `data` member of a response envelope."""
    if not isinstance(payload, dict) or "data" not in payload:
        raise TerraCmdError("Response has no 'data' member")
    return payload["data"]


class ApiClient:
    """
    Synchronous client bound to one ApiSettings.

    Example:
        >>> with ApiClient(ApiSettings.from_environment()) as client:
        ...     client.request("GET", "/organizations/acme/workspaces")
    """

    def __init__(self, settings: ApiSettings, http_client: Optional[httpx.Client] = None):
        self.settings = settings
        self._http = http_client or httpx.Client(timeout=settings.timeout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        self._http.close()

    def url(self, path: str) -> str:
        return f"{self.settings.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.require_token()}",
            "Content-Type": self.settings.content_type,
            "Accept": self.settings.content_type,
        }

    def request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send one request and return the decoded JSON body.

        Returns None when the response has no body (e.g. 204 on DELETE).

        Raises:
            ConfigurationMissing: No API token is configured
            RequestFailed: Transport error or non-2xx status
        """
        url = self.url(path)
        headers = self._headers()
        logger.debug(f"{method} {url}")

        try:
            response = self._http.request(method, url, headers=headers, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.debug(f"{method} {url} -> {e.response.status_code}")
            raise RequestFailed(
                method,
                url,
                status_code=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise RequestFailed(method, url, reason=str(e) or type(e).__name__) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RequestFailed(
                method,
                url,
                status_code=response.status_code,
                body=response.text,
                reason="response is not JSON",
            ) from e

    def get(self, path: str) -> Any:
        return unwrap(self.request("GET", path))

    def post(self, path: str, body: Dict[str, Any]) -> Any:
        return unwrap(self.request("POST", path, body))

    def patch(self, path: str, body: Dict[str, Any]) -> Any:
        return unwrap(self.request("PATCH", path, body))

    def delete(self, path: str) -> Any:
        """DELETE results are passed through without unwrapping."""
        return self.request("DELETE", path)
