"""
Exception types raised by terracmd.

Every error the library raises on purpose derives from TerraCmdError so
callers (and the CLI) can catch a single base class.
"""

from typing import Any, Optional


class TerraCmdError(Exception):
    """Base class for terracmd errors."""
    pass


class ConfigurationMissing(TerraCmdError):
    """Raised when a required configuration value is absent."""

    def __init__(self, name: str, hint: str = ""):
        self.name = name
        message = f"Missing required configuration: {name}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)


class ValidationFailed(TerraCmdError):
    """Raised when a caller-supplied value is outside its allowed set."""
    pass


class RequestFailed(TerraCmdError):
    """
    Raised when an API call fails at the transport level or returns a
    non-2xx status.

    Attributes:
        method: HTTP verb of the failed call
        url: Full request URL
        status_code: HTTP status, or None if no response was received
        body: Response body text, if any
    """

    def __init__(
        self,
        method: str,
        url: str,
        status_code: Optional[int] = None,
        body: Any = None,
        reason: str = "",
    ):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{method} {url} failed with HTTP {status_code}"
        else:
            message = f"{method} {url} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ExternalToolFailed(TerraCmdError):
    """Raised when the terraform binary exits non-zero."""

    def __init__(self, command: str, exit_code: int, stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"terraform {command} exited with status {exit_code}"
        if stderr.strip():
            message = f"{message}: {stderr.strip().splitlines()[-1]}"
        super().__init__(message)
