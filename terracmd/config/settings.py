"""
Settings management for terracmd.

Handles loading, saving, and accessing the user's persistent defaults,
and resolving them together with the environment into an ApiSettings
object that every API operation receives explicitly.
"""

import copy
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigurationMissing
from ..security.secure_memory import SecureString
from .defaults import (
    API_PATH,
    DEFAULT_SETTINGS,
    ENV_ADDRESS,
    ENV_ORGANIZATION,
    ENV_TOKEN,
    ENV_VCS_ORGANIZATION,
    ENV_VCS_PROJECT,
)

logger = logging.getLogger(__name__)


def api_root(address: str) -> str:
    """
    Normalize an API address.

    A bare host such as "https://tfe.example.com" gets the v2 API path
    appended; an address that already has a path is used as-is.
    """
    address = address.rstrip("/")
    if not urlparse(address).path:
        return f"{address}{API_PATH}"
    return address


class Settings:
    """
    Persistent settings manager.

    Settings are stored as JSON.

    Path:
        Linux/macOS: ~/.config/terracmd/settings.json
        Windows: %APPDATA%\\terracmd\\settings.json
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_file: Explicit settings file, bypassing the platform
                config directory
        """
        if config_file is None:
            self.config_dir = self._get_config_dir()
            self.config_file = self.config_dir / "settings.json"
        else:
            self.config_file = Path(config_file)
            self.config_dir = self.config_file.parent
        self._settings: Dict[str, Any] = {}
        self.load()

    @staticmethod
    def _get_config_dir() -> Path:
        """
        Get platform-specific configuration directory.

        Returns:
            Path to configuration directory
        """
        if os.name == 'nt':  # Windows
            base = os.environ.get('APPDATA', os.path.expanduser('~'))
        else:  # Linux/macOS
            base = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(base) / 'terracmd'

    def load(self):
        """
        Load settings from file.

        If file doesn't exist or is invalid, uses default settings.
        """
        self._settings = copy.deepcopy(DEFAULT_SETTINGS)

        if not self.config_file.exists():
            logger.debug("No config file found, using defaults")
            return

        try:
            with open(self.config_file, 'r') as f:
                loaded_settings = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to load settings: {e}, using defaults")
            return

        if not isinstance(loaded_settings, dict):
            logger.error(f"Ignoring {self.config_file}: top level must be an object")
            return

        # The token only ever comes from the environment
        loaded_settings.pop("token", None)
        self._deep_update(self._settings, loaded_settings)
        logger.debug(f"Loaded settings from {self.config_file}")

    def save(self):
        """
        Save current settings to file.

        Creates parent directories if needed.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w') as f:
            json.dump(self._settings, f, indent=2)
        logger.info(f"Saved settings to {self.config_file}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get setting value.

        Supports nested keys with dot notation: "api.base_url"

        Args:
            key: Setting key (use dots for nested values)
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        value = self._settings

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set setting value.

        Supports nested keys with dot notation: "vcs.project"
        """
        keys = key.split('.')
        target = self._settings

        for k in keys[:-1]:
            if k not in target or not isinstance(target[k], dict):
                target[k] = {}
            target = target[k]

        target[keys[-1]] = value

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._settings)

    @staticmethod
    def _deep_update(base: dict, updates: dict):
        """Recursively update base dict with values from updates dict."""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                Settings._deep_update(base[key], value)
            else:
                base[key] = value


@dataclass(frozen=True)
class ApiSettings:
    """
    Resolved configuration for talking to the remote API.

    Constructed once (usually via from_environment) and passed to every
    operation. Optional defaults are conveniences: an explicit argument
    always wins over them.
    """
    token: Optional[SecureString] = None
    base_url: str = DEFAULT_SETTINGS["api"]["base_url"]
    content_type: str = DEFAULT_SETTINGS["api"]["content_type"]
    timeout: float = DEFAULT_SETTINGS["api"]["timeout"]
    organization: Optional[str] = None
    vcs_organization: Optional[str] = None
    vcs_project: Optional[str] = None
    terraform_binary: str = DEFAULT_SETTINGS["terraform_binary"]

    @classmethod
    def from_environment(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        strict: bool = False,
        settings: Optional[Settings] = None,
    ) -> "ApiSettings":
        """
        Resolve settings from environment variables and the settings file.

        Resolution order per field: environment variable, settings file,
        built-in default.

        Args:
            environ: Mapping to read instead of os.environ
            strict: Raise ConfigurationMissing if no token is set
            settings: Loaded Settings; a default Settings() is used if omitted

        Raises:
            ConfigurationMissing: strict is True and the token is unset
        """
        env = os.environ if environ is None else environ
        if settings is None:
            settings = Settings()

        raw_token = env.get(ENV_TOKEN, "")
        if not raw_token:
            if strict:
                raise ConfigurationMissing(ENV_TOKEN, "set it to a user or team API token")
            logger.debug(f"{ENV_TOKEN} is not set; authenticated calls will fail")

        def pick(env_name: str, settings_key: str) -> Optional[str]:
            return env.get(env_name) or settings.get(settings_key) or None

        api_defaults = DEFAULT_SETTINGS["api"]
        return cls(
            token=SecureString(raw_token) if raw_token else None,
            base_url=api_root(pick(ENV_ADDRESS, "api.base_url") or api_defaults["base_url"]),
            content_type=settings.get("api.content_type", api_defaults["content_type"]),
            timeout=float(settings.get("api.timeout", api_defaults["timeout"])),
            organization=pick(ENV_ORGANIZATION, "organization"),
            vcs_organization=pick(ENV_VCS_ORGANIZATION, "vcs.organization"),
            vcs_project=pick(ENV_VCS_PROJECT, "vcs.project"),
            terraform_binary=settings.get("terraform_binary", DEFAULT_SETTINGS["terraform_binary"]),
        )

    def require_token(self) -> str:
        """Return the raw API token, or raise ConfigurationMissing."""
        if not self.token:
            raise ConfigurationMissing(ENV_TOKEN, "set it to a user or team API token")
        return self.token.get_value()

    def resolve_organization(self, explicit: Optional[str] = None) -> str:
        """Explicit argument, then the configured default organization."""
        organization = explicit or self.organization
        if not organization:
            raise ConfigurationMissing(
                ENV_ORGANIZATION, "pass an organization name or configure a default"
            )
        return organization

    def resolve_vcs_identifier(
        self,
        explicit: Optional[str] = None,
        repository: Optional[str] = None,
    ) -> str:
        """
        Work out the VCS repository identifier for a workspace.

        An explicit identifier is used as-is. Otherwise it is built from
        the configured VCS organization and the repository name:
        "org/repo", or "org/project/_git/repo" when a VCS project is
        configured (Azure DevOps).
        """
        if explicit:
            return explicit
        if not repository:
            raise ConfigurationMissing(
                "vcs identifier", "pass an identifier or a repository name"
            )
        if not self.vcs_organization:
            raise ConfigurationMissing(
                ENV_VCS_ORGANIZATION, "pass a VCS identifier or configure a default"
            )
        if self.vcs_project:
            return f"{self.vcs_organization}/{self.vcs_project}/_git/{repository}"
        return f"{self.vcs_organization}/{repository}"
