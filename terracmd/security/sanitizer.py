"""
Input sanitization and validation for terracmd.

This module provides input validation to prevent:
- Empty or malformed identifiers reaching API URLs
- Command injection through terraform arguments
- Invalid workspace variable keys
- Resource ids that cannot be turned into file names
"""

import re

from ..errors import ValidationFailed


class InputSanitizer:
    """
    Provides input validation and sanitization methods.

    All methods raise ValidationFailed if validation fails.
    """

    # Remote identifiers (org names, ws-/var-/oc- ids) end up in URL paths
    IDENTIFIER_PATTERN = re.compile(r'^[a-zA-Z0-9_.-]+$')

    # Maximum lengths to prevent resource exhaustion
    MAX_VARIABLE_KEY_LENGTH = 255
    MAX_IDENTIFIER_LENGTH = 255

    @staticmethod
    def sanitize_identifier(value: str, label: str = "identifier") -> str:
        """
        Validate an identifier that is interpolated into an API path.

        Args:
            value: Organization name, workspace id, variable id, etc.
            label: Human-readable name used in error messages

        Returns:
            Validated identifier (unchanged if valid)

        Raises:
            ValidationFailed: If the identifier is empty or unsafe
        """
        if not isinstance(value, str) or not value:
            raise ValidationFailed(f"{label} must be a non-empty string")

        if len(value) > InputSanitizer.MAX_IDENTIFIER_LENGTH:
            raise ValidationFailed(
                f"{label} too long (max {InputSanitizer.MAX_IDENTIFIER_LENGTH})"
            )

        if not InputSanitizer.IDENTIFIER_PATTERN.match(value):
            raise ValidationFailed(
                f"Invalid {label} '{value}': only letters, digits, '.', '-', '_' allowed"
            )

        return value

    @staticmethod
    def sanitize_variable_key(key: str) -> str:
        """
        Validate a workspace variable key.

        Only presence is checked here; naming rules are enforced remotely.

        Raises:
            ValidationFailed: If key is empty, blank or too long
        """
        if not isinstance(key, str) or not key.strip():
            raise ValidationFailed("Variable key cannot be empty")

        if len(key) > InputSanitizer.MAX_VARIABLE_KEY_LENGTH:
            raise ValidationFailed(
                f"Variable key too long (max {InputSanitizer.MAX_VARIABLE_KEY_LENGTH})"
            )

        return key

    @staticmethod
    def sanitize_resource_id(resource_id: str) -> str:
        """
        Turn a cloud resource id into a string safe for file names.

        Leading and trailing path separators are dropped and the rest are
        replaced by underscores, so "/subscriptions/x/sa1" becomes
        "subscriptions_x_sa1".

        Raises:
            ValidationFailed: If nothing usable remains
        """
        if not isinstance(resource_id, str):
            raise ValidationFailed("Resource id must be a string")

        cleaned = resource_id.strip().strip("/\\")
        if not cleaned:
            raise ValidationFailed("Resource id cannot be empty")

        if not InputSanitizer.is_safe_command_arg(resource_id):
            raise ValidationFailed(f"Unsafe resource id: {resource_id!r}")

        return cleaned.replace("/", "_").replace("\\", "_")

    @staticmethod
    def to_resource_name(text: str) -> str:
        """
        Convert arbitrary text into a valid Terraform resource name.

        Characters outside [A-Za-z0-9_-] become underscores and the result
        always starts with a letter or underscore.
        """
        name = re.sub(r'[^A-Za-z0-9_-]', '_', text)
        if not name or not re.match(r'[A-Za-z_]', name[0]):
            name = f"_{name}"
        return name

    @staticmethod
    def is_safe_command_arg(arg: str) -> bool:
        """
        Check if a command argument is safe to pass to subprocess.

        We always use shell=False; this only rejects arguments that
        subprocess itself would mishandle.

        Args:
            arg: Command argument to check

        Returns:
            True if safe, False otherwise
        """
        # Null bytes truncate arguments at the OS level
        if '\x00' in arg:
            return False

        if len(arg) > 10000:
            return False

        return True
