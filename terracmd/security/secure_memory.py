"""
Secure memory handling for sensitive data.

This module provides utilities for handling sensitive data in memory:
- SecureString: Container for the API token and sensitive variable values
- OutputRedactor: Redacts sensitive values from terraform output text
"""

from typing import Iterable, List, Optional


class SecureString:
    """
    Container for sensitive strings with explicit cleanup.

    Security features:
    - Value stored privately
    - No string representation (prevents accidental logging)
    - Context manager support

    Example:
        >>> token = SecureString("my-api-token")
        >>> headers = {"Authorization": f"Bearer {token.get_value()}"}
        >>> token.clear()
    """

    def __init__(self, value: str):
        self._value: Optional[str] = value
        self._cleared = False

    def __str__(self) -> str:
        return "[REDACTED]"

    def __repr__(self) -> str:
        return "SecureString([REDACTED])"

    def __bool__(self) -> bool:
        return not self._cleared and bool(self._value)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.clear()
        return False

    def get_value(self) -> str:
        """
        Get the actual sensitive value.

        Raises:
            ValueError: If value has been cleared
        """
        if self._cleared or self._value is None:
            raise ValueError("SecureString value has been cleared")
        return self._value

    def clear(self):
        """
        Drop the sensitive value.

        After calling this, get_value() will raise ValueError.
        This method is idempotent.
        """
        self._value = None
        self._cleared = True

    def is_cleared(self) -> bool:
        return self._cleared


class OutputRedactor:
    """
    Redacts sensitive values from text output.

    Example:
        >>> redactor = OutputRedactor([SecureString("secret123")])
        >>> redactor.redact("Connecting with key: secret123")
        'Connecting with key: [REDACTED]'
    """

    def __init__(self, sensitive_values: Optional[Iterable[SecureString]] = None):
        self.sensitive_values: List[str] = []

        if sensitive_values:
            self.add_sensitive_values(sensitive_values)

    def add_sensitive_values(self, sensitive_values: Iterable[SecureString]):
        """Add the unwrapped contents of SecureStrings to the redaction list."""
        for secure_str in sensitive_values:
            if isinstance(secure_str, SecureString):
                try:
                    value = secure_str.get_value()
                except ValueError:
                    # Already cleared
                    continue
                if value:
                    self.sensitive_values.append(value)

    def redact(self, text: str) -> str:
        """
        Replace any occurrence of sensitive values with [REDACTED].

        Uses exact, case-sensitive string matching (not regex).
        """
        if not text:
            return text

        redacted = text
        for sensitive_value in self.sensitive_values:
            redacted = redacted.replace(sensitive_value, "[REDACTED]")

        return redacted

    def clear(self):
        self.sensitive_values.clear()
