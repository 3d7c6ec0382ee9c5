"""
Handler for .tfvars file import.

Turns a Terraform variable definitions file into WorkspaceVariables so a
local tfvars file can be pushed to a remote workspace in one go.
"""

import json
import logging
import re
from typing import Any, Iterable, List, Optional

from .variable import VariableCategory, WorkspaceVariable

logger = logging.getLogger(__name__)

_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}
_ESCAPE_PATTERN = re.compile(r'\\([\\"nrt])')


class TfvarsHandler:
    """Parse .tfvars files and convert them to workspace variables."""

    @staticmethod
    def parse_tfvars(file_path: str) -> dict[str, Any]:
        """
        Parse a .tfvars file and return variable name-value pairs.

        Uses hcl2 for parsing. Double-wrapped lists are unwrapped and
        string literals lose any quotes and escapes hcl2 kept, at any depth.

        Args:
            file_path: Path to the .tfvars file.

        Returns:
            Dict of variable name to value.

        Raises:
            FileNotFoundError: If file does not exist.
            ValueError: If file cannot be parsed.
        """
        import hcl2

        try:
            with open(file_path, "r") as f:
                parsed = hcl2.load(f)
        except FileNotFoundError:
            raise
        except Exception as e:
            raise ValueError(f"Failed to parse tfvars file: {e}") from e

        result = {}
        for key, value in parsed.items():
            result[key] = TfvarsHandler._unwrap(value)
        return result

    @staticmethod
    def to_variables(
        values: dict[str, Any],
        category: VariableCategory = VariableCategory.TERRAFORM,
        sensitive_names: Optional[Iterable[str]] = None,
    ) -> List[WorkspaceVariable]:
        """
        Convert parsed tfvars values into WorkspaceVariables.

        Scalars become plain string values. Lists and maps are rendered
        as HCL literals and flagged hcl=True.

        Args:
            values: Dict of variable name to value.
            category: Category applied to every variable.
            sensitive_names: Names to mark sensitive.
        """
        sensitive = set(sensitive_names or ())

        variables = []
        for name, value in sorted(values.items()):
            is_complex = isinstance(value, (list, dict))
            variables.append(WorkspaceVariable(
                key=name,
                value=TfvarsHandler._format_value(value),
                category=category,
                hcl=is_complex,
                sensitive=name in sensitive,
            ))

        logger.debug(f"Converted {len(variables)} tfvars entries")
        return variables

    @staticmethod
    def load(
        file_path: str,
        category: VariableCategory = VariableCategory.TERRAFORM,
        sensitive_names: Optional[Iterable[str]] = None,
    ) -> List[WorkspaceVariable]:
        """Parse a .tfvars file straight into WorkspaceVariables."""
        return TfvarsHandler.to_variables(
            TfvarsHandler.parse_tfvars(file_path), category, sensitive_names
        )

    @staticmethod
    def _unwrap(value: Any) -> Any:
        """Normalize a top-level value as returned by hcl2."""
        if isinstance(value, list) and len(value) == 1 and isinstance(value[0], list):
            value = value[0]
        return TfvarsHandler._normalize(value)

    @staticmethod
    def _normalize(value: Any) -> Any:
        """Turn hcl2 string literals, at any depth, into plain strings."""
        if isinstance(value, str):
            return TfvarsHandler._unquote(value)
        elif isinstance(value, list):
            return [TfvarsHandler._normalize(v) for v in value]
        elif isinstance(value, dict):
            return {
                TfvarsHandler._unquote(str(k)): TfvarsHandler._normalize(v)
                for k, v in value.items()
            }
        return value

    @staticmethod
    def _format_value(value: Any) -> str:
        """Format a parsed value as the string the API stores."""
        if isinstance(value, bool):
            return "true" if value else "false"
        elif isinstance(value, (int, float)):
            return str(value)
        elif isinstance(value, str):
            return value
        elif isinstance(value, (list, dict)):
            return TfvarsHandler._hcl_literal(value)
        else:
            return json.dumps(value)

    @staticmethod
    def _hcl_literal(value: Any) -> str:
        """Render a plain Python value as an HCL expression."""
        if isinstance(value, bool):
            return "true" if value else "false"
        elif isinstance(value, (int, float)):
            return str(value)
        elif isinstance(value, str):
            escaped = value.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        elif isinstance(value, list):
            return "[" + ", ".join(TfvarsHandler._hcl_literal(v) for v in value) + "]"
        elif isinstance(value, dict):
            items = ", ".join(
                f"{TfvarsHandler._hcl_literal(str(k))} = {TfvarsHandler._hcl_literal(v)}"
                for k, v in value.items()
            )
            return "{" + items + "}"
        return json.dumps(value)

    @staticmethod
    def _unquote(value: str) -> str:
        # Newer python-hcl2 releases keep the quotes and escapes of string literals
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            return _ESCAPE_PATTERN.sub(
                lambda m: _ESCAPES[m.group(1)], value[1:-1]
            )
        return value
