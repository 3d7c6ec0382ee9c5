"""
Workspace variable value object.

A WorkspaceVariable is built in memory from caller input (or decoded
from a JSON record) and only ever leaves the process serialized into a
create/update request body.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

from ..errors import ValidationFailed
from ..security.sanitizer import InputSanitizer

logger = logging.getLogger(__name__)


class VariableCategory(str, Enum):
    """Where the remote run exposes a variable."""
    TERRAFORM = "terraform"
    ENV = "env"

    @classmethod
    def parse(cls, value: Union[str, "VariableCategory"]) -> "VariableCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(c.value for c in cls)
            raise ValidationFailed(
                f"Invalid variable category {value!r}: expected one of {allowed}"
            ) from None


# Record field names accepted by from_record, mapped to dataclass fields
_RECORD_ALIASES = {
    "key": "key",
    "Key": "key",
    "value": "value",
    "Value": "value",
    "description": "description",
    "Description": "description",
    "category": "category",
    "Category": "category",
    "hcl": "hcl",
    "is_hcl": "hcl",
    "IsHCLVariable": "hcl",
    "sensitive": "sensitive",
    "is_sensitive": "sensitive",
    "IsSensitive": "sensitive",
}


def parse_bool(value: Any, field_name: str) -> bool:
    """
    Decode a boolean from a JSON record.

    Accepts real booleans and the strings true/false/1/0
    (case-insensitive). Anything else raises ValidationFailed.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0"):
        return False
    raise ValidationFailed(f"Invalid boolean for {field_name}: {value!r}")


@dataclass(frozen=True)
class WorkspaceVariable:
    """
    One key/value pair stored against a workspace.

    Attributes:
        key: Variable name, unique within a workspace (enforced remotely)
        value: Variable value; parsed as HCL remotely when hcl is True
        description: Free-form description
        category: terraform or env
        hcl: Value is a structured HCL literal rather than a plain string
        sensitive: The server never returns the value in plaintext
    """
    key: str
    value: str = ""
    description: str = ""
    category: VariableCategory = VariableCategory.TERRAFORM
    hcl: bool = False
    sensitive: bool = False

    def __post_init__(self):
        category = VariableCategory.parse(self.category)
        object.__setattr__(self, "category", category)
        InputSanitizer.sanitize_variable_key(self.key)
        if not isinstance(self.value, str):
            raise ValidationFailed(f"Value of {self.key} must be a string")
        if not isinstance(self.description, str):
            raise ValidationFailed(f"Description of {self.key} must be a string")
        if not isinstance(self.hcl, bool) or not isinstance(self.sensitive, bool):
            raise ValidationFailed(f"hcl and sensitive flags of {self.key} must be booleans")

    def __repr__(self) -> str:
        value = "[REDACTED]" if self.sensitive else repr(self.value)
        return (
            f"WorkspaceVariable(key={self.key!r}, value={value}, "
            f"category={self.category.value!r}, hcl={self.hcl}, "
            f"sensitive={self.sensitive})"
        )

    def to_attributes(self) -> Dict[str, Any]:
        """Wire attributes for a vars create/update body."""
        return {
            "key": self.key,
            "value": self.value,
            "description": self.description,
            "category": self.category.value,
            "hcl": self.hcl,
            "sensitive": self.sensitive,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "WorkspaceVariable":
        """
        Decode one parsed JSON record.

        Both snake_case names and the PascalCase names (Key, Value,
        IsHCLVariable, IsSensitive, ...) are accepted. Unknown fields are
        rejected so typos don't silently drop a flag.

        Raises:
            ValidationFailed: On unknown fields, a bad category, or a
                flag that is not a boolean
        """
        if not isinstance(record, Mapping):
            raise ValidationFailed(f"Variable record must be an object, got {type(record).__name__}")

        fields: Dict[str, Any] = {}
        for name, raw in record.items():
            target = _RECORD_ALIASES.get(name)
            if target is None:
                raise ValidationFailed(f"Unknown variable field: {name}")
            fields[target] = raw

        if "key" not in fields:
            raise ValidationFailed("Variable record is missing 'key'")

        for flag in ("hcl", "sensitive"):
            if flag in fields:
                fields[flag] = parse_bool(fields[flag], flag)

        for text in ("value", "description"):
            if fields.get(text) is None:
                fields.pop(text, None)
            elif not isinstance(fields[text], str):
                # Numbers and booleans in JSON arrive typed; the API wants text
                fields[text] = json.dumps(fields[text])

        return cls(**fields)


def variables_from_records(records: Iterable[Mapping[str, Any]]) -> List[WorkspaceVariable]:
    """Decode every record into a WorkspaceVariable, in order."""
    return [WorkspaceVariable.from_record(record) for record in records]


def load_variables(path: Union[str, Path]) -> List[WorkspaceVariable]:
    """
    Read variables from a JSON file.

    The file holds either a list of records or a single record.

    Raises:
        ValidationFailed: If the file is not valid JSON or a record is invalid
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationFailed(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, Mapping):
        data = [data]
    elif not isinstance(data, list):
        raise ValidationFailed(f"{path} must contain a list of variable records")

    variables = variables_from_records(data)
    logger.debug(f"Loaded {len(variables)} variables from {path}")
    return variables
