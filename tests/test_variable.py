"""Tests for WorkspaceVariable and its decoders."""

import dataclasses
import json

import pytest

from terracmd.core.variable import (
    VariableCategory,
    WorkspaceVariable,
    load_variables,
    parse_bool,
    variables_from_records,
)
from terracmd.errors import ValidationFailed


class TestWorkspaceVariable:
    @pytest.mark.parametrize("category", ["terraform", "env"])
    @pytest.mark.parametrize("hcl,sensitive", [(False, False), (True, False), (False, True), (True, True)])
    def test_fields_read_back_unchanged(self, category, hcl, sensitive):
        variable = WorkspaceVariable(
            key="region",
            value="westeurope",
            description="Deployment region",
            category=category,
            hcl=hcl,
            sensitive=sensitive,
        )
        assert variable.key == "region"
        assert variable.value == "westeurope"
        assert variable.description == "Deployment region"
        assert variable.category == category
        assert variable.hcl is hcl
        assert variable.sensitive is sensitive

    def test_defaults(self):
        variable = WorkspaceVariable(key="region")
        assert variable.value == ""
        assert variable.description == ""
        assert variable.category is VariableCategory.TERRAFORM
        assert variable.hcl is False
        assert variable.sensitive is False

    @pytest.mark.parametrize("category", ["Terraform", "ENV", "secret", "", None])
    def test_invalid_category_rejected(self, category):
        with pytest.raises(ValidationFailed):
            WorkspaceVariable(key="region", category=category)

    def test_empty_key_rejected(self):
        with pytest.raises(ValidationFailed):
            WorkspaceVariable(key="")

    def test_immutable(self):
        variable = WorkspaceVariable(key="region")
        with pytest.raises(dataclasses.FrozenInstanceError):
            variable.value = "other"

    def test_non_bool_flag_rejected(self):
        with pytest.raises(ValidationFailed):
            WorkspaceVariable(key="region", hcl="true")

    def test_to_attributes(self):
        variable = WorkspaceVariable(key="env_flag", value="true", hcl=True)
        assert variable.to_attributes() == {
            "key": "env_flag",
            "value": "true",
            "description": "",
            "category": "terraform",
            "hcl": True,
            "sensitive": False,
        }

    def test_repr_hides_sensitive_value(self):
        variable = WorkspaceVariable(key="password", value="hunter2", sensitive=True)
        assert "hunter2" not in repr(variable)


class TestParseBool:
    @pytest.mark.parametrize("raw,expected", [
        (True, True), (False, False), ("true", True), ("FALSE", False), ("1", True), ("0", False),
    ])
    def test_accepted(self, raw, expected):
        assert parse_bool(raw, "hcl") is expected

    @pytest.mark.parametrize("raw", ["yes", 1, None, "", "truthy"])
    def test_rejected(self, raw):
        with pytest.raises(ValidationFailed):
            parse_bool(raw, "hcl")


class TestFromRecord:
    def test_pascal_case_record(self):
        variable = WorkspaceVariable.from_record({
            "Key": "env_flag",
            "Value": "true",
            "Category": "env",
            "IsHCLVariable": "false",
            "IsSensitive": "true",
        })
        assert variable.key == "env_flag"
        assert variable.category is VariableCategory.ENV
        assert variable.hcl is False
        assert variable.sensitive is True

    def test_snake_case_record(self):
        variable = WorkspaceVariable.from_record({"key": "a", "hcl": True})
        assert variable.hcl is True

    def test_typed_value_becomes_text(self):
        variable = WorkspaceVariable.from_record({"key": "replicas", "value": 3})
        assert variable.value == "3"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationFailed):
            WorkspaceVariable.from_record({"key": "a", "sensitve": True})

    def test_missing_key_rejected(self):
        with pytest.raises(ValidationFailed):
            WorkspaceVariable.from_record({"value": "x"})

    def test_bad_flag_rejected_at_decode_time(self):
        with pytest.raises(ValidationFailed):
            WorkspaceVariable.from_record({"key": "a", "IsSensitive": "maybe"})

    def test_variables_from_records_keeps_order(self):
        variables = variables_from_records([{"key": "b"}, {"key": "a"}])
        assert [v.key for v in variables] == ["b", "a"]


class TestLoadVariables:
    def test_load_list(self, tmp_path):
        path = tmp_path / "vars.json"
        path.write_text(json.dumps([
            {"Key": "region", "Value": "westeurope"},
            {"Key": "ARM_CLIENT_ID", "Value": "abc", "Category": "env", "IsSensitive": True},
        ]))
        variables = load_variables(path)
        assert [v.key for v in variables] == ["region", "ARM_CLIENT_ID"]
        assert variables[1].sensitive is True

    def test_load_single_object(self, tmp_path):
        path = tmp_path / "var.json"
        path.write_text(json.dumps({"key": "region"}))
        assert len(load_variables(path)) == 1

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "vars.json"
        path.write_text("[{")
        with pytest.raises(ValidationFailed):
            load_variables(path)

    def test_wrong_top_level_type(self, tmp_path):
        path = tmp_path / "vars.json"
        path.write_text('"region"')
        with pytest.raises(ValidationFailed):
            load_variables(path)
