"""Tests for TfvarsHandler - parsing .tfvars and converting to variables."""

import pytest

from terracmd.core.tfvars_handler import TfvarsHandler
from terracmd.core.variable import VariableCategory


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestTfvarsHandlerParse:
    """Tests for TfvarsHandler.parse_tfvars()."""

    def test_parse_simple_key_value(self, tmp_path):
        tfvars = tmp_path / "test.tfvars"
        tfvars.write_text('region = "westeurope"\nproject = "myapp"\n')
        result = TfvarsHandler.parse_tfvars(str(tfvars))
        assert result["region"] == "westeurope"
        assert result["project"] == "myapp"

    def test_parse_complex_types(self, tmp_path):
        tfvars = tmp_path / "test.tfvars"
        tfvars.write_text(
            'zones = ["1", "2", "3"]\n'
            'enabled = true\n'
            'count = 42\n'
        )
        result = TfvarsHandler.parse_tfvars(str(tfvars))
        assert result["enabled"] is True
        assert result["count"] == 42
        assert isinstance(result["zones"], list)
        assert len(result["zones"]) == 3

    def test_parse_empty_file(self, tmp_path):
        tfvars = tmp_path / "empty.tfvars"
        tfvars.write_text("")
        assert TfvarsHandler.parse_tfvars(str(tfvars)) == {}

    def test_parse_missing_file(self):
        with pytest.raises(FileNotFoundError):
            TfvarsHandler.parse_tfvars("/nonexistent/path/test.tfvars")

    def test_parse_invalid_file(self, tmp_path):
        tfvars = tmp_path / "bad.tfvars"
        tfvars.write_text('region = = "x"\n{{{')
        with pytest.raises(ValueError):
            TfvarsHandler.parse_tfvars(str(tfvars))


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

class TestTfvarsHandlerToVariables:
    """Tests for TfvarsHandler.to_variables()."""

    def test_scalars_are_plain_values(self):
        variables = TfvarsHandler.to_variables({"region": "westeurope", "replicas": 3, "debug": False})
        by_key = {v.key: v for v in variables}

        assert by_key["region"].value == "westeurope"
        assert by_key["replicas"].value == "3"
        assert by_key["debug"].value == "false"
        assert not any(v.hcl for v in variables)

    def test_lists_and_maps_are_hcl(self):
        variables = TfvarsHandler.to_variables({
            "zones": ["1", "2"],
            "tags": {"env": "dev", "owner": "ops"},
        })
        by_key = {v.key: v for v in variables}

        assert by_key["zones"].hcl is True
        assert by_key["zones"].value == '["1", "2"]'
        assert by_key["tags"].hcl is True
        assert by_key["tags"].value == '{"env" = "dev", "owner" = "ops"}'

    def test_sensitive_names(self):
        variables = TfvarsHandler.to_variables(
            {"password": "hunter2", "region": "westeurope"},
            sensitive_names=["password"],
        )
        by_key = {v.key: v for v in variables}
        assert by_key["password"].sensitive is True
        assert by_key["region"].sensitive is False

    def test_category_applied(self):
        variables = TfvarsHandler.to_variables({"TF_LOG": "debug"}, category=VariableCategory.ENV)
        assert variables[0].category is VariableCategory.ENV

    def test_sorted_by_key(self):
        variables = TfvarsHandler.to_variables({"b": "1", "a": "2"})
        assert [v.key for v in variables] == ["a", "b"]

    def test_escapes_quotes_in_nested_strings(self):
        variables = TfvarsHandler.to_variables({"names": ['say "hi"']})
        assert variables[0].value == '["say \\"hi\\""]'

    def test_load_end_to_end(self, tmp_path):
        tfvars = tmp_path / "prod.tfvars"
        tfvars.write_text('region = "westeurope"\nreplicas = 2\n')
        variables = TfvarsHandler.load(str(tfvars))
        assert {(v.key, v.value) for v in variables} == {("region", "westeurope"), ("replicas", "2")}

    def test_load_unescapes_string_literals(self, tmp_path):
        tfvars = tmp_path / "quotes.tfvars"
        tfvars.write_text(
            'msg = "say \\"hi\\""\n'
            'lst = ["a\\"b"]\n'
            'path = "C:\\\\tf"\n'
        )
        by_key = {v.key: v for v in TfvarsHandler.load(str(tfvars))}

        assert by_key["msg"].value == 'say "hi"'
        assert by_key["path"].value == "C:\\tf"
        # Escaped exactly once in the HCL literal
        assert by_key["lst"].value == '["a\\"b"]'

    def test_parse_returns_plain_nested_strings(self, tmp_path):
        tfvars = tmp_path / "nested.tfvars"
        tfvars.write_text('tags = {env = "dev", note = "a \\"b\\""}\n')
        result = TfvarsHandler.parse_tfvars(str(tfvars))
        assert result["tags"] == {"env": "dev", "note": 'a "b"'}
