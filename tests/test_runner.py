"""Tests for TerraformRunner - all mocked, no real Terraform needed."""

import subprocess
import sys
import time
from unittest.mock import MagicMock, patch

import pytest

from terracmd.core.terraform_runner import CommandResult, TerraformRunner
from terracmd.errors import ExternalToolFailed, ValidationFailed
from terracmd.security.secure_memory import OutputRedactor, SecureString


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tf_dir(tmp_path):
    return str(tmp_path)


@pytest.fixture
def runner(tf_dir):
    return TerraformRunner(working_dir=tf_dir)


def _ok(command):
    return CommandResult(0, "", "", True, command)


# ---------------------------------------------------------------------------
# Command construction tests
# ---------------------------------------------------------------------------

class TestBuildBaseCommand:
    def test_build_base_command(self, runner, tf_dir):
        cmd = runner._build_base_command("init")
        assert cmd == ["terraform", f"-chdir={tf_dir}", "init"]

    def test_custom_binary(self, tf_dir):
        runner = TerraformRunner(working_dir=tf_dir, terraform_binary="/opt/tf/terraform")
        assert runner._build_base_command("show")[0] == "/opt/tf/terraform"


class TestInitCommand:
    def test_init_command_structure(self, runner, tf_dir):
        with patch.object(runner, "_execute", return_value=_ok("init")) as mock_exec:
            runner.init()
            cmd = mock_exec.call_args[0][0]
            assert cmd[0] == "terraform"
            assert f"-chdir={tf_dir}" in cmd
            assert "init" in cmd
            assert "-input=false" in cmd
            assert "-no-color" in cmd


class TestImportCommand:
    def test_import_command_structure(self, runner):
        with patch.object(runner, "_execute", return_value=_ok("import")) as mock_exec:
            runner.import_resource("azurerm_resource_group.rg", "/subscriptions/x/resourceGroups/rg")
            cmd = mock_exec.call_args[0][0]
            assert cmd[2] == "import"
            assert "-input=false" in cmd
            # Address then id, last on the command line
            assert cmd[-2:] == ["azurerm_resource_group.rg", "/subscriptions/x/resourceGroups/rg"]

    def test_import_rejects_null_bytes(self, runner):
        with patch.object(runner, "_execute", return_value=_ok("import")):
            with pytest.raises(ValidationFailed):
                runner.import_resource("azurerm_subnet.s", "bad\x00id")


class TestShowCommand:
    def test_show_command_structure(self, runner):
        with patch.object(runner, "_execute", return_value=_ok("show")) as mock_exec:
            runner.show()
            cmd = mock_exec.call_args[0][0]
            assert cmd[2:] == ["show", "-no-color"]

    def test_show_passes_callback(self, runner):
        callback = MagicMock()
        with patch.object(runner, "_execute", return_value=_ok("show")) as mock_exec:
            runner.show(output_callback=callback)
            assert mock_exec.call_args[0][2] is callback


# ---------------------------------------------------------------------------
# Execution tests (mocked subprocess)
# ---------------------------------------------------------------------------

def _make_mock_popen(stdout_lines, stderr_lines=None, returncode=0):
    """Create a mock Popen that yields the given lines."""
    mock_proc = MagicMock()
    mock_proc.stdout = iter([line + "\n" for line in stdout_lines])
    mock_proc.stderr = iter([line + "\n" for line in (stderr_lines or [])])
    mock_proc.returncode = returncode
    mock_proc.wait = MagicMock(return_value=returncode)
    mock_proc.terminate = MagicMock()
    return mock_proc


class TestExecute:
    def test_execute_captures_output(self, runner):
        mock_proc = _make_mock_popen(["line1", "line2"])
        with patch("subprocess.Popen", return_value=mock_proc):
            result = runner._execute(["terraform", "show"], "show")
        assert result.success is True
        assert result.exit_code == 0
        assert result.stdout == "line1\nline2"
        assert result.command == "show"

    def test_execute_streams_output(self, runner):
        mock_proc = _make_mock_popen(["alpha", "beta"])
        callback_lines = []
        with patch("subprocess.Popen", return_value=mock_proc):
            runner._execute(["terraform", "show"], "show", output_callback=callback_lines.append)
        assert callback_lines == ["alpha", "beta"]

    def test_execute_uses_no_shell(self, runner):
        mock_proc = _make_mock_popen([])
        with patch("subprocess.Popen", return_value=mock_proc) as mock_popen:
            runner._execute(["terraform", "init"], "init")
        assert mock_popen.call_args.kwargs["shell"] is False

    def test_execute_redacts_sensitive(self, runner):
        runner.set_redactor(OutputRedactor([SecureString("SUPERSECRET")]))
        mock_proc = _make_mock_popen(["key is SUPERSECRET here"])
        with patch("subprocess.Popen", return_value=mock_proc):
            result = runner._execute(["terraform", "show"], "show")
        assert "SUPERSECRET" not in result.stdout
        assert "[REDACTED]" in result.stdout

    def test_execute_failure_exit_code(self, runner):
        mock_proc = _make_mock_popen([], stderr_lines=["Error: resource not found"], returncode=1)
        with patch("subprocess.Popen", return_value=mock_proc):
            result = runner._execute(["terraform", "import"], "import")
        assert result.success is False
        assert result.exit_code == 1
        assert "resource not found" in result.stderr

    def test_execute_timeout(self, runner):
        mock_proc = MagicMock()
        mock_proc.stdout = iter([])
        mock_proc.stderr = iter([])
        # First wait times out, the wait after terminate() reaps the process
        mock_proc.wait = MagicMock(side_effect=[subprocess.TimeoutExpired(cmd="tf", timeout=300), -15])
        mock_proc.terminate = MagicMock()
        with patch("subprocess.Popen", return_value=mock_proc):
            result = runner._execute(["terraform", "init"], "init")
        assert result.success is False
        assert result.exit_code == -1
        assert "timed out" in result.stderr.lower()
        mock_proc.terminate.assert_called_once()
        assert mock_proc.wait.call_count == 2

    def test_execute_kills_process_ignoring_terminate(self, runner):
        mock_proc = MagicMock()
        mock_proc.stdout = iter([])
        mock_proc.stderr = iter([])
        mock_proc.wait = MagicMock(side_effect=[
            subprocess.TimeoutExpired(cmd="tf", timeout=300),
            subprocess.TimeoutExpired(cmd="tf", timeout=5),
            -9,
        ])
        with patch("subprocess.Popen", return_value=mock_proc):
            result = runner._execute(["terraform", "import"], "import")
        assert result.exit_code == -1
        mock_proc.kill.assert_called_once()

    def test_execute_timeout_without_output(self, tf_dir):
        """A silent, hanging command is stopped by the timeout."""
        runner = TerraformRunner(working_dir=tf_dir, timeout=1)
        started = time.monotonic()
        result = runner._execute([sys.executable, "-c", "import time; time.sleep(60)"], "import")
        assert result.success is False
        assert result.exit_code == -1
        assert "timed out" in result.stderr.lower()
        assert time.monotonic() - started < 30

    def test_execute_missing_binary(self, runner):
        with patch("subprocess.Popen", side_effect=FileNotFoundError("terraform")):
            result = runner._execute(["terraform", "init"], "init")
        assert result.success is False
        assert result.exit_code == -1


class TestCommandResultCheck:
    def test_check_success_returns_self(self):
        result = _ok("init")
        assert result.check() is result

    def test_check_failure_raises(self):
        result = CommandResult(1, "", "Error: provider missing", False, "init")
        with pytest.raises(ExternalToolFailed) as exc_info:
            result.check()
        assert exc_info.value.command == "init"
        assert exc_info.value.exit_code == 1
        assert "provider missing" in str(exc_info.value)


class TestValidation:
    def test_rejects_missing_working_dir(self):
        with pytest.raises(ValidationFailed):
            TerraformRunner(working_dir="/nonexistent/path/xyz")
