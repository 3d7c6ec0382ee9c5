"""
Terraform command execution with real-time output streaming.

This module runs the terraform sub-commands the state importer needs
(init, import, show) with output redaction, streaming callbacks and a
whole-run timeout.
"""

import logging
import os
import subprocess
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..errors import ExternalToolFailed, ValidationFailed
from ..security.sanitizer import InputSanitizer
from ..security.secure_memory import OutputRedactor
from ..utils import subprocess_creation_flags

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of a Terraform command execution."""
    exit_code: int
    stdout: str
    stderr: str
    success: bool
    command: str  # operation name (e.g. "init", "import")

    def check(self) -> "CommandResult":
        """Return self, or raise ExternalToolFailed if the command failed."""
        if not self.success:
            raise ExternalToolFailed(self.command, self.exit_code, self.stderr)
        return self


class TerraformRunner:
    """
    Executes Terraform commands with real-time output streaming.

    - shell=False always (no shell interpretation)
    - -input=false prevents stdin prompts
    - Output redaction for sensitive values
    - Process timeout (default 300s)
    - All command args validated via is_safe_command_arg()
    """

    def __init__(
        self,
        working_dir: str,
        terraform_binary: str = "terraform",
        timeout: int = 300,
    ):
        if not working_dir or not os.path.isdir(working_dir):
            raise ValidationFailed(f"Working directory does not exist: {working_dir}")
        self.working_dir = os.path.abspath(working_dir)
        self.terraform_binary = terraform_binary
        self._redactor = OutputRedactor()
        self._timeout = timeout

    def set_redactor(self, redactor: OutputRedactor):
        """Configure output redaction for sensitive values."""
        self._redactor = redactor

    def init(
        self,
        output_callback: Optional[Callable[[str], None]] = None,
    ) -> CommandResult:
        """Run terraform init."""
        cmd = self._build_base_command("init")
        cmd.extend(["-input=false", "-no-color"])
        return self._execute(cmd, "init", output_callback)

    def import_resource(
        self,
        address: str,
        resource_id: str,
        output_callback: Optional[Callable[[str], None]] = None,
    ) -> CommandResult:
        """Run terraform import, binding address to the remote resource_id."""
        cmd = self._build_base_command("import")
        cmd.extend(["-input=false", "-no-color"])
        for arg in (address, resource_id):
            if not InputSanitizer.is_safe_command_arg(arg):
                raise ValidationFailed(f"Unsafe import argument: {arg!r}")
        cmd.extend([address, resource_id])
        return self._execute(cmd, "import", output_callback)

    def show(
        self,
        output_callback: Optional[Callable[[str], None]] = None,
    ) -> CommandResult:
        """Run terraform show -no-color."""
        cmd = self._build_base_command("show")
        cmd.append("-no-color")
        return self._execute(cmd, "show", output_callback)

    def _build_base_command(self, operation: str) -> List[str]:
        """Construct the base command list [binary, -chdir=path, operation]."""
        chdir_arg = f"-chdir={self.working_dir}"
        if not InputSanitizer.is_safe_command_arg(chdir_arg):
            raise ValidationFailed("Unsafe working directory for command argument")
        return [self.terraform_binary, chdir_arg, operation]

    def _stop(self, process: subprocess.Popen):
        """Terminate a process and reap it, killing it if it lingers."""
        try:
            process.terminate()
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        except OSError:
            # Already exited
            pass

    def _execute(
        self,
        cmd: List[str],
        operation: str,
        output_callback: Optional[Callable[[str], None]] = None,
    ) -> CommandResult:
        """
        Execute a command with real-time output streaming.

        Uses shell=False, streams stdout/stderr line-by-line, applies
        output redaction, and enforces a timeout over the whole run, so a
        command that hangs without printing anything is stopped too.
        """
        stdout_lines: List[str] = []
        stderr_lines: List[str] = []
        timed_out = threading.Event()

        logger.debug(f"Running terraform {operation} in {self.working_dir}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                shell=False,
                creationflags=subprocess_creation_flags(),
            )
        except OSError as e:
            logger.error(f"Could not start {self.terraform_binary}: {e}")
            return CommandResult(
                exit_code=-1,
                stdout="",
                stderr=str(e),
                success=False,
                command=operation,
            )

        def _on_timeout():
            timed_out.set()
            self._stop(process)

        def _read_stderr():
            assert process.stderr is not None
            for line in process.stderr:
                stderr_lines.append(self._redactor.redact(line.rstrip("\n")))

        watchdog = threading.Timer(self._timeout, _on_timeout)
        watchdog.daemon = True
        watchdog.start()
        try:
            stderr_thread = threading.Thread(target=_read_stderr, daemon=True)
            stderr_thread.start()

            assert process.stdout is not None
            for line in process.stdout:
                redacted = self._redactor.redact(line.rstrip("\n"))
                stdout_lines.append(redacted)
                if output_callback:
                    output_callback(redacted)

            stderr_thread.join(timeout=self._timeout)
            process.wait(timeout=self._timeout)
            exit_code = process.returncode
        except subprocess.TimeoutExpired:
            timed_out.set()
            self._stop(process)
        finally:
            watchdog.cancel()

        if timed_out.is_set():
            logger.error(f"terraform {operation} timed out after {self._timeout}s")
            return CommandResult(
                exit_code=-1,
                stdout="\n".join(stdout_lines),
                stderr="Command timed out",
                success=False,
                command=operation,
            )

        if exit_code != 0:
            logger.debug(f"terraform {operation} exited with {exit_code}")

        return CommandResult(
            exit_code=exit_code,
            stdout="\n".join(stdout_lines),
            stderr="\n".join(stderr_lines),
            success=exit_code == 0,
            command=operation,
        )
