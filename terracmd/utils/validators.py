"""
Validation utilities for terracmd.
"""

import shutil
import subprocess
from typing import Optional, Tuple


def validate_terraform_installed(terraform_binary: str = "terraform") -> Tuple[bool, Optional[str]]:
    """
    Check if Terraform is installed and accessible.

    Args:
        terraform_binary: Path or name of terraform binary

    Returns:
        Tuple of (is_installed, version_string)
        If not installed, version_string is None
    """
    if not shutil.which(terraform_binary):
        return False, None

    try:
        from . import subprocess_creation_flags
        result = subprocess.run(
            [terraform_binary, "version"],
            capture_output=True,
            text=True,
            timeout=5,
            creationflags=subprocess_creation_flags(),
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        return False, None

    if result.returncode != 0:
        return False, None

    # First line carries the version, e.g. "Terraform v1.9.5"
    return True, result.stdout.split('\n')[0]
