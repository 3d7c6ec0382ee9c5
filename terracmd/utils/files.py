"""
Best-effort filesystem helpers.
"""

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def remove_if_exists(path: Union[str, Path]) -> bool:
    """
    Delete a file, ignoring only its absence.

    Any other OSError (permissions, path is a directory) propagates.

    Returns:
        True if a file was removed
    """
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    logger.debug(f"Removed {path}")
    return True
