"""
Placement and removal of the installed binary.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path

from .errors import MissingBinaryError, PlaceError

logger = logging.getLogger(__name__)

EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def place(staging_dir: str | Path, binary_name: str, target_dir: str | Path) -> Path:
    """
    Move the extracted binary from staging into the install directory.

    Args:
        staging_dir: Directory the archive was extracted into
        binary_name: Platform-suffixed binary file name
        target_dir: Resolved install directory (created if missing)

    Returns:
        Path of the installed binary

    Raises:
        MissingBinaryError: If the binary is not in staging_dir
        PlaceError: If the move fails
    """
    source = Path(staging_dir) / binary_name
    if not source.is_file():
        raise MissingBinaryError(
            f"Downloaded binary does not contain the binary specified in configuration - {source}"
        )

    target = Path(target_dir)
    dest = target / binary_name
    try:
        target.mkdir(parents=True, exist_ok=True)
        try:
            os.replace(source, dest)
        except OSError:
            # Staging and target on different filesystems
            shutil.move(str(source), str(dest))
        if os.name != "nt":
            dest.chmod(dest.stat().st_mode | EXECUTABLE_BITS)
    except OSError as e:
        raise PlaceError(f"Failed to move {binary_name} into {target}: {e}") from e

    logger.debug(f"Placed {binary_name} at {dest}")
    return dest


def remove(target_dir: str | Path, binary_name: str) -> bool:
    """
    Delete an installed binary.

    A missing file is not an error, so repeated calls succeed.

    Returns:
        True if a file was removed, False otherwise
    """
    dest = Path(target_dir) / binary_name
    try:
        dest.unlink()
    except FileNotFoundError:
        logger.debug(f"Nothing to remove at {dest}")
        return False
    except OSError as e:
        # Best effort: uninstall still succeeds
        logger.warning(f"Could not remove {dest}: {e}")
        return False
    logger.debug(f"Removed {dest}")
    return True
