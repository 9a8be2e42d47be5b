"""
Common utilities shared across binshim modules.
"""

from __future__ import annotations

import os
import sys
from typing import Mapping


def env_flag_present(name: str, environ: Mapping[str, str] | None = None) -> bool:
    """
    Check whether an environment flag is set.

    Only presence matters; the value is not inspected, so an empty string
    still counts as set.
    """
    env = os.environ if environ is None else environ
    return name in env


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("BINSHIM_DEBUG", "0") == "1":
        try:
            from .logging_config import get_logger
            logger = get_logger()
            logger.info(msg)
        except Exception:
            # Fallback to stderr if logging fails
            try:
                print(f"[binshim] {msg}", file=sys.stderr)
            except Exception:
                pass
