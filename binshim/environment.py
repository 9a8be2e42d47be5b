"""
Invocation context.

Everything the pipeline would otherwise read from process-global state
(working directory, environment variables, host platform) is captured
once at entry into an InstallContext and passed down explicitly.
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .common import env_flag_present, vlog
from .config import find_manifest

SKIP_VERIFY_ENV = "BINSHIM_SKIP_VERIFY"
GLOBAL_INSTALL_ENV = "npm_config_global"


@dataclass(frozen=True)
class InstallContext:
    """
    Per-invocation settings.

    Attributes:
        cwd: Directory the command runs in
        manifest_path: Manifest file to load
        skip_verify: Ignore checksum mismatches
        global_install: Use the global install suffix
        system: Host operating system identifier
        machine: Host architecture identifier
        staging_dir: Extraction directory (None uses a temporary directory)
        package_manager: Host package manager used to resolve the bin directory
        bin_dir: Explicit install directory (skips package manager lookup)
    """
    cwd: Path
    manifest_path: Path
    skip_verify: bool = False
    global_install: bool = False
    system: str = ""
    machine: str = ""
    staging_dir: Path | None = None
    package_manager: str = "npm"
    bin_dir: Path | None = None

    def __str__(self) -> str:
        scope = "global" if self.global_install else "local"
        return f"{self.system}/{self.machine} ({scope}, manifest: {self.manifest_path})"


def detect_context(
    cwd: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
    manifest_path: str | os.PathLike[str] | None = None,
    global_install: bool | None = None,
    package_manager: str = "npm",
    bin_dir: str | os.PathLike[str] | None = None,
    staging_dir: str | os.PathLike[str] | None = None,
    verbose: bool = False,
) -> InstallContext:
    """
    Build the InstallContext for this process.

    Args:
        cwd: Working directory (defaults to os.getcwd())
        environ: Environment mapping (defaults to os.environ)
        manifest_path: Explicit manifest path (defaults to one found in cwd)
        global_install: Explicit global flag (defaults to npm_config_global presence)
        package_manager: Host package manager name
        bin_dir: Explicit install directory
        staging_dir: Explicit extraction directory
        verbose: Enable verbose logging

    Returns:
        InstallContext
    """
    env = os.environ if environ is None else environ
    base = Path(cwd) if cwd is not None else Path(os.getcwd())

    if manifest_path is not None:
        manifest = Path(manifest_path)
        if not manifest.is_absolute():
            manifest = base / manifest
    else:
        manifest = find_manifest(base)

    if global_install is None:
        global_install = env_flag_present(GLOBAL_INSTALL_ENV, env)

    skip_verify = env_flag_present(SKIP_VERIFY_ENV, env)
    if skip_verify:
        vlog(f"{SKIP_VERIFY_ENV} is set, checksum mismatches will be ignored", verbose)

    context = InstallContext(
        cwd=base,
        manifest_path=manifest,
        skip_verify=skip_verify,
        global_install=global_install,
        system=platform.system(),
        machine=platform.machine(),
        staging_dir=Path(staging_dir) if staging_dir is not None else None,
        package_manager=package_manager,
        bin_dir=Path(bin_dir) if bin_dir is not None else None,
    )
    vlog(f"Install context: {context}", verbose)
    return context
