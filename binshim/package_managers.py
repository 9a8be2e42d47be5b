"""
Host package manager registry and install directory resolution.

The binary is placed where the host package manager looks for package
executables. That directory is derived from the manager's module root
(``npm root``) plus a suffix that depends on local vs global install:

    local:  <root>/../bin
    global: <root>/<package name>/bin
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from .common import vlog
from .errors import PathResolutionError


@dataclass(frozen=True)
class PackageManager:
    """
    Package manager definition.

    Attributes:
        name: Package manager identifier (e.g., "npm", "pnpm")
        display_name: Human-readable name
        root_command: Command printing the module root directory
    """
    name: str
    display_name: str
    root_command: tuple[str, ...]


PACKAGE_MANAGERS = (
    PackageManager(
        name="npm",
        display_name="npm",
        root_command=("npm", "root"),
    ),
    PackageManager(
        name="pnpm",
        display_name="pnpm",
        root_command=("pnpm", "root"),
    ),
)

DEFAULT_PACKAGE_MANAGER = "npm"

_PM_BY_NAME = {pm.name: pm for pm in PACKAGE_MANAGERS}


def get_package_manager(name: str) -> PackageManager | None:
    """
    Get package manager by name.

    Returns:
        PackageManager object, or None if not found
    """
    return _PM_BY_NAME.get(name)


class PathResolver(Protocol):
    """Anything that can tell where the binary should be installed."""

    def resolve_install_dir(self) -> Path:
        ...


@dataclass(frozen=True)
class StaticPathResolver:
    """Resolver returning a fixed directory (``--bin-dir`` and tests)."""
    directory: Path

    def resolve_install_dir(self) -> Path:
        return Path(self.directory)


Runner = Callable[..., subprocess.CompletedProcess]


class PackageManagerPathResolver:
    """
    Resolve the install directory by querying a host package manager.

    Args:
        package_manager: Package manager to query
        package_name: Package name used for the global install suffix
        global_install: Whether this is a global (-g) install
        cwd: Directory to run the root command in
        runner: subprocess.run compatible callable
        verbose: Enable verbose logging
    """

    def __init__(
        self,
        package_manager: PackageManager,
        package_name: str = "",
        global_install: bool = False,
        cwd: str | Path | None = None,
        runner: Runner = subprocess.run,
        verbose: bool = False,
    ):
        self.package_manager = package_manager
        self.package_name = package_name
        self.global_install = global_install
        self.cwd = cwd
        self.runner = runner
        self.verbose = verbose

    def module_root(self) -> str:
        """Run the root command and return its trimmed output."""
        command = self.package_manager.root_command
        # Resolves npm.cmd on Windows
        executable = shutil.which(command[0]) or command[0]
        vlog(f"Executing: {' '.join(command)}", self.verbose)
        try:
            result = self.runner(
                [executable, *command[1:]],
                capture_output=True,
                text=True,
                cwd=self.cwd,
                check=False,
            )
        except FileNotFoundError as e:
            raise PathResolutionError(
                f"couldn't determine executable path: {command[0]} not found"
            ) from e
        except OSError as e:
            raise PathResolutionError(f"couldn't determine executable path: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr or "").strip()[:200]
            raise PathResolutionError(
                f"couldn't determine executable path: {' '.join(command)} "
                f"exited with code {result.returncode}" + (f": {detail}" if detail else "")
            )

        root = (result.stdout or "").strip()
        if not root:
            raise PathResolutionError("couldn't determine executable path")
        return root

    def resolve_install_dir(self) -> Path:
        root = Path(self.module_root())
        if self.global_install:
            if not self.package_name:
                raise PathResolutionError(
                    "couldn't determine executable path: global install needs the manifest name"
                )
            directory = root / self.package_name / "bin"
        else:
            directory = root / ".." / "bin"
        vlog(f"Resolved install directory: {directory}", self.verbose)
        return directory
