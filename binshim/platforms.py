"""
Platform resolution for OS/architecture specific downloads.

Maps host identifiers (as reported by Python's ``platform`` module or by
Node-style ``process.platform``/``process.arch`` names) to the vendor
tokens used in release archive names.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass

from .errors import UnsupportedPlatformError


# Host architecture -> vendor arch token
ARCH_MAPPING = {
    "x64": "amd64",
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

# Host operating system -> vendor platform token
PLATFORM_MAPPING = {
    "darwin": "darwin",
    "linux": "linux",
    "win32": "windows",
    "windows": "windows",
    "freebsd": "freebsd",
}


@dataclass(frozen=True)
class PlatformTarget:
    """
    Resolved vendor tokens for the running host.

    Attributes:
        platform: Vendor platform token (e.g. "linux", "windows")
        arch: Vendor architecture token (e.g. "amd64", "arm64")
    """
    platform: str
    arch: str

    @property
    def key(self) -> str:
        """Checksum lookup key, "<platform>_<arch>"."""
        return f"{self.platform}_{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.platform == "windows"

    @property
    def archive_format(self) -> str:
        return "zip" if self.is_windows else "tar.gz"

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.is_windows else ""


def resolve(os_id: str, arch_id: str) -> PlatformTarget:
    """
    Map host identifiers to vendor tokens.

    The architecture is checked before the operating system.

    Raises:
        UnsupportedPlatformError: If either identifier has no mapping
    """
    arch = ARCH_MAPPING.get(arch_id.lower())
    if arch is None:
        raise UnsupportedPlatformError(
            f"Installation is not supported for this architecture: {arch_id}"
        )

    plat = PLATFORM_MAPPING.get(os_id.lower())
    if plat is None:
        raise UnsupportedPlatformError(
            f"Installation is not supported for this platform: {os_id}"
        )

    return PlatformTarget(platform=plat, arch=arch)


def detect_platform() -> PlatformTarget:
    """Resolve vendor tokens for the running interpreter's host."""
    return resolve(platform.system(), platform.machine())
