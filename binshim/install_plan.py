"""
Derivation of per-invocation install options.

Combines the manifest with the resolved platform into the immutable set
of values the download/extract/place pipeline needs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from .config import Manifest
from .platforms import PlatformTarget


@dataclass(frozen=True)
class ResolvedInstallOptions:
    """
    Everything one install or uninstall run needs, computed once.

    Attributes:
        binary_name: Platform-suffixed binary file name ("tool.exe" on Windows)
        member_name: Archive entry name allowed during tar extraction
        staging_path: Directory the archive is extracted into
        resolved_url: Download URL with all placeholders substituted
        archive_format: "tar.gz" or "zip"
        expected_checksum: Manifest digest for this platform, if any
        checksum_key: "<platform>_<arch>" lookup key
        version: Normalized version (no leading "v")
    """
    binary_name: str
    member_name: str
    staging_path: Path
    resolved_url: str
    archive_format: str
    expected_checksum: str | None
    checksum_key: str
    version: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "binary_name": self.binary_name,
            "member_name": self.member_name,
            "staging_path": str(self.staging_path),
            "resolved_url": self.resolved_url,
            "archive_format": self.archive_format,
            "expected_checksum": self.expected_checksum,
            "checksum_key": self.checksum_key,
            "version": self.version,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def normalize_version(version: str) -> str:
    """Strip a single leading "v" (v0.0.1 => 0.0.1)."""
    if version.startswith("v"):
        return version[1:]
    return version


def render_url(
    template: str,
    *,
    arch: str,
    platform: str,
    version: str,
    bin_name: str,
    ext: str,
) -> str:
    """
    Substitute {{arch}}, {{platform}}, {{version}}, {{bin_name}} and {{ext}}.

    Every occurrence of each placeholder is replaced; unknown placeholders
    are left untouched.
    """
    substitutions = (
        ("{{arch}}", arch),
        ("{{platform}}", platform),
        ("{{version}}", version),
        ("{{bin_name}}", bin_name),
        ("{{ext}}", ext),
    )
    url = template
    for placeholder, value in substitutions:
        url = url.replace(placeholder, value)
    return url


def resolve_install_options(
    manifest: Manifest,
    target: PlatformTarget,
    staging_path: str | Path,
) -> ResolvedInstallOptions:
    """
    Build the ResolvedInstallOptions for one run.

    Args:
        manifest: Validated manifest
        target: Resolved platform tokens
        staging_path: Directory used for extraction

    Returns:
        ResolvedInstallOptions
    """
    version = normalize_version(manifest.version)
    binary_name = manifest.binary_name + target.executable_suffix
    ext = target.archive_format

    url = render_url(
        manifest.url_template,
        arch=target.arch,
        platform=target.platform,
        version=version,
        bin_name=binary_name,
        ext=ext,
    )

    return ResolvedInstallOptions(
        binary_name=binary_name,
        member_name=manifest.binary_name,
        staging_path=Path(staging_path),
        resolved_url=url,
        archive_format=ext,
        expected_checksum=manifest.checksums.get(target.key),
        checksum_key=target.key,
        version=version,
    )
