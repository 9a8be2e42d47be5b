"""
Manifest parsing and validation.

The manifest is the package's own ``package.json`` (or a YAML equivalent)
and carries a ``goBinary`` block describing which archive to download:

    {
      "name": "@acme/tool",
      "version": "v1.2.3",
      "bin": {"tool": "bin/tool"},
      "goBinary": {
        "name": "tool",
        "url": "https://example.com/{{version}}/{{bin_name}}_{{platform}}_{{arch}}.{{ext}}",
        "checksums": {"linux_amd64": "<sha256 hex>"}
      }
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .common import vlog
from .errors import ConfigError


# Manifest file names searched in the working directory (in priority order)
MANIFEST_LOCATIONS = (
    "package.json",
    ".binshim.yml",
    ".binshim.yaml",
)

YAML_SUFFIXES = (".yml", ".yaml")


@dataclass(frozen=True)
class Manifest:
    """
    Validated manifest contents.

    Attributes:
        binary_name: Name of the binary inside the archive (no platform suffix)
        url_template: Download URL with {{...}} placeholders
        version: Version as written in the manifest (may carry a leading "v")
        checksums: Expected SHA-256 digests keyed by "<platform>_<arch>"
        bin_entries: The manifest's ``bin`` mapping
        package_name: Top-level package name, used for global installs
        source: Path the manifest was loaded from
    """
    binary_name: str
    url_template: str
    version: str
    checksums: dict[str, str] = field(default_factory=dict)
    bin_entries: dict[str, Any] = field(default_factory=dict)
    package_name: str = ""
    source: str = ""

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Manifest:
        """Validate a parsed manifest document and build a Manifest."""
        error = validate_manifest(data)
        if error is not None:
            message, field_name = error
            raise ConfigError(f"Invalid manifest: {message}", field=field_name)

        go_binary = data["goBinary"]
        checksums = go_binary.get("checksums") or {}
        if not isinstance(checksums, dict):
            raise ConfigError(
                "Invalid manifest: checksums property must be an object",
                field="checksums",
            )

        return Manifest(
            binary_name=str(go_binary["name"]),
            url_template=str(go_binary["url"]),
            version=str(data["version"]),
            checksums={str(k): str(v) for k, v in checksums.items()},
            bin_entries=dict(data["bin"]),
            package_name=str(data.get("name") or ""),
            source=source,
        )


def validate_manifest(data: dict[str, Any]) -> tuple[str, str] | None:
    """
    Check required manifest fields.

    Fields are checked in a fixed order and only the first violation is
    reported: version, goBinary, goBinary.name, goBinary.url, bin.

    Returns:
        (message, field) for the first violation, or None if valid
    """
    if not data.get("version"):
        return ("version property must be specified", "version")

    go_binary = data.get("goBinary")
    if not isinstance(go_binary, dict):
        return ("goBinary property must be defined and be an object", "goBinary")

    if not go_binary.get("name"):
        return ("name property is necessary", "name")

    if not go_binary.get("url"):
        return ("url property is required", "url")

    bin_entries = data.get("bin")
    if not bin_entries or not isinstance(bin_entries, dict):
        return ("bin property must be defined and be an object", "bin")

    return None


def _load_yaml(file_path: str) -> dict[str, Any]:
    """
    Load a YAML manifest.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read manifest {file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in manifest {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest {file_path} must contain a mapping at the top level")
    return data


def _load_json(file_path: str) -> dict[str, Any]:
    """
    Load a JSON manifest.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read manifest {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in manifest {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest {file_path} must contain an object at the top level")
    return data


def find_manifest(cwd: str | os.PathLike[str]) -> Path:
    """
    Locate the manifest in a directory.

    Returns the first existing entry of MANIFEST_LOCATIONS, or the
    package.json path when none exists so the caller reports it as missing.
    """
    base = Path(cwd)
    for name in MANIFEST_LOCATIONS:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return base / MANIFEST_LOCATIONS[0]


def load_and_validate(path: str | os.PathLike[str], verbose: bool = False) -> Manifest:
    """
    Read and validate a manifest file.

    Args:
        path: Path to package.json or a YAML manifest
        verbose: Enable verbose logging

    Returns:
        Validated Manifest

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid
    """
    file_path = os.fspath(path)
    if not os.path.exists(file_path):
        raise ConfigError(
            f"Unable to find {os.path.basename(file_path)}",
            remediation="Run this command at the root of the package you want to install",
        )

    vlog(f"Loading manifest from: {file_path}", verbose)

    if file_path.endswith(YAML_SUFFIXES):
        data = _load_yaml(file_path)
    else:
        data = _load_json(file_path)

    manifest = Manifest.from_dict(data, source=file_path)
    vlog(f"Loaded manifest for binary: {manifest.binary_name}", verbose)
    return manifest
