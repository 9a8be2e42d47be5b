"""
binshim - package-manager install shim for prebuilt binaries.

Core Modules:
- Configuration: manifest parsing and validation, invocation context
- Resolution: platform tokens, install options, install directory
- Pipeline: streaming download, checksum verification, extraction, placement
"""

__version__ = "1.0.0"

VERSION = __version__

from .errors import (
    InstallError,
    ConfigError,
    UnsupportedPlatformError,
    FetchError,
    ExtractError,
    ChecksumError,
    MissingBinaryError,
    PlaceError,
    PathResolutionError,
)
from .config import Manifest, load_and_validate, find_manifest, validate_manifest
from .platforms import PlatformTarget, resolve, detect_platform
from .install_plan import (
    ResolvedInstallOptions,
    normalize_version,
    render_url,
    resolve_install_options,
)
from .environment import InstallContext, detect_context
from .fetcher import fetch
from .verifier import HashingReader, compute_digest, verify
from .extractor import extract
from .package_managers import (
    PackageManager,
    PathResolver,
    StaticPathResolver,
    PackageManagerPathResolver,
    get_package_manager,
)
from .placer import place, remove
from .installer import InstallResult, install, uninstall, run_install, run_uninstall
from .logging_config import setup_logging, get_logger

__all__ = [
    "__version__",
    "VERSION",
    # Errors
    "InstallError",
    "ConfigError",
    "UnsupportedPlatformError",
    "FetchError",
    "ExtractError",
    "ChecksumError",
    "MissingBinaryError",
    "PlaceError",
    "PathResolutionError",
    # Configuration
    "Manifest",
    "load_and_validate",
    "find_manifest",
    "validate_manifest",
    "InstallContext",
    "detect_context",
    # Resolution
    "PlatformTarget",
    "resolve",
    "detect_platform",
    "ResolvedInstallOptions",
    "normalize_version",
    "render_url",
    "resolve_install_options",
    "PackageManager",
    "PathResolver",
    "StaticPathResolver",
    "PackageManagerPathResolver",
    "get_package_manager",
    # Pipeline
    "fetch",
    "HashingReader",
    "compute_digest",
    "verify",
    "extract",
    "place",
    "remove",
    "InstallResult",
    "install",
    "uninstall",
    "run_install",
    "run_uninstall",
    # Logging
    "setup_logging",
    "get_logger",
]
