"""
Install and uninstall orchestration.

Install runs ConfigLoaded -> PlatformResolved -> Fetching ->
(Extracting + Hashing) -> Verified -> Placed. Uninstall runs
ConfigLoaded -> PathResolved -> Removed. Any InstallError aborts the run;
nothing is retried.
"""

from __future__ import annotations

import http.client
import logging
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .common import vlog
from .config import Manifest, load_and_validate
from .environment import InstallContext
from .errors import FetchError, InstallError, PathResolutionError
from .extractor import extract
from .fetcher import fetch
from .install_plan import ResolvedInstallOptions, resolve_install_options
from .package_managers import (
    PackageManagerPathResolver,
    PathResolver,
    StaticPathResolver,
    get_package_manager,
)
from .placer import place, remove
from .platforms import PlatformTarget, resolve
from .verifier import HashingReader, verify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallResult:
    """
    Outcome of one install or uninstall run.

    Attributes:
        action: "install" or "uninstall"
        binary_name: Platform-suffixed binary name (empty if unknown)
        success: Whether the run succeeded
        binary_path: Installed (or removed) binary path
        checksum_verified: Whether the digest matched the manifest
        checksum_skipped: Whether a mismatch was ignored via the skip flag
        removed: Whether uninstall deleted a file
        duration_seconds: Total run time
        error_message: Human-readable error message if failed
        error_type: Exception class name if failed
        remediation: Suggested fix if failed
    """
    action: str
    binary_name: str
    success: bool
    binary_path: str | None = None
    checksum_verified: bool = False
    checksum_skipped: bool = False
    removed: bool = False
    duration_seconds: float = 0.0
    error_message: str | None = None
    error_type: str | None = None
    remediation: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "action": self.action,
            "binary_name": self.binary_name,
            "success": self.success,
            "binary_path": self.binary_path,
            "checksum_verified": self.checksum_verified,
            "checksum_skipped": self.checksum_skipped,
            "removed": self.removed,
            "duration_seconds": self.duration_seconds,
            "error_message": self.error_message,
            "error_type": self.error_type,
            "remediation": self.remediation,
        }


def make_path_resolver(
    context: InstallContext,
    manifest: Manifest,
    verbose: bool = False,
) -> PathResolver:
    """
    Pick the PathResolver for a context.

    An explicit bin_dir wins; otherwise the host package manager is queried.

    Raises:
        PathResolutionError: If the package manager is unknown
    """
    if context.bin_dir is not None:
        return StaticPathResolver(context.bin_dir)

    pm = get_package_manager(context.package_manager)
    if pm is None:
        raise PathResolutionError(f"Unknown package manager: {context.package_manager}")
    return PackageManagerPathResolver(
        pm,
        package_name=manifest.package_name,
        global_install=context.global_install,
        cwd=context.cwd,
        verbose=verbose,
    )


@contextmanager
def _staging(context: InstallContext) -> Iterator[Path]:
    if context.staging_dir is not None:
        context.staging_dir.mkdir(parents=True, exist_ok=True)
        yield context.staging_dir
        return
    with tempfile.TemporaryDirectory(prefix="binshim-") as tmp:
        yield Path(tmp)


def download_and_extract(options: ResolvedInstallOptions) -> str:
    """
    Stream the archive into the extractor while hashing it.

    The whole response is consumed before returning so the digest covers
    every byte, even when the extractor stops early.

    Returns:
        Hex SHA-256 digest of the downloaded archive

    Raises:
        FetchError: If the download fails, including mid-stream
        ExtractError: If the archive cannot be extracted
    """
    logger.info(f"Downloading from URL: {options.resolved_url}")
    with fetch(options.resolved_url) as response:
        reader = HashingReader(response)
        try:
            extract(
                reader,
                options.staging_path,
                options.archive_format,
                member_filter=[options.member_name],
            )
            reader.drain()
        except (OSError, http.client.HTTPException) as e:
            raise FetchError(f"Download of {options.resolved_url} was interrupted: {e}") from e

    logger.debug(f"Downloaded {reader.bytes_read} bytes, sha256 {reader.hexdigest()}")
    return reader.hexdigest()


def run_install(
    context: InstallContext,
    resolver: PathResolver | None = None,
    verbose: bool = False,
) -> InstallResult:
    """
    Run the install pipeline, raising on the first failure.

    Args:
        context: Invocation context
        resolver: Install directory resolver (derived from context if None)
        verbose: Enable verbose logging

    Returns:
        Successful InstallResult

    Raises:
        InstallError: Any pipeline failure
    """
    start_time = time.time()

    manifest = load_and_validate(context.manifest_path, verbose=verbose)
    target = resolve(context.system, context.machine)
    vlog(f"Resolved platform: {target.key}", verbose)

    with _staging(context) as staging:
        options = resolve_install_options(manifest, target, staging)
        digest = download_and_extract(options)

        matched = verify(digest, manifest.checksums, target.key, skip=context.skip_verify)

        if resolver is None:
            resolver = make_path_resolver(context, manifest, verbose)
        install_dir = resolver.resolve_install_dir()
        logger.info(f"Installing {options.binary_name} binary to: {install_dir}")

        dest = place(options.staging_path, options.binary_name, install_dir)

    duration = time.time() - start_time
    logger.info(f"Installed {options.binary_name} {options.version} at {dest}")
    return InstallResult(
        action="install",
        binary_name=options.binary_name,
        success=True,
        binary_path=str(dest),
        checksum_verified=matched,
        checksum_skipped=not matched,
        duration_seconds=duration,
    )


def run_uninstall(
    context: InstallContext,
    resolver: PathResolver | None = None,
    verbose: bool = False,
) -> InstallResult:
    """
    Run the uninstall pipeline, raising if the install path can't be found.

    Deleting an already-absent binary is not an error.
    """
    start_time = time.time()

    manifest = load_and_validate(context.manifest_path, verbose=verbose)
    target: PlatformTarget = resolve(context.system, context.machine)
    binary_name = manifest.binary_name + target.executable_suffix

    if resolver is None:
        resolver = make_path_resolver(context, manifest, verbose)
    install_dir = resolver.resolve_install_dir()

    removed = remove(install_dir, binary_name)
    if removed:
        logger.info(f"Removed {binary_name} from {install_dir}")
    else:
        vlog(f"{binary_name} was not installed in {install_dir}", verbose)

    return InstallResult(
        action="uninstall",
        binary_name=binary_name,
        success=True,
        binary_path=str(Path(install_dir) / binary_name),
        removed=removed,
        duration_seconds=time.time() - start_time,
    )


def _failed(action: str, error: InstallError, start_time: float) -> InstallResult:
    return InstallResult(
        action=action,
        binary_name="",
        success=False,
        duration_seconds=time.time() - start_time,
        error_message=error.message,
        error_type=type(error).__name__,
        remediation=error.remediation,
    )


def install(
    context: InstallContext,
    resolver: PathResolver | None = None,
    verbose: bool = False,
) -> InstallResult:
    """
    Install the binary described by the context's manifest.

    Returns:
        InstallResult; failures are reported in the result, not raised
    """
    start_time = time.time()
    try:
        return run_install(context, resolver=resolver, verbose=verbose)
    except InstallError as e:
        vlog(f"Install failed: {type(e).__name__}: {e.message}", verbose)
        return _failed("install", e, start_time)


def uninstall(
    context: InstallContext,
    resolver: PathResolver | None = None,
    verbose: bool = False,
) -> InstallResult:
    """
    Remove the installed binary.

    Returns:
        InstallResult; failures are reported in the result, not raised
    """
    start_time = time.time()
    try:
        return run_uninstall(context, resolver=resolver, verbose=verbose)
    except InstallError as e:
        vlog(f"Uninstall failed: {type(e).__name__}: {e.message}", verbose)
        return _failed("uninstall", e, start_time)
