"""
Error taxonomy for install and uninstall runs.

Every failure in the pipeline is terminal for the current invocation;
nothing is retried. The CLI maps any InstallError to exit code 1.
"""

from __future__ import annotations


class InstallError(Exception):
    """
    Base exception for installation errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


class ConfigError(InstallError):
    """Manifest is missing, unreadable, or a required field is invalid."""

    def __init__(self, message: str, field: str | None = None, remediation: str | None = None):
        self.field = field
        super().__init__(message, remediation=remediation)


class UnsupportedPlatformError(InstallError):
    """Operating system or CPU architecture has no vendor token."""


class FetchError(InstallError):
    """Download failed at the transport or HTTP status level."""


class ExtractError(InstallError):
    """Archive could not be decoded or lacks the expected member."""


class ChecksumError(InstallError):
    """Downloaded archive digest does not match the manifest."""


class MissingBinaryError(InstallError):
    """Extraction finished but the binary is not in the staging directory."""


class PlaceError(InstallError):
    """Binary could not be moved into the install directory."""


class PathResolutionError(InstallError):
    """Install directory could not be determined."""
