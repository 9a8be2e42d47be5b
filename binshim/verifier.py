"""
Checksum computation and verification.

The archive is hashed while it is being extracted: HashingReader sits
between the HTTP response and the archive decoder and feeds every chunk
it hands out into a SHA-256 hasher, so the payload is never buffered
whole in memory.
"""

from __future__ import annotations

import hashlib
import http.client
import io
import logging
from typing import BinaryIO, Mapping

from .errors import ChecksumError, FetchError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class HashingReader(io.RawIOBase):
    """
    Read-only stream wrapper that digests everything read through it.

    Args:
        raw: Underlying binary stream
        algorithm: hashlib algorithm name
    """

    def __init__(self, raw: BinaryIO, algorithm: str = "sha256"):
        super().__init__()
        self._raw = raw
        self._hasher = hashlib.new(algorithm)
        self.bytes_read = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        try:
            data = self._raw.read(len(buffer))
        except (OSError, http.client.HTTPException) as e:
            raise FetchError(
                f"Download interrupted after {self.bytes_read} bytes: {e}"
            ) from e
        if not data:
            return 0
        n = len(data)
        buffer[:n] = data
        self._hasher.update(data)
        self.bytes_read += n
        return n

    def drain(self, chunk_size: int = CHUNK_SIZE) -> int:
        """Consume and hash whatever is left; returns the number of bytes drained."""
        drained = 0
        while True:
            chunk = self.read(chunk_size)
            if not chunk:
                return drained
            drained += len(chunk)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()


def compute_digest(stream: BinaryIO, algorithm: str = "sha256") -> str:
    """Hash a stream to exhaustion and return the hex digest."""
    reader = HashingReader(stream, algorithm)
    reader.drain()
    return reader.hexdigest()


def verify(
    digest: str,
    expected_checksums: Mapping[str, str],
    platform_key: str,
    skip: bool = False,
) -> bool:
    """
    Compare a computed digest against the manifest checksums.

    Args:
        digest: Hex digest of the downloaded archive
        expected_checksums: Manifest checksums keyed by "<platform>_<arch>"
        platform_key: Key for the running platform
        skip: Ignore a missing or mismatched checksum (logs a warning)

    Returns:
        True if the checksum matched, False if a mismatch was skipped

    Raises:
        ChecksumError: If the key is absent or the digests differ and skip is False
    """
    expected = expected_checksums.get(platform_key)
    if expected is not None and expected.lower() == digest.lower():
        logger.debug(f"Checksum verified for {platform_key}: {digest}")
        return True

    message = (
        f"cannot validate checksum of the downloaded package. "
        f"got {digest}, expected {expected}"
    )
    if skip:
        logger.warning(f"Skipping checksum verification: {message}")
        return False

    raise ChecksumError(
        message,
        remediation="Update the manifest checksums or set BINSHIM_SKIP_VERIFY to bypass",
    )
