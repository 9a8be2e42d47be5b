"""
HTTP download of release archives.

A single GET per call: no retries and no explicit timeout unless the
caller passes one. Redirects are followed by urllib's default handlers.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from . import __version__
from .errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENT = f"binshim/{__version__}"


@contextmanager
def fetch(url: str, timeout: float | None = None) -> Iterator[BinaryIO]:
    """
    Open a streaming download.

    Args:
        url: Resolved download URL
        timeout: Socket timeout in seconds (None keeps the transport default)

    Yields:
        Binary file-like response body, closed when the block exits

    Raises:
        FetchError: If the request fails or returns a non-success status
    """
    logger.debug(f"GET {url}")

    try:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        if timeout is None:
            response = urllib.request.urlopen(req)
        else:
            response = urllib.request.urlopen(req, timeout=timeout)
    except urllib.error.HTTPError as e:
        raise FetchError(
            f"Failed to download {url}: HTTP {e.code} {e.reason}",
            remediation="Check that the version in the manifest has been released",
        ) from e
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise FetchError(f"Failed to download {url}: {e}") from e

    with response:
        status = getattr(response, "status", 200)
        if status is not None and not 200 <= status < 300:
            raise FetchError(f"Failed to download {url}: HTTP {status}")
        yield response
