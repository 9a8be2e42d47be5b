"""
Archive extraction into the staging directory.

tar.gz archives are decoded straight off the download stream. zip
archives (Windows releases) need random access, so the stream is first
written to a temporary file which is always removed afterwards.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import tempfile
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Iterable

from .errors import ExtractError

logger = logging.getLogger(__name__)

ARCHIVE_FORMATS = ("tar.gz", "zip")

# Extraction filters exist from 3.10.12, 3.11.4 and 3.12 onwards
TAR_EXTRACT_KWARGS = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}


def _member_name(name: str) -> str:
    while name.startswith("./"):
        name = name[2:]
    return name


def extract_tar_gz(
    stream: BinaryIO,
    destination_dir: Path,
    members: Iterable[str],
) -> list[Path]:
    """
    Extract allow-listed members from a gzip-compressed tar stream.

    Raises:
        ExtractError: If the stream is not a valid archive or an
            allow-listed member is missing
    """
    wanted = {_member_name(m) for m in members}
    extracted: list[Path] = []
    found: set[str] = set()

    try:
        with tarfile.open(fileobj=stream, mode="r|gz") as tar:
            for member in tar:
                name = _member_name(member.name)
                if name not in wanted or not member.isfile():
                    continue
                member.name = name
                tar.extract(member, destination_dir, **TAR_EXTRACT_KWARGS)
                found.add(name)
                extracted.append(destination_dir / name)
                logger.debug(f"Extracted {name} to {destination_dir}")
    except (tarfile.TarError, EOFError, zlib.error, OSError) as e:
        raise ExtractError(f"Failed to extract tar.gz archive: {e}") from e

    missing = sorted(wanted - found)
    if missing:
        raise ExtractError(
            f"Downloaded archive does not contain the expected entries: {', '.join(missing)}"
        )
    return extracted


def extract_zip(stream: BinaryIO, destination_dir: Path) -> list[Path]:
    """
    Persist a zip stream to a temporary file and extract all of it.

    The temporary file lives in destination_dir and is deleted on both
    success and failure.

    Raises:
        ExtractError: If the archive is corrupt or cannot be written
    """
    fd, tmp_name = tempfile.mkstemp(prefix="binshim-", suffix=".zip", dir=destination_dir)
    tmp_zip = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            shutil.copyfileobj(stream, out)

        with zipfile.ZipFile(tmp_zip) as zf:
            names = zf.namelist()
            zf.extractall(destination_dir)
        logger.debug(f"Extracted {len(names)} zip entries to {destination_dir}")
        return [destination_dir / name for name in names]
    except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as e:
        raise ExtractError(f"Failed to extract zip archive: {e}") from e
    finally:
        tmp_zip.unlink(missing_ok=True)


def extract(
    stream: BinaryIO,
    destination_dir: str | Path,
    archive_format: str,
    member_filter: Iterable[str] = (),
) -> list[Path]:
    """
    Unpack an archive stream into destination_dir.

    Args:
        stream: Archive bytes (read sequentially)
        destination_dir: Staging directory, created if missing
        archive_format: "tar.gz" or "zip"
        member_filter: Entry names to extract from tar archives

    Returns:
        Paths of extracted files

    Raises:
        ExtractError: On unknown format, corrupt archive, or missing entry
    """
    dest = Path(destination_dir)
    try:
        dest.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExtractError(f"Cannot create staging directory {dest}: {e}") from e

    if archive_format == "tar.gz":
        return extract_tar_gz(stream, dest, member_filter)
    if archive_format == "zip":
        return extract_zip(stream, dest)

    raise ExtractError(
        f"Unsupported archive format: {archive_format}. "
        f"Must be one of: {', '.join(ARCHIVE_FORMATS)}"
    )
