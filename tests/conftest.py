"""
Shared fixtures: in-memory archives, manifests, and a fake HTTP response.
"""

import hashlib
import io
import json
import logging
import tarfile
import zipfile
from pathlib import Path

import pytest


BINARY_CONTENT = b"#!/bin/sh\necho tool\n"


def make_tar_gz(entries: dict[str, bytes]) -> bytes:
    """Build a gzip-compressed tar archive from name -> content."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in entries.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def make_zip(entries: dict[str, bytes]) -> bytes:
    """Build a zip archive from name -> content."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class FakeResponse(io.BytesIO):
    """Stand-in for the object urllib.request.urlopen returns."""

    def __init__(self, data: bytes, status: int = 200):
        super().__init__(data)
        self.status = status


class DroppedResponse(FakeResponse):
    """Serves data, then fails the way a reset socket does."""

    def read(self, size=-1):
        data = super().read(size)
        if not data:
            raise ConnectionResetError(104, "Connection reset by peer")
        return data


def manifest_data(**overrides) -> dict:
    """A valid package.json document, with top-level overrides applied."""
    data = {
        "name": "@acme/tool",
        "version": "v1.2.3",
        "bin": {"tool": "bin/tool"},
        "goBinary": {
            "name": "tool",
            "url": "https://example.com/releases/v{{version}}/{{bin_name}}_{{platform}}_{{arch}}.{{ext}}",
            "checksums": {},
        },
    }
    data.update(overrides)
    return data


def write_manifest(directory: Path, data: dict, name: str = "package.json") -> Path:
    path = Path(directory) / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_binshim_logger():
    """Undo setup_logging between tests so caplog sees records."""
    yield
    logger = logging.getLogger("binshim")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def tar_archive() -> bytes:
    return make_tar_gz({"tool": BINARY_CONTENT, "README.md": b"readme\n"})


@pytest.fixture
def zip_archive() -> bytes:
    return make_zip({"tool.exe": BINARY_CONTENT, "README.md": b"readme\n"})
