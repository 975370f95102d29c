"""Shared fixtures for the PDF compressor tests."""

import stat
from pathlib import Path

import pytest

from pdf_compressor.core.config import Settings
from pdf_compressor.services.compression_service import CompressionService
from pdf_compressor.storage.local import LocalStorage


FAKE_GHOSTSCRIPT = """#!/bin/sh
out=""
for arg in "$@"; do
  case "$arg" in
    -sOutputFile=*) out="${arg#-sOutputFile=}" ;;
  esac
done
if [ -n "$out" ]; then
  head -c %(size)d /dev/zero > "$out"
fi
exit 0
"""


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_script(tmp_path):
    """Write an executable shell script into a bin directory.

    Returns:
        Callable taking a script name and body, returning the script path.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text(body)
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def fake_ghostscript(make_script):
    """Fake Ghostscript writing a 1,800,000-byte output file."""
    return make_script("fake-gs", FAKE_GHOSTSCRIPT % {"size": 1_800_000})


@pytest.fixture
def settings(tmp_path):
    return Settings(
        base_dir=tmp_path,
        upload_dir=tmp_path / "uploads",
        compressed_dir=tmp_path / "compressed",
        cleanup_enabled=False,
        ghostscript_timeout=10,
    )


@pytest.fixture
def storage(settings):
    store = LocalStorage(settings)
    store.initialize()
    return store


@pytest.fixture
def compression_service(storage, settings):
    return CompressionService(storage, settings)
