"""Tests for writing extracted content."""

import gzip
import hashlib
import io

import pytest

from image_pkg_extractor.exceptions import OpenFailedError, WriteFailedError
from image_pkg_extractor.utils.digest import calculate_digest
from image_pkg_extractor.utils.sink import write_bytes_async, write_to

PAYLOAD = b"apiVersion: v1\n" * 1000


class FailingWriter(io.RawIOBase):
    def writable(self):
        return True

    def write(self, data):
        raise OSError("disk full")


class FailingReader(io.RawIOBase):
    def readable(self):
        return True

    def readinto(self, buffer):
        raise OSError("input/output error")


def test_write_to_path(tmp_path):
    """Test writing to a file path."""
    target = tmp_path / "out.yaml"

    digest = write_to(io.BytesIO(PAYLOAD), target, chunk_size=1000)

    assert target.read_bytes() == PAYLOAD
    assert digest == f"sha256:{hashlib.sha256(PAYLOAD).hexdigest()}"


def test_write_to_compressed(tmp_path):
    """Test gzip output and the digest of the uncompressed payload."""
    target = tmp_path / "out.yaml.gz"

    digest = write_to(io.BytesIO(PAYLOAD), target, compress=True)

    assert gzip.decompress(target.read_bytes()) == PAYLOAD
    assert digest == calculate_digest(PAYLOAD)


def test_write_to_file_object_left_open():
    """Test that caller-owned destinations are not closed."""
    buffer = io.BytesIO()

    write_to(io.BytesIO(PAYLOAD), buffer, compress=True)

    assert not buffer.closed
    assert gzip.decompress(buffer.getvalue()) == PAYLOAD


def test_write_to_failure():
    """Test a destination that rejects writes."""
    with pytest.raises(WriteFailedError, match="disk full"):
        write_to(io.BytesIO(PAYLOAD), FailingWriter())


def test_write_to_read_failure():
    """Test that a failing source is not reported as a write failure."""
    buffer = io.BytesIO()

    with pytest.raises(OpenFailedError, match="input/output error"):
        write_to(FailingReader(), buffer)


def test_calculate_digest_rejects_text():
    """Test digest input validation."""
    with pytest.raises(ValueError):
        calculate_digest("text")


@pytest.mark.asyncio
async def test_write_bytes_async(tmp_path):
    """Test async writing with and without compression."""
    plain = tmp_path / "plain.yaml"
    packed = tmp_path / "packed.yaml.gz"

    digest_plain = await write_bytes_async(PAYLOAD, plain)
    digest_packed = await write_bytes_async(PAYLOAD, packed, compress=True)

    assert plain.read_bytes() == PAYLOAD
    assert gzip.decompress(packed.read_bytes()) == PAYLOAD
    assert digest_plain == digest_packed


@pytest.mark.asyncio
async def test_write_bytes_async_failure(tmp_path):
    """Test async writing into a missing directory."""
    with pytest.raises(WriteFailedError):
        await write_bytes_async(PAYLOAD, tmp_path / "missing" / "out.yaml")
