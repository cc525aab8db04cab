"""Write extracted content to files, optionally gzip-compressed."""

import gzip
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, Union

import aiofiles

from ..exceptions import OpenFailedError, WriteFailedError
from .digest import format_digest, new_hasher

logger = logging.getLogger(__name__)

Destination = Union[str, Path, BinaryIO]


def write_to(
    content: BinaryIO,
    destination: Destination,
    compress: bool = False,
    chunk_size: int = 64 * 1024,
) -> str:
    """Stream ``content`` to ``destination``.

    Args:
        content: Readable binary stream
        destination: File path, or a writable binary file object
        compress: Wrap the destination in a gzip encoder
        chunk_size: Copy chunk size

    Returns:
        Digest of the uncompressed bytes written ("sha256:hex")

    Raises:
        WriteFailedError: If the destination cannot be written. Its state is
            undefined afterwards and it should be discarded.
        OpenFailedError: If reading ``content`` fails
    """
    hasher = new_hasher()
    written = 0
    try:
        with ExitStack() as stack:
            if isinstance(destination, (str, Path)):
                target = stack.enter_context(open(destination, "wb"))
            else:
                target = destination
            if compress:
                target = stack.enter_context(
                    gzip.GzipFile(fileobj=target, mode="wb", mtime=0)
                )

            while True:
                try:
                    chunk = content.read(chunk_size)
                except OSError as e:
                    raise OpenFailedError(
                        f"Failed to read source content: {e}", phase="extract"
                    ) from e
                if not chunk:
                    break
                hasher.update(chunk)
                target.write(chunk)
                written += len(chunk)
    except OSError as e:
        raise WriteFailedError(f"Failed to write to {destination}: {e}", phase="write") from e

    digest = format_digest(hasher)
    logger.debug("Wrote %d bytes (%s) to %s", written, digest, destination)
    return digest


async def write_bytes_async(
    data: bytes, destination: Union[str, Path], compress: bool = False
) -> str:
    """Write ``data`` to a file without blocking the event loop.

    Returns:
        Digest of ``data`` ("sha256:hex")

    Raises:
        WriteFailedError: If the file cannot be written
    """
    hasher = new_hasher()
    hasher.update(data)
    payload = gzip.compress(data, mtime=0) if compress else data
    try:
        async with aiofiles.open(destination, "wb") as f:
            await f.write(payload)
    except OSError as e:
        raise WriteFailedError(f"Failed to write to {destination}: {e}", phase="write") from e
    return format_digest(hasher)
