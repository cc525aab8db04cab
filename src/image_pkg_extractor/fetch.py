"""Locate-then-extract orchestration over a saved image archive."""

import logging
from typing import Optional

from .core.opener import Opener
from .core.types import ExtractorConfig
from .tar.extractor import extract_file
from .tar.locator import locate_layer
from .utils.digest import calculate_digest
from .utils.sink import Destination, write_to

logger = logging.getLogger(__name__)


def fetch_file(
    opener: Opener, target_path: str, config: Optional[ExtractorConfig] = None
) -> bytes:
    """Return the content of ``target_path`` from the first layer containing it.

    The archive is opened twice: once to find the layer, once to read the file.
    Every stream is closed before returning, on success and on error.

    Args:
        opener: Source of fresh archive streams
        target_path: Exact entry name inside the layer (e.g. "package.yaml")
        config: Extractor settings

    Returns:
        File content

    Raises:
        ExtractorError: Any subclass, see :mod:`image_pkg_extractor.exceptions`
    """
    config = config or ExtractorConfig()
    layer = locate_layer(opener, target_path, config)
    with extract_file(opener, layer, target_path, config) as extracted:
        data = extracted.read()
        target = extracted.target

    logger.info(
        "Fetched %s from layer %s (%d bytes, %s, %d link hops)",
        target.path,
        layer.path,
        len(data),
        calculate_digest(data),
        target.depth,
    )
    return data


def save_file(
    opener: Opener,
    target_path: str,
    destination: Destination,
    compress: bool = False,
    config: Optional[ExtractorConfig] = None,
) -> str:
    """Stream ``target_path`` from the image into ``destination``.

    Args:
        opener: Source of fresh archive streams
        target_path: Exact entry name inside the layer
        destination: File path or writable binary file object
        compress: Write gzip-compressed output
        config: Extractor settings

    Returns:
        Digest of the uncompressed content ("sha256:hex")

    Raises:
        ExtractorError: Any subclass; on WriteFailedError the destination must
            be discarded by the caller
    """
    config = config or ExtractorConfig()
    layer = locate_layer(opener, target_path, config)
    with extract_file(opener, layer, target_path, config) as extracted:
        digest = write_to(extracted, destination, compress=compress, chunk_size=config.chunk_size)

    logger.info("Saved %s from layer %s to %s (%s)", target_path, layer.path, destination, digest)
    return digest
