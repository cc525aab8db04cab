"""Save images from the Docker Engine into local archive files."""

import logging
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiohttp

from ..exceptions import OpenFailedError
from .session import create_session
from .types import DaemonConfig

logger = logging.getLogger(__name__)


async def check_daemon_connectivity(config: Optional[DaemonConfig] = None) -> bool:
    """Return True if the Docker daemon answers ``/_ping``."""
    config = config or DaemonConfig()
    base_url, session = await create_session(config)
    try:
        async with session.get(f"{base_url}/_ping") as resp:
            return resp.status == 200
    except aiohttp.ClientError:
        return False
    finally:
        await session.close()


async def save_image(
    image: str,
    destination: Union[str, Path],
    config: Optional[DaemonConfig] = None,
) -> Path:
    """Stream ``docker save`` output for ``image`` into ``destination``.

    Args:
        image: Image reference (e.g. "crossplane/provider-nop:v0.2.1")
        destination: Path of the archive file to write
        config: Daemon connection settings

    Returns:
        Path of the written archive

    Raises:
        OpenFailedError: If the daemon is unreachable or refuses the request
    """
    if not image:
        raise ValueError("Please provide an image to save")
    config = config or DaemonConfig()
    destination = Path(destination)

    base_url, session = await create_session(config)
    written = 0
    try:
        async with session.get(f"{base_url}/images/get", params={"names": image}) as resp:
            if resp.status != 200:
                message = (await resp.text()).strip()
                raise OpenFailedError(
                    f"Docker daemon failed to save {image} "
                    f"(HTTP {resp.status}): {message}",
                    phase="open",
                )
            async with aiofiles.open(destination, "wb") as f:
                async for chunk in resp.content.iter_chunked(config.chunk_size):
                    await f.write(chunk)
                    written += len(chunk)
    except aiohttp.ClientError as e:
        raise OpenFailedError(f"Failed to save image {image}: {e}", phase="open") from e
    finally:
        await session.close()

    logger.debug("Saved %s to %s (%d bytes)", image, destination, written)
    return destination
