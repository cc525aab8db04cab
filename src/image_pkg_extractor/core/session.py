"""aiohttp session factory for the Docker Engine API."""

from typing import Tuple
from urllib.parse import urlparse

import aiohttp

from .types import DaemonConfig


def resolve_docker_host(docker_host: str) -> Tuple[str, aiohttp.BaseConnector]:
    """Map a DOCKER_HOST value to a base URL and a connector.

    Supports ``unix://<socket path>`` and ``tcp://host:port``.

    Raises:
        ValueError: If the scheme is not supported
    """
    parsed = urlparse(docker_host)
    if parsed.scheme == "unix":
        return "http://docker", aiohttp.UnixConnector(path=parsed.path)
    if parsed.scheme in ("tcp", "http"):
        return f"http://{parsed.netloc}", aiohttp.TCPConnector()
    raise ValueError(f"Unsupported DOCKER_HOST: {docker_host}")


async def create_session(config: DaemonConfig) -> Tuple[str, aiohttp.ClientSession]:
    """Create a client session bound to the configured daemon.

    Returns:
        Base URL for requests and the session; the caller closes the session
    """
    base_url, connector = resolve_docker_host(config.docker_host)
    session = aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=config.timeout),
    )
    return base_url, session
