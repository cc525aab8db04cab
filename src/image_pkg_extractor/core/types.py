"""Configuration types for the extractor and the Docker daemon client."""

import os
from dataclasses import dataclass, field

DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {key}: {value!r}")


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"Invalid integer for {key}: {value!r}") from e


@dataclass(frozen=True)
class ExtractorConfig:
    """Settings for locating and extracting a file from a saved image."""

    layer_marker: str = "layer.tar"
    max_link_depth: int = 32
    chunk_size: int = 64 * 1024
    use_manifest: bool = False
    manifest_name: str = "manifest.json"

    def __post_init__(self) -> None:
        if not self.layer_marker:
            raise ValueError("layer_marker must not be empty")
        if self.max_link_depth <= 0:
            raise ValueError("max_link_depth must be positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

    @classmethod
    def from_env(cls, prefix: str = "IMAGE_PKG_") -> "ExtractorConfig":
        """Build a config from environment variables.

        Recognised variables (with the default prefix): ``IMAGE_PKG_LAYER_MARKER``,
        ``IMAGE_PKG_MAX_LINK_DEPTH``, ``IMAGE_PKG_CHUNK_SIZE`` and
        ``IMAGE_PKG_USE_MANIFEST``. Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        kwargs = {}
        marker = os.environ.get(f"{prefix}LAYER_MARKER")
        if marker is not None:
            kwargs["layer_marker"] = marker

        for name in ("MAX_LINK_DEPTH", "CHUNK_SIZE"):
            key = f"{prefix}{name}"
            if key in os.environ:
                kwargs[name.lower()] = _parse_int(key, os.environ[key])

        key = f"{prefix}USE_MANIFEST"
        if key in os.environ:
            kwargs["use_manifest"] = _parse_bool(key, os.environ[key])

        return cls(**kwargs)


@dataclass(frozen=True)
class DaemonConfig:
    """Docker Engine connection settings."""

    docker_host: str = field(
        default_factory=lambda: os.environ.get("DOCKER_HOST", DEFAULT_DOCKER_HOST)
    )
    timeout: int = 300
    chunk_size: int = 1024 * 1024
