"""Builders for synthetic saved-image archives."""

import io
import json
import tarfile
from typing import Dict, List, Optional, Sequence, Tuple, Union

# name -> content (regular file), or ("symlink"|"hardlink"|"dir", target)
LayerSpec = Dict[str, Union[bytes, Tuple[str, str]]]


def build_layer(files: LayerSpec, fmt: int = tarfile.PAX_FORMAT) -> bytes:
    """Build a layer tar from a mapping of entry names to contents or links."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=fmt) as tar:
        for name, value in files.items():
            info = tarfile.TarInfo(name)
            if isinstance(value, tuple):
                kind, target = value
                if kind == "symlink":
                    info.type = tarfile.SYMTYPE
                    info.linkname = target
                elif kind == "hardlink":
                    info.type = tarfile.LNKTYPE
                    info.linkname = target
                elif kind == "dir":
                    info.type = tarfile.DIRTYPE
                    info.mode = 0o755
                else:
                    raise ValueError(f"unknown entry kind {kind}")
                tar.addfile(info)
            else:
                info.size = len(value)
                tar.addfile(info, fileobj=io.BytesIO(value))
    return buf.getvalue()


def build_image(
    layers: Sequence[LayerSpec],
    with_manifest: bool = True,
    layer_names: Optional[List[str]] = None,
    extra: Optional[Dict[str, bytes]] = None,
) -> bytes:
    """Build a docker-save style archive with one ``<id>/layer.tar`` per layer.

    Layers are written in the given order, followed by manifest.json.
    """
    names = layer_names or [f"{index:064x}/layer.tar" for index in range(1, len(layers) + 1)]
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        config = json.dumps({"architecture": "amd64", "os": "linux"}).encode("utf-8")
        _add_bytes(tar, "config.json", config)
        for name, files in zip(names, layers):
            _add_bytes(tar, name, build_layer(files))
        for name, content in (extra or {}).items():
            _add_bytes(tar, name, content)
        if with_manifest:
            manifest = [
                {
                    "Config": "config.json",
                    "RepoTags": ["test/package:latest"],
                    "Layers": names,
                }
            ]
            _add_bytes(tar, "manifest.json", json.dumps(manifest).encode("utf-8"))
    return buf.getvalue()


def _add_bytes(tar: tarfile.TarFile, name: str, content: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(content)
    tar.addfile(info, fileobj=io.BytesIO(content))


class TrackingOpener:
    """Opener recording every stream it hands out."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.streams: List[io.BytesIO] = []

    def __call__(self) -> io.BytesIO:
        stream = io.BytesIO(self.data)
        self.streams.append(stream)
        return stream

    @property
    def all_closed(self) -> bool:
        return all(stream.closed for stream in self.streams)
