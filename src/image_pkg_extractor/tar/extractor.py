"""Extract a single file from a known layer of a saved image."""

import io
import logging
import posixpath
from contextlib import ExitStack
from typing import Optional

from ..core.opener import Opener, open_archive
from ..core.types import ExtractorConfig
from ..exceptions import (
    FileNotFoundInLayerError,
    LinkDepthExceededError,
    MalformedArchiveError,
)
from .models import EntryKind, LayerReference, ResolvedTarget
from .scanner import ArchiveScanner, EntryReader

logger = logging.getLogger(__name__)


def resolve_link(entry_path: str, link_target: str) -> str:
    """Resolve a link target relative to the directory of the link entry.

    Absolute targets are resolved from the layer root.

    >>> resolve_link("etc/package.yaml", "../shared/package.yaml")
    'shared/package.yaml'
    """
    if link_target.startswith("/"):
        return posixpath.normpath(link_target.lstrip("/"))
    base = posixpath.dirname(entry_path)
    return posixpath.normpath(posixpath.join(base, link_target))


class ExtractedFile(io.RawIOBase):
    """Content of an extracted file.

    Holds the archive stream open until closed; use it as a context manager.
    """

    def __init__(
        self,
        content: EntryReader,
        size: int,
        target: ResolvedTarget,
        resources: ExitStack,
    ) -> None:
        super().__init__()
        self._content = content
        self._resources = resources
        self.size = size
        self.target = target

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        try:
            return self._content.readinto(buffer)
        except MalformedArchiveError as e:
            raise MalformedArchiveError(
                f"extract {self.target.path} from {self.target.layer.path}: {e}",
                phase="extract",
                path=self.target.path,
                layer=self.target.layer.path,
            ) from e

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._resources.close()
        finally:
            super().close()


def extract_file(
    opener: Opener,
    layer: LayerReference,
    target_path: str,
    config: Optional[ExtractorConfig] = None,
) -> ExtractedFile:
    """Open ``target_path`` inside ``layer``, following symlinks and hardlinks.

    Every link hop re-opens the archive, since tar streams cannot be rewound.

    Args:
        opener: Source of fresh archive streams
        layer: Layer entry found by :func:`locate_layer`
        target_path: Exact entry name inside the layer
        config: Extractor settings

    Returns:
        Readable file bound to the underlying archive stream

    Raises:
        FileNotFoundInLayerError: If the layer or the path is missing on this pass
        LinkDepthExceededError: If more than ``config.max_link_depth`` links are followed
        MalformedArchiveError: If the archive or the layer cannot be parsed
        OpenFailedError: If the archive cannot be opened
    """
    config = config or ExtractorConfig()
    path = target_path
    hops = 0

    while True:
        with ExitStack() as stack:
            stream = stack.enter_context(open_archive(opener))
            try:
                outer = ArchiveScanner(stream, name="image", chunk_size=config.chunk_size)
                layer_entry = outer.scan(
                    lambda e: e.name == layer.path and e.kind is EntryKind.REGULAR_FILE
                )
                if layer_entry is None:
                    raise FileNotFoundInLayerError(
                        f"Layer {layer.path} not found in image",
                        phase="extract",
                        path=path,
                        layer=layer.path,
                    )

                inner = ArchiveScanner(
                    layer_entry.content, name=layer.path, chunk_size=config.chunk_size
                )
                entry = inner.scan(lambda e: e.name == path)
            except MalformedArchiveError as e:
                raise MalformedArchiveError(
                    f"extract {path} from {layer.path}: {e}",
                    phase="extract",
                    path=path,
                    layer=layer.path,
                ) from e

            if entry is None:
                raise FileNotFoundInLayerError(
                    f"{path} not found in layer {layer.path}",
                    phase="extract",
                    path=path,
                    layer=layer.path,
                )

            if entry.kind.is_link:
                resolved = resolve_link(path, entry.link_target)
                hops += 1
                if hops > config.max_link_depth:
                    raise LinkDepthExceededError(
                        f"Too many links resolving {target_path} in layer {layer.path} "
                        f"(stopped at {path} -> {entry.link_target})",
                        phase="extract",
                        path=target_path,
                        layer=layer.path,
                    )
                logger.debug("Following %s %s -> %s", entry.kind.value, path, resolved)
                path = resolved
                continue

            if entry.kind is not EntryKind.REGULAR_FILE:
                raise FileNotFoundInLayerError(
                    f"{path} in layer {layer.path} is a {entry.kind.value}, not a regular file",
                    phase="extract",
                    path=path,
                    layer=layer.path,
                )

            target = ResolvedTarget(layer=layer, path=path, depth=hops)
            return ExtractedFile(entry.content, entry.size, target, stack.pop_all())
