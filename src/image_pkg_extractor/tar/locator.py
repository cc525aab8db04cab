"""Find the layer of a saved image that contains a given file."""

import logging
from typing import Callable, Collection, Optional

from ..core.opener import Opener, open_archive
from ..core.types import ExtractorConfig
from ..exceptions import FileNotFoundInAnyLayerError, MalformedArchiveError
from .manifest import read_manifest_layers
from .models import ArchiveEntry, EntryKind, LayerReference
from .scanner import ArchiveScanner

logger = logging.getLogger(__name__)


def layer_matcher(
    config: ExtractorConfig, layer_names: Optional[Collection[str]] = None
) -> Callable[[ArchiveEntry], bool]:
    """Build the predicate deciding which outer entries are layers.

    Only regular files qualify. With ``layer_names`` an entry must be listed
    there, otherwise its name must contain ``config.layer_marker``.
    """
    if layer_names is not None:
        names = frozenset(layer_names)

        def is_listed_layer(entry: ArchiveEntry) -> bool:
            return entry.kind is EntryKind.REGULAR_FILE and entry.name in names

        return is_listed_layer

    def is_named_layer(entry: ArchiveEntry) -> bool:
        return entry.kind is EntryKind.REGULAR_FILE and config.layer_marker in entry.name

    return is_named_layer


def locate_layer(
    opener: Opener,
    target_path: str,
    config: Optional[ExtractorConfig] = None,
) -> LayerReference:
    """Return the first layer, in archive order, containing ``target_path``.

    The first match wins. This is not image layer shadowing: when several
    layers carry the path, the one stored first in the saved archive is
    reported even if a later layer overrides it in the image filesystem.

    Args:
        opener: Source of fresh archive streams
        target_path: Exact entry name inside the layer (e.g. "package.yaml")
        config: Extractor settings

    Returns:
        Reference to the matching layer entry

    Raises:
        FileNotFoundInAnyLayerError: If no layer contains the path
        MalformedArchiveError: If the archive or a layer cannot be parsed
        OpenFailedError: If the archive cannot be opened
        ValidationError: If manifest-based selection is on and the manifest is invalid
    """
    config = config or ExtractorConfig()
    layer_names = None
    if config.use_manifest:
        layer_names = read_manifest_layers(opener, config.manifest_name)
    is_layer = layer_matcher(config, layer_names)

    scanned = 0
    with open_archive(opener) as stream:
        outer = ArchiveScanner(stream, name="image", chunk_size=config.chunk_size)
        try:
            for entry in outer:
                if not is_layer(entry):
                    continue
                scanned += 1
                logger.debug("Searching layer %s for %s", entry.name, target_path)
                layer = ArchiveScanner(
                    entry.content, name=entry.name, chunk_size=config.chunk_size
                )
                if layer.scan(lambda e: e.name == target_path) is not None:
                    logger.debug("Found %s in layer %s", target_path, entry.name)
                    return LayerReference(path=entry.name)
        except MalformedArchiveError as e:
            raise MalformedArchiveError(
                f"locate {target_path}: {e}", phase="locate", path=target_path
            ) from e

    raise FileNotFoundInAnyLayerError(
        f"{target_path} not found in any layer ({scanned} layers searched)",
        phase="locate",
        path=target_path,
    )
