"""Layer list extraction from the manifest.json of a saved image."""

import json
import logging
from typing import Any, List

from ..core.opener import Opener, open_archive
from ..exceptions import MalformedArchiveError, ValidationError
from .models import EntryKind
from .scanner import ArchiveScanner

logger = logging.getLogger(__name__)


def parse_manifest_layers(manifest_content: bytes) -> List[str]:
    """Return the ``Layers`` list of the first manifest entry.

    Args:
        manifest_content: Raw manifest.json bytes

    Returns:
        Layer entry names, in manifest order

    Raises:
        ValidationError: If the manifest is not valid
    """
    try:
        manifest_data: Any = json.loads(manifest_content.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ValidationError(f"Cannot decode manifest.json: {e}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in manifest.json: {e}") from e

    if not isinstance(manifest_data, list) or not manifest_data:
        raise ValidationError("manifest.json must be a non-empty array")

    first_manifest = manifest_data[0]
    if not isinstance(first_manifest, dict):
        raise ValidationError("Invalid manifest entry structure")

    layers = first_manifest.get("Layers")
    if not isinstance(layers, list) or not all(isinstance(layer, str) for layer in layers):
        raise ValidationError("Layers must be a list of entry names")

    return layers


def read_manifest_layers(opener: Opener, manifest_name: str = "manifest.json") -> List[str]:
    """Scan the outer archive for the manifest and return its layer list.

    Raises:
        ValidationError: If the manifest is missing or invalid
        MalformedArchiveError: If the archive cannot be parsed
        OpenFailedError: If the archive cannot be opened
    """
    with open_archive(opener) as stream:
        scanner = ArchiveScanner(stream, name="image")
        try:
            entry = scanner.scan(
                lambda e: e.name == manifest_name and e.kind is EntryKind.REGULAR_FILE
            )
            if entry is None:
                raise ValidationError(
                    f"{manifest_name} not found in image archive", phase="manifest"
                )
            content = entry.content.read()
        except MalformedArchiveError as e:
            raise MalformedArchiveError(f"read {manifest_name}: {e}", phase="manifest") from e

    layers = parse_manifest_layers(content)
    logger.debug("Manifest lists %d layers", len(layers))
    return layers
