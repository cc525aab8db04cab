"""Image Package Extractor - pull a single file out of a saved container image."""

__version__ = "0.1.0"

from .core.daemon import check_daemon_connectivity, save_image
from .core.opener import (
    BytesOpener,
    CommandOpener,
    DockerSaveOpener,
    FileOpener,
    Opener,
    open_archive,
)
from .core.types import DaemonConfig, ExtractorConfig
from .exceptions import (
    ExtractorError,
    FileNotFoundInAnyLayerError,
    FileNotFoundInLayerError,
    LinkDepthExceededError,
    MalformedArchiveError,
    OpenFailedError,
    SymlinkCycleError,
    ValidationError,
    WriteFailedError,
)
from .fetch import fetch_file, save_file
from .package import fetch_file_from_tar, fetch_package_content, save_package
from .tar.extractor import ExtractedFile, extract_file, resolve_link
from .tar.locator import locate_layer
from .tar.models import ArchiveEntry, EntryKind, LayerReference, ResolvedTarget
from .tar.scanner import ArchiveScanner
from .utils.sink import write_to

__all__ = [
    # Orchestration
    "fetch_file",
    "save_file",
    # Async API
    "fetch_package_content",
    "save_package",
    "fetch_file_from_tar",
    "save_image",
    "check_daemon_connectivity",
    # Building blocks
    "ArchiveScanner",
    "locate_layer",
    "extract_file",
    "resolve_link",
    "write_to",
    "open_archive",
    # Openers
    "Opener",
    "BytesOpener",
    "FileOpener",
    "CommandOpener",
    "DockerSaveOpener",
    # Types
    "ExtractorConfig",
    "DaemonConfig",
    "ArchiveEntry",
    "EntryKind",
    "LayerReference",
    "ResolvedTarget",
    "ExtractedFile",
    # Exceptions
    "ExtractorError",
    "OpenFailedError",
    "MalformedArchiveError",
    "FileNotFoundInAnyLayerError",
    "FileNotFoundInLayerError",
    "LinkDepthExceededError",
    "SymlinkCycleError",
    "WriteFailedError",
    "ValidationError",
]
