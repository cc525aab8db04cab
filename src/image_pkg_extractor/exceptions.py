"""Custom exceptions for the image package extractor."""

from typing import Optional


class ExtractorError(Exception):
    """Base exception for all extraction errors.

    Args:
        message: Human readable description
        phase: Operation that failed (e.g. "locate", "extract", "write")
        path: Target path inside the layer, if known
        layer: Layer entry name inside the outer archive, if known
    """

    def __init__(
        self,
        message: str,
        *,
        phase: Optional[str] = None,
        path: Optional[str] = None,
        layer: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.phase = phase
        self.path = path
        self.layer = layer


class OpenFailedError(ExtractorError):
    """Raised when the archive source cannot produce a stream."""

    pass


class MalformedArchiveError(ExtractorError):
    """Raised when a tar header or entry cannot be parsed."""

    pass


class FileNotFoundInAnyLayerError(ExtractorError):
    """Raised when no layer of the image contains the target path."""

    pass


class FileNotFoundInLayerError(ExtractorError):
    """Raised when the identified layer does not yield the target path."""

    pass


class LinkDepthExceededError(ExtractorError):
    """Raised when link resolution exceeds the configured hop bound."""

    pass


SymlinkCycleError = LinkDepthExceededError


class WriteFailedError(ExtractorError):
    """Raised when extracted content cannot be written to its destination."""

    pass


class ValidationError(ExtractorError):
    """Raised when the image manifest is missing or invalid."""

    pass
