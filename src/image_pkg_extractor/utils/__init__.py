"""Utility functions for the image package extractor."""

from .digest import calculate_digest
from .sink import write_bytes_async, write_to

__all__ = ["calculate_digest", "write_to", "write_bytes_async"]
