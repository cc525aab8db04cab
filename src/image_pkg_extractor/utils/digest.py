"""Digest calculation utilities."""

import hashlib
from typing import Union


def calculate_digest(data: Union[bytes, bytearray], algorithm: str = "sha256") -> str:
    """Calculate digest of data.

    Args:
        data: Data to hash
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Digest string in format "algorithm:hex"

    Raises:
        ValueError: If algorithm is not supported
        ValueError: If data is not bytes-like
    """
    if not isinstance(data, (bytes, bytearray)):
        raise ValueError("Data must be bytes or bytearray")

    hasher = new_hasher(algorithm)
    hasher.update(data)
    return format_digest(hasher)


def new_hasher(algorithm: str = "sha256") -> "hashlib._Hash":
    """Create an incremental hasher for ``algorithm``."""
    if algorithm not in hashlib.algorithms_available:
        raise ValueError(f"Unsupported algorithm: {algorithm}")
    return hashlib.new(algorithm)


def format_digest(hasher: "hashlib._Hash") -> str:
    """Render a hasher's state as "algorithm:hex"."""
    return f"{hasher.name}:{hasher.hexdigest()}"
