"""Data models for saved image archive handling."""

import enum
import io
import tarfile
from dataclasses import dataclass, field
from typing import Optional


class EntryKind(enum.Enum):
    """Kind of a tar entry."""

    REGULAR_FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    OTHER = "other"

    @classmethod
    def from_tar_type(cls, type_flag: bytes) -> "EntryKind":
        """Map a raw tar type flag to an entry kind."""
        if type_flag in tarfile.REGULAR_TYPES and type_flag != tarfile.GNUTYPE_SPARSE:
            return cls.REGULAR_FILE
        if type_flag == tarfile.DIRTYPE:
            return cls.DIRECTORY
        if type_flag == tarfile.SYMTYPE:
            return cls.SYMLINK
        if type_flag == tarfile.LNKTYPE:
            return cls.HARDLINK
        return cls.OTHER

    @property
    def is_link(self) -> bool:
        return self in (EntryKind.SYMLINK, EntryKind.HARDLINK)


@dataclass
class ArchiveEntry:
    """A single entry of a tar stream.

    ``content`` is set for regular files only, and is only readable until the
    scanner that produced the entry advances to the next one.
    """

    name: str
    kind: EntryKind
    size: int
    link_target: str = ""
    content: Optional[io.RawIOBase] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class LayerReference:
    """Name of the layer entry inside the outer archive."""

    path: str


@dataclass(frozen=True)
class ResolvedTarget:
    """Final regular file path after following links."""

    layer: LayerReference
    path: str
    depth: int = 0
