"""Forward-only tar stream scanner.

Entries are read with :mod:`tarfile` in stream mode (``"r|"``), so any object
with a ``read(n)`` method works: pipes, sockets and the content of another tar
entry alike. Nothing is ever seeked backwards; unread entry content and block
padding are consumed by reading.

Stream mode on its own ends the archive quietly when a header is damaged or
cut short. ``_StrictTarInfo`` turns those cases into errors so that a truncated
image is never mistaken for a complete one.
"""

import io
import logging
import tarfile
from typing import BinaryIO, Callable, Iterator, Optional

from ..exceptions import MalformedArchiveError
from .models import ArchiveEntry, EntryKind

logger = logging.getLogger(__name__)

# Types whose header size field does not describe data that follows.
_NO_DATA_TYPES = (
    tarfile.DIRTYPE,
    tarfile.SYMTYPE,
    tarfile.LNKTYPE,
    tarfile.CHRTYPE,
    tarfile.BLKTYPE,
    tarfile.FIFOTYPE,
)

EntryPredicate = Callable[[ArchiveEntry], bool]


class _StrictTarInfo(tarfile.TarInfo):
    """TarInfo that reports damaged headers instead of ending the archive.

    A zero block, or a clean end of stream exactly on a header boundary, still
    ends the archive.
    """

    @classmethod
    def fromtarfile(cls, tar):
        try:
            return super().fromtarfile(tar)
        except tarfile.EmptyHeaderError:
            if tar.fileobj.tell() == 0:
                # empty stream: an archive without entries
                return None
            raise
        except tarfile.TruncatedHeaderError as e:
            raise tarfile.ReadError(f"truncated header at offset {tar.offset}") from e
        except tarfile.InvalidHeaderError as e:
            raise tarfile.ReadError(f"invalid header at offset {tar.offset}: {e}") from e


class EntryReader(io.RawIOBase):
    """Content of the current tar entry.

    Read errors of the underlying archive are raised as MalformedArchiveError.
    """

    def __init__(self, name: str, fileobj: BinaryIO) -> None:
        super().__init__()
        self._name = name
        self._fileobj = fileobj

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError(f"Content of {self._name} is no longer readable")
        try:
            return self._fileobj.readinto(buffer)
        except tarfile.TarError as e:
            raise MalformedArchiveError(
                f"Unexpected end of data in entry {self._name}: {e}"
            ) from e

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._fileobj.close()
        finally:
            super().close()


class ArchiveScanner:
    """Iterate over the entries of a tar stream.

    Args:
        stream: Binary stream positioned at the start of a tar archive
        name: Label used in error messages
        chunk_size: Read size used on the underlying stream
    """

    def __init__(
        self,
        stream: BinaryIO,
        name: str = "<archive>",
        chunk_size: int = 64 * 1024,
    ) -> None:
        self._stream = stream
        self.name = name
        self.chunk_size = chunk_size
        self._tar: Optional[tarfile.TarFile] = None
        self._current: Optional[ArchiveEntry] = None
        self._done = False

    def __iter__(self) -> Iterator[ArchiveEntry]:
        while True:
            entry = self.next()
            if entry is None:
                return
            yield entry

    def scan(self, predicate: EntryPredicate) -> Optional[ArchiveEntry]:
        """Advance until ``predicate`` accepts an entry.

        Returns:
            The matching entry, or None once the end of the archive is reached
        """
        for entry in self:
            if predicate(entry):
                return entry
        return None

    def next(self) -> Optional[ArchiveEntry]:
        """Return the next entry, or None at the end of the archive.

        Raises:
            MalformedArchiveError: If a header is truncated or invalid, or the
                archive ends inside entry content
        """
        if self._done:
            return None
        self._finish_current()

        try:
            if self._tar is None:
                self._tar = tarfile.open(
                    fileobj=self._stream,
                    mode="r|",
                    bufsize=self.chunk_size,
                    tarinfo=_StrictTarInfo,
                    encoding="utf-8",
                    errors="surrogateescape",
                )
            member = self._tar.next()
        except tarfile.TarError as e:
            raise MalformedArchiveError(f"{self.name}: {e}") from e

        if member is None:
            logger.debug("%s: end of archive", self.name)
            self._done = True
            return None
        if member.size < 0:
            raise MalformedArchiveError(
                f"{self.name}: negative size {member.size} for {member.name} "
                f"at offset {member.offset}"
            )

        kind = EntryKind.from_tar_type(member.type)
        size = 0 if member.type in _NO_DATA_TYPES else member.size
        content = None
        if kind is EntryKind.REGULAR_FILE:
            content = EntryReader(member.name, self._tar.extractfile(member))

        entry = ArchiveEntry(
            name=member.name,
            kind=kind,
            size=size,
            link_target=member.linkname if kind.is_link else "",
            content=content,
        )
        self._current = entry
        logger.debug(
            "%s: entry %s (%s, %d bytes) at offset %d",
            self.name,
            entry.name,
            kind.value,
            size,
            member.offset,
        )
        return entry

    def _finish_current(self) -> None:
        # tarfile skips whatever the caller left unread on the next header read
        entry = self._current
        if entry is None:
            return
        self._current = None
        if entry.content is not None:
            entry.content.close()
