"""Archive openers.

An opener is any zero-argument callable returning a fresh binary stream that
starts at offset 0 of a saved image archive. Locating and extracting a file
need two passes over the archive, so the opener is invoked more than once and
every call must yield byte-identical data.
"""

import io
import logging
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Sequence, Union

from ..exceptions import ExtractorError, OpenFailedError

logger = logging.getLogger(__name__)

Opener = Callable[[], BinaryIO]


class BytesOpener:
    """Opener over an in-memory archive."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def __call__(self) -> BinaryIO:
        return io.BytesIO(self.data)


class FileOpener:
    """Opener over an archive file on disk, one independent handle per call."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def __call__(self) -> BinaryIO:
        try:
            return open(self.path, "rb")
        except OSError as e:
            raise OpenFailedError(f"Cannot open archive {self.path}: {e}") from e


class _ProcessStream(io.RawIOBase):
    """stdout of a running process; the exit status is checked at end of stream."""

    def __init__(self, process: subprocess.Popen, stderr: BinaryIO, argv: List[str]) -> None:
        super().__init__()
        self._process = process
        self._stderr = stderr
        self._argv = argv
        self._eof = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._eof:
            return 0
        count = self._process.stdout.readinto(buffer)
        if not count:
            self._eof = True
            self._check_exit()
            return 0
        return count

    def _check_exit(self) -> None:
        returncode = self._process.wait()
        if returncode != 0:
            self._stderr.seek(0)
            message = self._stderr.read().decode("utf-8", "replace").strip()
            raise OpenFailedError(
                f"Command '{' '.join(self._argv)}' failed with exit code "
                f"{returncode}: {message}"
            )

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._process.poll() is None and not self._eof:
                logger.debug("Terminating %s before end of output", self._argv[0])
                self._process.kill()
            self._process.stdout.close()
            self._process.wait()
            self._stderr.close()
        finally:
            super().close()


class CommandOpener:
    """Opener streaming the standard output of a command, run anew per call."""

    def __init__(self, argv: Sequence[str]) -> None:
        if not argv:
            raise ValueError("Command must not be empty")
        self.argv = list(argv)

    def __call__(self) -> BinaryIO:
        stderr = tempfile.TemporaryFile()
        try:
            process = subprocess.Popen(
                self.argv, stdout=subprocess.PIPE, stderr=stderr
            )
        except OSError as e:
            stderr.close()
            raise OpenFailedError(f"Cannot run '{' '.join(self.argv)}': {e}") from e
        logger.debug("Started %s (pid %d)", " ".join(self.argv), process.pid)
        return _ProcessStream(process, stderr, self.argv)


class DockerSaveOpener(CommandOpener):
    """Opener running ``docker save <image>`` for every pass over the archive."""

    def __init__(self, image: str, docker: str = "docker") -> None:
        if not image:
            raise ValueError("Please provide an image to save")
        super().__init__([docker, "save", image])
        self.image = image


@contextmanager
def open_archive(opener: Opener) -> Iterator[BinaryIO]:
    """Invoke ``opener`` and close the stream it returns on exit.

    Raises:
        OpenFailedError: If the opener fails
    """
    try:
        stream = opener()
    except ExtractorError:
        raise
    except Exception as e:
        raise OpenFailedError(f"Failed to open archive: {e}", phase="open") from e
    try:
        yield stream
    finally:
        stream.close()
