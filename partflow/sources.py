"""Content sources and bounded part views.

A source describes the full payload of an upload. Each part of the upload
gets a PartContent view limited to exactly the bytes of that part. Views
borrow the underlying file or stream and never close it.
"""

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from partflow.const import DEFAULT_READ_CHUNK_SIZE
from partflow.exceptions import PartOrderError, TruncatedSourceError

logger = logging.getLogger(__name__)


class PartContent(ABC):
    """Readable view over the bytes of a single part."""

    def __init__(self, size: int) -> None:
        """Initialize the view.

        Args:
            size: Number of bytes in the part.
        """
        self.size = size
        self._position = 0
        self._closed = False

    @property
    def remaining(self) -> int:
        """Bytes of the part not yet read."""
        return self.size - self._position

    def read(self, n: int = -1) -> bytes:
        """Read up to n bytes of the part, or the rest of it when n < 0."""
        if self._closed:
            raise ValueError("I/O operation on closed part content")
        if n < 0 or n > self.remaining:
            n = self.remaining
        if n == 0:
            return b""
        data = self._read(n)
        self._position += len(data)
        return data

    def iter_chunks(self, chunk_size: int = DEFAULT_READ_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the rest of the part in pieces of at most chunk_size bytes."""
        while True:
            chunk = self.read(chunk_size)
            if not chunk:
                return
            yield chunk

    def close(self) -> None:
        """Release resources held by the view (not the source itself)."""
        self._closed = True

    def __enter__(self) -> "PartContent":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abstractmethod
    def _read(self, n: int) -> bytes:
        """Read exactly n bytes (n > 0 and n <= remaining)."""


class FileRangeContent(PartContent):
    """Absolute byte range of a file.

    The file handle is opened on first read, so creating a view costs nothing
    and views of one file can be read in any order or in parallel.
    """

    def __init__(self, path: Path, offset: int, size: int) -> None:
        super().__init__(size)
        self.path = path
        self.offset = offset
        self._file: BinaryIO | None = None

    def _read(self, n: int) -> bytes:
        if self._file is None:
            self._file = open(self.path, "rb")
            self._file.seek(self.offset)
        data = self._file.read(n)
        if len(data) < n:
            raise TruncatedSourceError(self.size, self._position + len(data))
        return data

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
        super().close()


class StreamSegmentContent(PartContent):
    """Bytes [offset, offset + size) of a forward-only stream.

    Segments of the same stream must be read in part order. Bytes before
    the offset that nothing has read yet (parts completed in an earlier
    attempt) are discarded on the first read.
    """

    def __init__(self, source: "SequentialSource", offset: int, size: int) -> None:
        super().__init__(size)
        self.offset = offset
        self._source = source

    def _read(self, n: int) -> bytes:
        data = self._source.read_at(self.offset + self._position, n)
        if len(data) < n:
            raise TruncatedSourceError(self.size, self._position + len(data))
        return data


class ContentSource(ABC):
    """Full payload of an upload."""

    is_seekable: bool = False

    def __init__(self, content_length: int | None) -> None:
        self.content_length = content_length

    @abstractmethod
    def open_part(self, offset: int, size: int) -> PartContent:
        """Return a view over [offset, offset + size) of the payload."""


class SeekableSource(ContentSource):
    """A file on disk, addressable at any offset."""

    is_seekable = True

    def __init__(self, path: str | os.PathLike, content_length: int | None = None):
        """Initialize the source.

        Args:
            path: Path of the file to upload.
            content_length: Bytes to upload; defaults to the file size.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        self.path = Path(path)
        if content_length is None:
            content_length = self.path.stat().st_size
        super().__init__(content_length)

    def open_part(self, offset: int, size: int) -> PartContent:
        return FileRangeContent(self.path, offset, size)

    def __repr__(self) -> str:
        return f"SeekableSource({str(self.path)!r}, {self.content_length})"


class SequentialSource(ContentSource):
    """A forward-only binary stream with a known total length.

    Tracks how many bytes have been consumed from the stream so part views
    can skip ahead to their offset.
    """

    def __init__(self, stream: BinaryIO, content_length: int | None) -> None:
        super().__init__(content_length)
        self.stream = stream
        self.consumed = 0

    def open_part(self, offset: int, size: int) -> PartContent:
        return StreamSegmentContent(self, offset, size)

    def read_at(self, offset: int, n: int) -> bytes:
        """Read up to n bytes starting at offset, discarding bytes before it.

        Returns fewer than n bytes only when the stream ends.

        Raises:
            PartOrderError: If bytes at or past offset were already consumed.
        """
        if offset < self.consumed:
            raise PartOrderError(offset, self.consumed)

        while self.consumed < offset:
            skipped = self.stream.read(
                min(offset - self.consumed, DEFAULT_READ_CHUNK_SIZE)
            )
            if not skipped:
                return b""
            self.consumed += len(skipped)

        buffer = bytearray()
        while len(buffer) < n:
            data = self.stream.read(n - len(buffer))
            if not data:
                break
            buffer.extend(data)
        self.consumed += len(buffer)
        return bytes(buffer)

    def __repr__(self) -> str:
        return f"SequentialSource(<stream>, {self.content_length})"
