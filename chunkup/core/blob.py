"""
Blob adapters.

A blob is any sliceable binary payload with a known byte length. The
chunker only relies on ``size`` and ``slice()``; workers call ``read()``
to materialise a chunk's bytes right before sending it.
"""
from pathlib import Path
from typing import Optional, Union

import aiofiles

from .exceptions import InvalidInput
from .logging import get_logger

logger = get_logger('chunkup.upload.blob')

BlobSource = Union[bytes, bytearray, memoryview, str, Path, 'BytesBlob', 'FileBlob']


class BytesBlob:
    """
    In-memory blob.

    Slices share the underlying buffer through ``memoryview``, so chunking
    a large bytes object does not copy it.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        view = memoryview(data)
        self._data = view if view.format == 'B' else view.cast('B')

    @property
    def size(self) -> int:
        """Returns blob size in bytes."""
        return self._data.nbytes

    def slice(self, start: int, end: Optional[int] = None) -> 'BytesBlob':
        """Return the sub-range [start, end) as a new BytesBlob."""
        return BytesBlob(self._data[start:end])

    async def read(self) -> bytes:
        """Returns the blob bytes."""
        return self._data.tobytes()

    def __repr__(self) -> str:
        return f"BytesBlob(size={self.size})"


class FileBlob:
    """
    File-backed blob.

    Holds a path and a byte window over it; nothing is read until
    ``read()`` is awaited. Uses aiofiles for non-blocking I/O.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        offset: int = 0,
        length: Optional[int] = None
    ):
        """
        Initialize a file blob.

        Args:
            file_path: Path to the file
            offset: Start of the window in bytes
            length: Window length in bytes (defaults to the rest of the file)

        Raises:
            InvalidInput: If the path is missing or not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise InvalidInput(f"File not found: {path}")
        if not path.is_file():
            raise InvalidInput(f"Path is not a file: {path}")

        file_size = path.stat().st_size
        offset = min(max(offset, 0), file_size)
        if length is None:
            length = file_size - offset

        self._path = path
        self._offset = offset
        self._length = max(0, min(length, file_size - offset))

    @property
    def path(self) -> Path:
        """Returns the file path."""
        return self._path

    @property
    def offset(self) -> int:
        """Returns the window offset within the file."""
        return self._offset

    @property
    def size(self) -> int:
        """Returns window size in bytes."""
        return self._length

    def slice(self, start: int, end: Optional[int] = None) -> 'FileBlob':
        """Return the sub-range [start, end) of this window as a new FileBlob."""
        start, end, _ = slice(start, end).indices(self._length)
        return self._window(self._path, self._offset + start, max(0, end - start))

    @classmethod
    def _window(cls, path: Path, offset: int, length: int) -> 'FileBlob':
        """
        Build a window without touching the filesystem.

        The bounds must already lie within a validated window; a file that
        has since disappeared surfaces as OSError from read().
        """
        blob = cls.__new__(cls)
        blob._path = path
        blob._offset = offset
        blob._length = length
        return blob

    async def read(self) -> bytes:
        """
        Read the window from disk.

        Raises:
            OSError: If the file cannot be read
        """
        async with aiofiles.open(self._path, 'rb') as f:
            await f.seek(self._offset)
            data = await f.read(self._length)
        logger.debug(f"Read {self._path.name}: {self._offset}-{self._offset + len(data)} ({len(data)} bytes)")
        return data

    def __repr__(self) -> str:
        return f"FileBlob(path={str(self._path)!r}, offset={self._offset}, size={self._length})"


def is_blob_like(value) -> bool:
    """Returns True if value exposes an integer size and a slice() method."""
    size = getattr(value, 'size', None)
    return (
        isinstance(size, int)
        and not isinstance(size, bool)
        and callable(getattr(value, 'slice', None))
    )


def as_blob(source: BlobSource):
    """
    Adapt an upload source to a blob.

    Args:
        source: bytes-like object, file path, or an object that already
            satisfies the blob protocol

    Returns:
        Blob-like object

    Raises:
        InvalidInput: If source cannot be used as a blob
    """
    if source is None:
        raise InvalidInput("Must specify a valid Blob like object")
    if isinstance(source, (bytes, bytearray, memoryview)):
        return BytesBlob(source)
    if isinstance(source, (str, Path)):
        return FileBlob(source)
    if is_blob_like(source) and callable(getattr(source, 'read', None)):
        return source
    raise InvalidInput(f"Must specify a valid Blob like object, got {type(source).__name__}")
