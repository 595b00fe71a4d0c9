"""
Chunking of blobs into fixed-size pieces.

Chunkers expose operations to iteratively return chunks (similar to an
iterator) and to access a specific chunk directly by its index.
"""
import math
from typing import Iterator, Optional

from ...blob import is_blob_like
from ...exceptions import InvalidConfiguration, InvalidInput
from ..models import Chunk, DEFAULT_CHUNK_SIZE


class Chunker:
    """
    Fixed-size chunk producer.

    Splits a blob into chunks of at most ``chunk_size`` bytes; the last
    chunk holds the remainder. ``chunk_at()`` is a pure function of the
    index, ``next()`` walks an internal cursor.

    Example:
        >>> chunker = Chunker(BytesBlob(b"abcdefg"), chunk_size=2)
        >>> chunker.chunk_count()
        4
        >>> chunker.chunk_at(3).byte_length
        1
    """

    def __init__(self, blob, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize with a blob and chunk size.

        Args:
            blob: Blob-like object (integer ``size`` and ``slice()``)
            chunk_size: Size of each chunk in bytes

        Raises:
            InvalidInput: If blob is not blob-like
            InvalidConfiguration: If chunk_size is not a positive integer
        """
        if not is_blob_like(blob):
            raise InvalidInput("Chunker requires a Blob like object")
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise InvalidConfiguration(f"Chunk size must be a positive integer, got {chunk_size!r}")

        self._blob = blob
        self._chunk_size = chunk_size
        self._cursor = 0

    @property
    def chunk_size(self) -> int:
        """Returns the configured chunk size."""
        return self._chunk_size

    @property
    def cursor(self) -> int:
        """Returns the index next() will return."""
        return self._cursor

    def chunk_count(self) -> int:
        """Returns the number of chunks needed to completely split the blob."""
        return math.ceil(self._blob.size / self._chunk_size)

    def next(self) -> Optional[Chunk]:
        """
        Returns the next chunk, in the order chunks exist within the blob.

        Returns:
            The next chunk, or None once the blob is exhausted (and on
            every call after that)
        """
        chunk = self.chunk_at(self._cursor)
        if chunk is not None:
            self._cursor += 1
        return chunk

    def chunk_at(self, index: int) -> Optional[Chunk]:
        """
        Returns a specific chunk based on its index.

        Args:
            index: Zero-based chunk number

        Returns:
            The chunk, or None if index is out of range
        """
        if index < 0 or index >= self.chunk_count():
            return None

        start = index * self._chunk_size
        end = min(start + self._chunk_size, self._blob.size)

        return Chunk(
            index=index,
            offset=start,
            payload=self._blob.slice(start, end),
            byte_length=end - start
        )

    def __iter__(self) -> Iterator[Chunk]:
        """Iterate over every chunk from index 0, leaving the cursor alone."""
        for index in range(self.chunk_count()):
            yield self.chunk_at(index)

    def __len__(self) -> int:
        return self.chunk_count()
