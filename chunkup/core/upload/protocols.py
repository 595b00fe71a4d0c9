"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection.
"""
from typing import Any, Optional, Protocol


class BlobLike(Protocol):
    """Protocol for blobs: a sliceable payload with a known byte length."""

    @property
    def size(self) -> int:
        """Returns the size in bytes."""
        ...

    def slice(self, start: int, end: Optional[int] = None) -> 'BlobLike':
        """Returns the sub-range [start, end) as a blob of the same type."""
        ...

    async def read(self) -> bytes:
        """Returns the blob bytes."""
        ...


class RequesterProtocol(Protocol):
    """Protocol for the transfer client used by workers."""

    async def post(self, endpoint: str, body: Any = None, **options) -> Any:
        """
        Send one POST request.

        Raises:
            TransferError: If the request fails
        """
        ...

    async def get(self, endpoint: str, params: Any = None, **options) -> Any:
        """Send one GET request."""
        ...

    async def close(self) -> None:
        """Release the underlying HTTP session."""
        ...
