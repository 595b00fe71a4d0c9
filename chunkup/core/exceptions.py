"""
Custom exceptions for chunked uploads.

This module defines the exception classes raised by the chunker, the
transfer client, the upload workers and the upload manager.
"""
from typing import Optional


class ChunkupError(Exception):
    """Base exception for all chunkup errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class InvalidConfiguration(ChunkupError, ValueError):
    """Exception raised when upload options or chunk sizes are invalid."""
    pass


class InvalidInput(ChunkupError, ValueError):
    """Exception raised for a missing or malformed blob, or a busy manager."""
    pass


class TransferError(ChunkupError):
    """
    Exception raised when a single HTTP request fails.

    Attributes:
        reason: "network" for transport failures, "rejected" for non-2xx responses
        status: HTTP status code (if a response was received)
    """

    NETWORK = 'network'
    REJECTED = 'rejected'

    def __init__(
        self,
        reason: str,
        message: str,
        status: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            reason: Failure class ("network" or "rejected")
            message: Error message
            status: HTTP status code (if available)
        """
        self.reason = reason
        self.status = status
        super().__init__(message)


class TransferFailure(ChunkupError):
    """
    Exception describing the terminal failure of an upload.

    Raised (or reported) once a chunk has exhausted all of its attempts.
    """

    def __init__(
        self,
        chunk_number: Optional[int],
        cause: BaseException
    ) -> None:
        """
        Initialize the exception.

        Args:
            chunk_number: Index of the chunk that failed (None if the upload
                failed before any chunk was sent)
            cause: Underlying error
        """
        self.chunk_number = chunk_number
        self.cause = cause
        cause_message = getattr(cause, 'message', None) or str(cause)
        if chunk_number is None:
            message = f"There was an issue preparing the upload. Error: {cause_message}"
        else:
            message = f"There was an issue uploading chunk {chunk_number}. Error: {cause_message}"
        super().__init__(message)
