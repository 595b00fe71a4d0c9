"""
Upload facade.

Provides a simplified, awaitable interface for chunked uploads.
Follows Facade Pattern - hides the callbacks and worker pool of the
upload manager.
"""
import logging
from typing import Any, Callable, Dict, Optional, Union

from ..exceptions import TransferError
from ..logging import get_logger
from ..transfer import Requester
from .manager import UploadManager
from .models import UploadOptions, UploadOutcome, UploadProgress
from .protocols import RequesterProtocol
from .strategies import RetryStrategy

logger = get_logger('chunkup.upload')


class ChunkedUploader:
    """
    Simplified interface for chunked uploads.

    This is the main entry point for uploading blobs and files.

    Example:
        >>> async with ChunkedUploader(endpoint=url, token=token) as uploader:
        ...     outcome = await uploader.upload("backup.tar")
        ...     print(f"Uploaded {outcome.chunks_uploaded} chunks")
    """

    def __init__(
        self,
        options: Optional[Union[UploadOptions, Dict[str, Any]]] = None,
        requester: Optional[RequesterProtocol] = None,
        retry_strategy: Optional[RetryStrategy] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
        log_level: Optional[int] = None,
        **kwargs
    ):
        """
        Initialize upload facade.

        Args:
            options: Upload options (keyword arguments are used if omitted)
            requester: Optional shared transfer client
            retry_strategy: Optional retry strategy
            progress_callback: Optional callback for progress updates
            log_level: Optional level for the chunkup.upload logger
            **kwargs: UploadOptions fields (endpoint, token, chunk_size, ...)
        """
        if log_level is not None:
            logging.getLogger('chunkup.upload').setLevel(log_level)

        if options is None:
            options = UploadOptions.from_dict(kwargs)
        elif not isinstance(options, UploadOptions):
            options = UploadOptions.from_dict({**options, **kwargs})

        self._manager = UploadManager(
            options,
            requester=requester,
            retry_strategy=retry_strategy,
            progress_callback=progress_callback
        )

    @property
    def manager(self) -> UploadManager:
        """Returns the underlying upload manager."""
        return self._manager

    async def upload(self, source) -> UploadOutcome:
        """
        Upload a blob, bytes, or a file.

        Args:
            source: Blob-like object, bytes, or a file path

        Returns:
            Successful UploadOutcome

        Raises:
            InvalidInput: If source is not uploadable
            TransferFailure: If a chunk exhausted its attempts
        """
        outcome = await self._manager.upload(source)
        if not outcome.success:
            # let orphaned sibling transfers settle before surfacing the error
            await self._manager.join()
            raise outcome.error
        return outcome

    async def close(self) -> None:
        """Wait for outstanding transfers and release the HTTP session."""
        await self._manager.close()

    async def __aenter__(self) -> 'ChunkedUploader':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def request_upload_token(
    endpoint: str,
    requester: Optional[RequesterProtocol] = None,
    field: str = 'token'
) -> str:
    """
    Retrieve an upload token from an endpoint.

    A JSON object response is read at ``field``; any other response body
    is taken as the token itself.

    Args:
        endpoint: URL returning an upload token
        requester: Optional transfer client (a temporary one otherwise)
        field: JSON field holding the token

    Returns:
        Upload token

    Raises:
        TransferError: If the request fails or no token is returned
    """
    owns_requester = requester is None
    requester = requester or Requester()
    try:
        response = await requester.get(endpoint)
    finally:
        if owns_requester:
            await requester.close()

    if isinstance(response, dict):
        token = response.get(field)
    elif isinstance(response, (bytes, bytearray)):
        token = bytes(response).decode('utf-8', errors='replace').strip()
    else:
        token = response

    if isinstance(token, int) and not isinstance(token, bool):
        token = str(token)
    if not token or not isinstance(token, str):
        raise TransferError(TransferError.REJECTED, f"No upload token returned by {endpoint}")

    logger.debug(f"Upload token received from {endpoint}: {token[:8]}...")
    return token
