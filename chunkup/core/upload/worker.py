"""
Upload worker.

Uploads one chunk at a time to an endpoint via HTTP POST, retrying
failed attempts up to a ceiling.
"""
import time
from typing import Any, Callable, Dict, Optional

from ..exceptions import InvalidConfiguration, TransferError
from ..logging import get_logger
from ..transfer import Requester
from .protocols import RequesterProtocol
from .strategies import ChunkEncoder, ImmediateRetryStrategy, RetryStrategy

logger = get_logger('chunkup.upload.worker')

DEFAULT_MAX_ATTEMPTS = 3


class UploadWorker:
    """
    Uploads a chunk to a specified route via HTTP POST.

    A worker holds at most one assignment at a time. Its attempt counter is
    reset at construction, at the start of every assignment and after a
    success; for every ``perform()`` exactly one of ``on_success`` and
    ``on_failure`` is invoked.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        requester: Optional[RequesterProtocol] = None,
        retry_strategy: Optional[RetryStrategy] = None
    ):
        """
        Initialize worker.

        Args:
            max_attempts: Maximum number of attempts per chunk
            requester: Transfer client (a private Requester if not provided)
            retry_strategy: Delay policy between attempts (no delay by default)
        """
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
            raise InvalidConfiguration(f"max_attempts must be at least 1, got {max_attempts!r}")

        self._max_attempts = max_attempts
        self._requester = requester or Requester()
        self._retry_strategy = retry_strategy or ImmediateRetryStrategy()
        self._attempts = 0
        self._busy = False

    @property
    def max_attempts(self) -> int:
        """Returns the attempt ceiling."""
        return self._max_attempts

    @property
    def attempts(self) -> int:
        """Returns the number of failed attempts of the current assignment."""
        return self._attempts

    @property
    def busy(self) -> bool:
        """Returns True while an assignment is being performed."""
        return self._busy

    async def perform(
        self,
        identifier: Any,
        data: Any,
        endpoint: str,
        token: str,
        on_success: Optional[Callable[[Any], None]] = None,
        on_failure: Optional[Callable[[Any, Exception], None]] = None,
        encoder: Optional[ChunkEncoder] = None
    ) -> bool:
        """
        POST data to the endpoint.

        The request body is ``{chunkNumber: identifier, data: <bytes>,
        token: token}`` plus any fields added by the encoder.

        Args:
            identifier: Label of the data (i.e. the chunk number)
            data: Blob-like payload (or raw bytes)
            endpoint: URL to POST to
            token: Upload token included in the request body
            on_success: Invoked with identifier when the upload succeeds
            on_failure: Invoked with identifier and the last error once
                max_attempts attempts have failed, or at once if the payload
                cannot be read or encoded
            encoder: Optional checksum/encryption encoder

        Returns:
            True on success, False on terminal failure

        Raises:
            RuntimeError: If the worker is already performing an assignment
        """
        if self._busy:
            raise RuntimeError("UploadWorker is already performing an assignment")

        self._busy = True
        self._reset()
        try:
            while True:
                attempt_start = time.time()
                try:
                    body = await self._build_body(identifier, data, token, encoder)
                    await self._requester.post(endpoint, body=body)
                except (TransferError, OSError) as e:
                    self._attempts += 1
                    elapsed = time.time() - attempt_start

                    if not self._retry_strategy.should_retry(self._attempts, self._max_attempts):
                        logger.error(
                            f"Chunk {identifier} failed after {self._attempts} attempts "
                            f"({elapsed:.2f}s last attempt): {e}"
                        )
                        self._busy = False
                        if on_failure:
                            on_failure(identifier, e)
                        return False

                    logger.warning(
                        f"Chunk {identifier} attempt {self._attempts}/{self._max_attempts} "
                        f"failed after {elapsed:.2f}s: {e}"
                    )
                    await self._retry_strategy.wait(self._attempts)
                    continue
                except Exception as e:
                    # a payload that cannot be read or encoded will not recover on retry
                    self._attempts += 1
                    logger.error(f"Chunk {identifier} could not be sent: {e!r}")
                    self._busy = False
                    if on_failure:
                        on_failure(identifier, e)
                    return False

                elapsed = time.time() - attempt_start
                logger.debug(f"Chunk {identifier} uploaded in {elapsed:.2f}s")
                self._reset()
                self._busy = False
                if on_success:
                    on_success(identifier)
                return True
        finally:
            self._busy = False

    async def _build_body(
        self,
        identifier: Any,
        data: Any,
        token: str,
        encoder: Optional[ChunkEncoder]
    ) -> Dict[str, Any]:
        """Read the payload and build the request body."""
        if isinstance(data, str):
            payload = data.encode('utf-8')
        elif isinstance(data, (bytes, bytearray, memoryview)):
            payload = bytes(data)
        else:
            payload = await data.read()

        extra: Dict[str, str] = {}
        if encoder is not None:
            payload, extra = encoder.encode(identifier, payload)

        return {
            'chunkNumber': identifier,
            'data': payload,
            'token': token,
            **extra,
        }

    def _reset(self) -> None:
        """Resets the attempt counter."""
        self._attempts = 0

    def __repr__(self) -> str:
        state = 'busy' if self._busy else 'idle'
        return f"UploadWorker({state}, attempts={self._attempts}/{self._max_attempts})"
