"""
Upload manager.

Manages a pool of workers to upload a blob in parallel: assigns chunks to
idle workers, tracks in-flight and acknowledged chunks, and decides when
the upload is complete or has failed.
"""
import asyncio
from collections import deque
from functools import partial
from typing import Any, Callable, Dict, Optional, Set, Union

from ..blob import as_blob
from ..exceptions import InvalidInput, TransferFailure
from ..logging import get_logger
from ..transfer import Requester
from .models import Chunk, UploadOptions, UploadOutcome, UploadProgress, UploadSession
from .protocols import RequesterProtocol
from .strategies import (
    Chunker,
    ChunkEncoder,
    ExponentialBackoffStrategy,
    ImmediateRetryStrategy,
    RetryStrategy,
    load_public_key,
)
from .worker import UploadWorker

logger = get_logger('chunkup.upload.manager')


class UploadManager:
    """
    Manages workers to upload an arbitrary blob in parallel.

    All state transitions run on the event loop thread and receive the
    session they belong to; completions that arrive for a session that
    has already finished are ignored.

    One manager handles one upload at a time.

    Example:
        >>> manager = UploadManager({'endpoint': url, 'token': token})
        >>> outcome = await manager.upload(b'...', on_success, on_error)
    """

    def __init__(
        self,
        options: Union[UploadOptions, Dict[str, Any]],
        requester: Optional[RequesterProtocol] = None,
        retry_strategy: Optional[RetryStrategy] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None
    ):
        """
        Initialize upload manager.

        Args:
            options: Upload options (or a dict of them, camelCase keys allowed)
            requester: Transfer client shared by all workers
            retry_strategy: Delay policy between attempts (defaults follow
                the retry_backoff option)
            progress_callback: Optional callback for progress updates

        Raises:
            InvalidConfiguration: If the options are invalid
        """
        if not isinstance(options, UploadOptions):
            options = UploadOptions.from_dict(options)

        self._options = options
        self._public_key = load_public_key(options.encryption_public_key) if options.encrypt else None
        self._owns_requester = requester is None
        self._requester = requester or Requester(options.transfer)
        self._retry_strategy = retry_strategy or self._default_retry_strategy(options)
        self._progress_callback = progress_callback
        self._tasks: Set[asyncio.Task] = set()

        # sets a clean upload state
        self._reset()

    @staticmethod
    def _default_retry_strategy(options: UploadOptions) -> RetryStrategy:
        if options.retry_backoff:
            return ExponentialBackoffStrategy(
                base_delay=options.retry_base_delay,
                max_delay=options.retry_max_delay
            )
        return ImmediateRetryStrategy()

    @property
    def options(self) -> UploadOptions:
        """Returns the upload options."""
        return self._options

    @property
    def requester(self) -> RequesterProtocol:
        """Returns the transfer client."""
        return self._requester

    @property
    def session(self) -> UploadSession:
        """Returns the current upload session."""
        return self._session

    @property
    def in_progress(self) -> bool:
        """Returns True while an upload is running."""
        return self._session.in_progress

    def upload(
        self,
        blob,
        on_success: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[TransferFailure], None]] = None
    ) -> asyncio.Future:
        """
        Upload a blob.

        Must be called from a running event loop. Exactly one of on_success
        and on_error is invoked, and the returned future resolves with an
        UploadOutcome either way.

        Args:
            blob: Blob-like object, bytes, or a file path
            on_success: Callback invoked on successful upload
            on_error: Callback invoked on unsuccessful upload, with a
                TransferFailure whose message names the failing chunk

        Returns:
            Future resolving to an UploadOutcome

        Raises:
            InvalidInput: If blob is missing, malformed or empty, or an
                upload is already in progress
        """
        if blob is None:
            raise InvalidInput("Must specify a valid Blob like object")
        elif self._session.in_progress:
            raise InvalidInput(
                "UploadManager is currently uploading. Please wait until the current "
                "operation completes or use a different manager"
            )

        blob = as_blob(blob)
        if blob.size == 0:
            raise InvalidInput("Cannot upload an empty blob")

        loop = asyncio.get_running_loop()
        encoder = ChunkEncoder.from_options(self._options, self._public_key)
        chunker = Chunker(blob, self._options.chunk_size)

        session = self._session
        session.in_progress = True
        session.chunker = chunker
        session.encoder = encoder
        session.expected_chunk_count = chunker.chunk_count()
        session.total_bytes = blob.size
        session.future = loop.create_future()
        session.on_success = on_success
        session.on_error = on_error

        size_mb = blob.size / (1024 * 1024)
        logger.info(
            f"Starting upload: {size_mb:.2f} MB in {session.expected_chunk_count} chunks "
            f"(max {self._options.max_concurrent_connections} parallel uploads)"
        )

        if encoder.needs_preparation:
            self._spawn(session, self._prepare(session, blob))
        else:
            self._assign_workers(session)

        return session.future

    async def join(self) -> None:
        """Wait for every worker task, including orphaned ones of failed uploads."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """Wait for outstanding workers and close the requester if we own it."""
        await self.join()
        if self._owns_requester:
            await self._requester.close()

    async def __aenter__(self) -> 'UploadManager':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _prepare(self, session: UploadSession, blob) -> None:
        """Digest the blob, then start assigning chunks."""
        try:
            await session.encoder.prepare(blob)
        except OSError as e:
            logger.error(f"Could not prepare upload: {e}")
            self._finish(session, TransferFailure(None, e))
            return
        self._assign_workers(session)

    def _assign_workers(self, session: UploadSession) -> None:
        """
        Assigns chunks to idle workers until the pool or the chunks run out.
        """
        while session.idle_workers and not session.finished:
            chunk = session.chunker.next()
            if chunk is None:
                break

            worker = session.idle_workers.popleft()
            self._assign_worker_to_chunk(session, worker, chunk)
            session.next_chunk_index = chunk.index + 1

    def _assign_worker_to_chunk(
        self,
        session: UploadSession,
        worker: UploadWorker,
        chunk: Chunk
    ) -> None:
        """
        Assigns a specific chunk to a worker. Assumes that the worker is idle.
        """
        session.in_flight[chunk.index] = worker
        logger.debug(f"Assigned chunk {chunk.index} ({chunk.byte_length / 1024:.1f} KB at {chunk.offset})")

        self._spawn(session, worker.perform(
            chunk.index,
            chunk.payload,
            self._options.endpoint,
            self._options.token,
            partial(self._on_worker_success, session),
            partial(self._on_worker_failure, session),
            encoder=session.encoder
        ), chunk.index)

    def _spawn(self, session: UploadSession, coro, chunk_number: Optional[int] = None) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(partial(self._on_task_done, session, chunk_number))
        return task

    def _on_task_done(self, session: UploadSession, chunk_number: Optional[int], task: asyncio.Task) -> None:
        """Turn a task that died with an exception into a failed upload."""
        self._tasks.discard(task)

        if task.cancelled():
            error: BaseException = asyncio.CancelledError()
        else:
            error = task.exception()
            if error is None:
                return

        if session.finished:
            logger.error(f"Upload task raised after the upload finished: {error!r}")
            return

        if chunk_number in session.in_flight:
            self._release_worker(session, chunk_number)
        failure = TransferFailure(chunk_number, error)
        logger.error(failure.message)
        self._finish(session, failure)

    def _release_worker(self, session: UploadSession, chunk_number: int) -> None:
        """Move a worker from the in-flight map back to the idle pool."""
        worker = session.in_flight.pop(chunk_number)
        session.idle_workers.append(worker)

    def _on_worker_success(self, session: UploadSession, chunk_number: int) -> None:
        if session.finished:
            logger.debug(f"Ignoring chunk {chunk_number} of a finished upload")
            return

        chunk = session.chunker.chunk_at(chunk_number)
        self._release_worker(session, chunk_number)
        session.chunks_uploaded += 1
        session.uploaded_bytes += chunk.byte_length
        logger.debug(
            f"Successfully uploaded chunk {chunk_number} "
            f"({session.chunks_uploaded}/{session.expected_chunk_count})"
        )

        if self._progress_callback:
            self._progress_callback(session.progress())

        if session.chunks_uploaded < session.expected_chunk_count:
            self._assign_workers(session)
        else:
            self._finish(session)

    def _on_worker_failure(self, session: UploadSession, chunk_number: int, error: Exception) -> None:
        if session.finished:
            logger.debug(f"Ignoring failure of chunk {chunk_number} of a finished upload")
            return

        self._release_worker(session, chunk_number)
        failure = TransferFailure(chunk_number, error)
        logger.error(failure.message)
        self._finish(session, failure)

    def _finish(self, session: UploadSession, failure: Optional[TransferFailure] = None) -> None:
        """Resolve the caller's completion exactly once and reset state."""
        session.finished = True
        session.in_progress = False

        outcome = UploadOutcome(
            success=failure is None,
            chunks_uploaded=session.chunks_uploaded,
            expected_chunks=session.expected_chunk_count,
            error=failure
        )

        if session is self._session:
            self._reset()

        if failure is None:
            size_mb = session.total_bytes / (1024 * 1024)
            logger.info(f"All chunks uploaded successfully: {session.chunks_uploaded} chunks, {size_mb:.2f} MB")

        if session.future is not None and not session.future.done():
            session.future.set_result(outcome)

        if failure is None:
            if session.on_success:
                session.on_success()
        elif session.on_error:
            session.on_error(failure)

    def _generate_max_idle_workers(self) -> deque:
        """Creates max_concurrent_connections UploadWorker instances."""
        return deque(
            UploadWorker(
                max_attempts=self._options.max_retries_per_connection,
                requester=self._requester,
                retry_strategy=self._retry_strategy
            )
            for _ in range(self._options.max_concurrent_connections)
        )

    def _reset(self) -> None:
        """
        Sets a clean upload state, so that the manager is ready for the next upload.
        """
        self._session = UploadSession(idle_workers=self._generate_max_idle_workers())
