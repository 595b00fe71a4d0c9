"""
chunkup - Async chunked uploads over HTTP.

Usage:
    >>> from chunkup import ChunkedUploader
    >>>
    >>> async with ChunkedUploader(endpoint="https://example.com/upload", token="abc") as uploader:
    ...     outcome = await uploader.upload("backup.tar")
    ...     print(outcome.chunks_uploaded)
"""
from .core import (
    BytesBlob,
    FileBlob,
    ChunkupError,
    InvalidConfiguration,
    InvalidInput,
    TransferError,
    TransferFailure,
)
from .core.logging import setup_logging
from .core.transfer import Requester, TransferConfig, TimeoutConfig, SSLConfig
from .core.upload import (
    ChunkedUploader,
    UploadManager,
    UploadWorker,
    Chunker,
    UploadOptions,
    UploadOutcome,
    UploadProgress,
    ExponentialBackoffStrategy,
    ImmediateRetryStrategy,
    request_upload_token,
)

__version__ = '1.0.0'

__all__ = [
    'ChunkedUploader',
    'UploadManager',
    'UploadWorker',
    'Chunker',
    'UploadOptions',
    'UploadOutcome',
    'UploadProgress',
    'ExponentialBackoffStrategy',
    'ImmediateRetryStrategy',
    'request_upload_token',
    'Requester',
    'TransferConfig',
    'TimeoutConfig',
    'SSLConfig',
    'BytesBlob',
    'FileBlob',
    'ChunkupError',
    'InvalidConfiguration',
    'InvalidInput',
    'TransferError',
    'TransferFailure',
    'setup_logging',
]
