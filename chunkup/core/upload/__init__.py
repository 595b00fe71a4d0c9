"""
Upload module for chunked uploads.

Splits a blob into fixed-size chunks and uploads them through a bounded
pool of workers, retrying failed chunks before reporting a failure.
"""
from .facade import ChunkedUploader, request_upload_token
from .manager import UploadManager
from .worker import UploadWorker
from .models import Chunk, UploadOptions, UploadOutcome, UploadProgress, UploadSession
from .strategies import (
    Chunker,
    ChecksumStrategy,
    ChunkEncoder,
    RsaEncryptionStrategy,
    RetryStrategy,
    ImmediateRetryStrategy,
    ExponentialBackoffStrategy,
)
from .protocols import BlobLike, RequesterProtocol

__all__ = [
    # Main classes
    'ChunkedUploader',
    'UploadManager',
    'UploadWorker',
    'Chunker',
    'request_upload_token',

    # Models
    'Chunk',
    'UploadOptions',
    'UploadOutcome',
    'UploadProgress',
    'UploadSession',

    # Strategies
    'ChecksumStrategy',
    'ChunkEncoder',
    'RsaEncryptionStrategy',
    'RetryStrategy',
    'ImmediateRetryStrategy',
    'ExponentialBackoffStrategy',

    # Protocols
    'BlobLike',
    'RequesterProtocol',
]
