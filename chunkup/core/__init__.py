"""Core components: blobs, transfer client, upload orchestration."""
from .blob import BytesBlob, FileBlob, as_blob
from .exceptions import (
    ChunkupError,
    InvalidConfiguration,
    InvalidInput,
    TransferError,
    TransferFailure,
)

__all__ = [
    'BytesBlob',
    'FileBlob',
    'as_blob',
    'ChunkupError',
    'InvalidConfiguration',
    'InvalidInput',
    'TransferError',
    'TransferFailure',
]
