"""Upload models."""
from .upload_models import (
    Chunk,
    UploadOptions,
    UploadOutcome,
    UploadProgress,
    UploadSession,
    DEFAULT_CHUNK_SIZE,
    CHECKSUM_ALG_MD5,
    ENCRYPTION_ALG_RSA,
)

__all__ = [
    'Chunk',
    'UploadOptions',
    'UploadOutcome',
    'UploadProgress',
    'UploadSession',
    'DEFAULT_CHUNK_SIZE',
    'CHECKSUM_ALG_MD5',
    'ENCRYPTION_ALG_RSA',
]
