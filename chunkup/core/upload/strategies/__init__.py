"""Upload strategies module."""
from .chunking import Chunker
from .checksum import ChecksumStrategy
from .encryption import RsaEncryptionStrategy, load_public_key
from .encoder import ChunkEncoder
from .retry import RetryStrategy, ImmediateRetryStrategy, ExponentialBackoffStrategy

__all__ = [
    'Chunker',
    'ChecksumStrategy',
    'RsaEncryptionStrategy',
    'load_public_key',
    'ChunkEncoder',
    'RetryStrategy',
    'ImmediateRetryStrategy',
    'ExponentialBackoffStrategy',
]
