"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
import asyncio
from collections import deque
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Deque, Dict, Optional, Union

from ...exceptions import InvalidConfiguration, TransferFailure
from ...transfer.config import TransferConfig

DEFAULT_CHUNK_SIZE = 1000000  # 1MB
DEFAULT_MAX_CONCURRENT_CONNECTIONS = 3
DEFAULT_MAX_RETRIES_PER_CONNECTION = 3

CHECKSUM_ALG_MD5 = 'md5'
ENCRYPTION_ALG_RSA = 'rsa'

SUPPORTED_CHECKSUM_ALGORITHMS = ('md5', 'sha1', 'sha256', 'sha512')
SUPPORTED_ENCRYPTION_ALGORITHMS = (ENCRYPTION_ALG_RSA,)

# Option keys as sent by JavaScript-style callers
OPTION_ALIASES = {
    'chunkSize': 'chunk_size',
    'maxConcurrentConnections': 'max_concurrent_connections',
    'maxRetriesPerConnection': 'max_retries_per_connection',
    'checksumIncremental': 'checksum_incremental',
    'checksumAlgorithm': 'checksum_algorithm',
    'encryptionAlgorithm': 'encryption_algorithm',
    'encryptionPublicKey': 'encryption_public_key',
    'retryBackoff': 'retry_backoff',
    'retryBaseDelay': 'retry_base_delay',
    'retryMaxDelay': 'retry_max_delay',
}


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_non_negative_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class Chunk:
    """
    A contiguous piece of a blob.

    Attributes:
        index: Zero-based chunk index
        offset: Start position in the blob, in bytes
        payload: Blob slice holding the chunk bytes
        byte_length: Chunk size in bytes (never 0)
    """
    index: int
    offset: int
    payload: Any
    byte_length: int

    @property
    def end(self) -> int:
        """Returns end position (exclusive)."""
        return self.offset + self.byte_length


@dataclass(frozen=True)
class UploadOptions:
    """
    Configuration for an upload manager.

    Attributes:
        endpoint: URL every chunk is POSTed to
        token: Token identifying the upload (i.e. retrieved from the server)
        chunk_size: Chunk size in bytes
        max_concurrent_connections: Maximum number of active workers at any time
        max_retries_per_connection: Maximum attempts per chunk
        checksum: Send a checksum of the data
        checksum_incremental: Send a checksum per chunk instead of one per blob
        checksum_algorithm: hashlib algorithm name
        encrypt: Encrypt chunk payloads before transfer
        encryption_algorithm: Encryption scheme ("rsa": RSA-OAEP wrapped AES key)
        encryption_public_key: PEM encoded RSA public key
        retry_backoff: Wait with exponential backoff between attempts
        retry_base_delay: First backoff delay in seconds
        retry_max_delay: Backoff delay cap in seconds
        transfer: HTTP session configuration
    """
    endpoint: str
    token: str
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_concurrent_connections: int = DEFAULT_MAX_CONCURRENT_CONNECTIONS
    max_retries_per_connection: int = DEFAULT_MAX_RETRIES_PER_CONNECTION
    checksum: bool = False
    checksum_incremental: bool = False
    checksum_algorithm: str = CHECKSUM_ALG_MD5
    encrypt: bool = False
    encryption_algorithm: str = ENCRYPTION_ALG_RSA
    encryption_public_key: Optional[Union[str, bytes]] = None
    retry_backoff: bool = False
    retry_base_delay: float = 0.25
    retry_max_delay: float = 16.0
    transfer: TransferConfig = field(default_factory=TransferConfig)

    def __post_init__(self):
        """Validate options."""
        if not self.endpoint or not isinstance(self.endpoint, str):
            raise InvalidConfiguration("Must specify an endpoint and/or upload token")
        if not self.token or not isinstance(self.token, str):
            raise InvalidConfiguration("Must specify an endpoint and/or upload token")

        if not _is_positive_int(self.chunk_size):
            raise InvalidConfiguration(f"Chunk size must be a positive integer, got {self.chunk_size!r}")
        if not _is_positive_int(self.max_concurrent_connections):
            raise InvalidConfiguration(
                f"maxConcurrentConnections must be a positive integer, got {self.max_concurrent_connections!r}"
            )
        if not _is_positive_int(self.max_retries_per_connection):
            raise InvalidConfiguration(
                f"maxRetriesPerConnection must be a positive integer, got {self.max_retries_per_connection!r}"
            )

        if self.checksum_algorithm not in SUPPORTED_CHECKSUM_ALGORITHMS:
            raise InvalidConfiguration(f"Unsupported checksum algorithm: {self.checksum_algorithm}")
        if self.checksum_incremental and not self.checksum:
            raise InvalidConfiguration("checksumIncremental requires checksum to be enabled")

        if self.encryption_algorithm not in SUPPORTED_ENCRYPTION_ALGORITHMS:
            raise InvalidConfiguration(f"Unsupported encryption algorithm: {self.encryption_algorithm}")
        if self.encrypt and not self.encryption_public_key:
            raise InvalidConfiguration("Encryption requires an encryptionPublicKey")

        if not _is_non_negative_number(self.retry_base_delay):
            raise InvalidConfiguration(f"retryBaseDelay must be a non-negative number, got {self.retry_base_delay!r}")
        if not _is_non_negative_number(self.retry_max_delay):
            raise InvalidConfiguration(f"retryMaxDelay must be a non-negative number, got {self.retry_max_delay!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadOptions':
        """
        Create from an options dictionary.

        Accepts snake_case field names and the camelCase keys
        (chunkSize, maxConcurrentConnections, ...).

        Raises:
            InvalidConfiguration: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise InvalidConfiguration(f"Unknown upload option: {key}")
            kwargs[name] = value
        if 'endpoint' not in kwargs or 'token' not in kwargs:
            raise InvalidConfiguration("Must specify an endpoint and/or upload token")
        return cls(**kwargs)


@dataclass(frozen=True)
class UploadOutcome:
    """
    Result of an upload.

    Attributes:
        success: True if every chunk was acknowledged
        chunks_uploaded: Number of acknowledged chunks
        expected_chunks: Number of chunks in the blob
        error: Terminal failure (None on success)
    """
    success: bool
    chunks_uploaded: int
    expected_chunks: int
    error: Optional[TransferFailure] = None

    @property
    def message(self) -> Optional[str]:
        """Returns the error message, if any."""
        return self.error.message if self.error else None


@dataclass
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        total_chunks: Total number of chunks
        uploaded_chunks: Number of uploaded chunks
        total_bytes: Total blob size
        uploaded_bytes: Bytes uploaded so far
    """
    total_chunks: int
    uploaded_chunks: int = 0
    total_bytes: int = 0
    uploaded_bytes: int = 0

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        if self.total_chunks == 0:
            return 0.0
        return (self.uploaded_chunks / self.total_chunks) * 100

    @property
    def is_complete(self) -> bool:
        """Returns True if upload is complete."""
        return self.uploaded_chunks >= self.total_chunks


@dataclass
class UploadSession:
    """
    Mutable state of one upload, owned by the upload manager.

    While in progress, ``len(idle_workers) + len(in_flight)`` equals the
    pool size, and ``chunks_uploaded`` never exceeds ``expected_chunk_count``.
    """
    idle_workers: Deque[Any] = field(default_factory=deque)
    in_flight: Dict[int, Any] = field(default_factory=dict)
    in_progress: bool = False
    finished: bool = False
    next_chunk_index: int = 0
    chunks_uploaded: int = 0
    expected_chunk_count: int = 0
    total_bytes: int = 0
    uploaded_bytes: int = 0
    chunker: Any = None
    encoder: Any = None
    future: Optional[asyncio.Future] = None
    on_success: Optional[Callable[[], None]] = None
    on_error: Optional[Callable[[TransferFailure], None]] = None

    @property
    def pool_size(self) -> int:
        """Returns the number of workers owned by the session."""
        return len(self.idle_workers) + len(self.in_flight)

    def progress(self) -> UploadProgress:
        """Returns a progress snapshot."""
        return UploadProgress(
            total_chunks=self.expected_chunk_count,
            uploaded_chunks=self.chunks_uploaded,
            total_bytes=self.total_bytes,
            uploaded_bytes=self.uploaded_bytes
        )
