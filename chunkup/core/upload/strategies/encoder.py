"""
Chunk encoding.

Combines the checksum and encryption strategies selected by the upload
options into the extra request fields and transformed payload of a chunk.
"""
from typing import Dict, Optional, Tuple

from ...logging import get_logger
from ..models import UploadOptions, DEFAULT_CHUNK_SIZE
from .checksum import ChecksumStrategy
from .encryption import BaseEncryptionStrategy, ENCRYPTION_STRATEGIES

logger = get_logger('chunkup.upload.encoder')


class ChunkEncoder:
    """
    Per-upload chunk encoder.

    One instance is created for every upload so that each upload gets its
    own session key. ``encode()`` is deterministic for a given chunk index,
    which keeps retries byte-identical.
    """

    def __init__(
        self,
        checksum: Optional[ChecksumStrategy] = None,
        incremental: bool = False,
        encryption: Optional[BaseEncryptionStrategy] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        """
        Initialize encoder.

        Args:
            checksum: Checksum strategy (None disables checksums)
            incremental: Send one digest per chunk instead of one per blob
            encryption: Encryption strategy (None disables encryption)
            chunk_size: Read size used to digest the whole blob
        """
        self._checksum = checksum
        self._incremental = incremental
        self._encryption = encryption
        self._chunk_size = chunk_size
        self._blob_digest: Optional[str] = None

    @classmethod
    def from_options(cls, options: UploadOptions, public_key=None) -> 'ChunkEncoder':
        """
        Create an encoder for one upload.

        Args:
            options: Upload options
            public_key: Pre-loaded RSA public key (defaults to the options' key)
        """
        checksum = ChecksumStrategy(options.checksum_algorithm) if options.checksum else None
        encryption = None
        if options.encrypt:
            strategy_cls = ENCRYPTION_STRATEGIES[options.encryption_algorithm]
            encryption = strategy_cls(public_key or options.encryption_public_key)
        return cls(
            checksum=checksum,
            incremental=options.checksum_incremental,
            encryption=encryption,
            chunk_size=options.chunk_size
        )

    @property
    def encryption(self) -> Optional[BaseEncryptionStrategy]:
        """Returns the encryption strategy, if any."""
        return self._encryption

    @property
    def needs_preparation(self) -> bool:
        """Returns True if the whole blob must be digested before sending."""
        return self._checksum is not None and not self._incremental and self._blob_digest is None

    async def prepare(self, blob) -> None:
        """
        Digest the whole blob.

        Raises:
            OSError: If the blob cannot be read
        """
        if not self.needs_preparation:
            return
        self._blob_digest = await self._checksum.digest_blob(blob, self._chunk_size)
        logger.debug(f"Blob {self._checksum.algorithm} checksum: {self._blob_digest}")

    def encode(self, chunk_index: int, data: bytes) -> Tuple[bytes, Dict[str, str]]:
        """
        Encode a chunk.

        Args:
            chunk_index: Index of the chunk
            data: Plaintext chunk bytes

        Returns:
            Tuple of (payload to send, extra request fields)
        """
        extra: Dict[str, str] = {}

        if self._checksum is not None:
            extra['checksumAlgorithm'] = self._checksum.algorithm
            if self._incremental:
                extra['chunkChecksum'] = self._checksum.digest(data)
            elif self._blob_digest is not None:
                extra['checksum'] = self._blob_digest

        if self._encryption is not None:
            data = self._encryption.encrypt_chunk(chunk_index, data)
            extra.update(self._encryption.fields())

        return data, extra
