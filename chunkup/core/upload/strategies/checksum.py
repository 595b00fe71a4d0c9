"""Checksum strategy for chunk payloads."""
import hashlib

from ...exceptions import InvalidConfiguration
from ..models import CHECKSUM_ALG_MD5, DEFAULT_CHUNK_SIZE
from ..models.upload_models import SUPPORTED_CHECKSUM_ALGORITHMS
from .chunking import Chunker


class ChecksumStrategy:
    """
    Computes hex digests with a hashlib algorithm.

    Example:
        >>> ChecksumStrategy('md5').digest(b'abc')
        '900150983cd24fb0d6963f7d28e17f72'
    """

    def __init__(self, algorithm: str = CHECKSUM_ALG_MD5):
        if algorithm not in SUPPORTED_CHECKSUM_ALGORITHMS:
            raise InvalidConfiguration(f"Unsupported checksum algorithm: {algorithm}")
        self.algorithm = algorithm

    def new(self):
        """Returns a fresh hashlib object."""
        return hashlib.new(self.algorithm)

    def digest(self, data: bytes) -> str:
        """Returns the hex digest of data."""
        hasher = self.new()
        hasher.update(data)
        return hasher.hexdigest()

    async def digest_blob(self, blob, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
        """
        Returns the hex digest of a whole blob.

        Reads the blob one chunk at a time so that large files are never
        held in memory at once.

        Raises:
            OSError: If the blob cannot be read
        """
        hasher = self.new()
        for chunk in Chunker(blob, chunk_size):
            hasher.update(await chunk.payload.read())
        return hasher.hexdigest()
