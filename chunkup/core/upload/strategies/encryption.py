"""
Encryption strategies for chunk payloads.

Implements Strategy Pattern for encryption algorithms.
"""
import base64
from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding as rsa_padding, rsa

from ...exceptions import InvalidConfiguration
from ...logging import get_logger
from ..models import ENCRYPTION_ALG_RSA

logger = get_logger('chunkup.upload.encryption')

# smallest RSA modulus accepted for wrapping session keys
MIN_RSA_KEY_SIZE = 2048

KeyData = Union[str, bytes, rsa.RSAPublicKey, rsa.RSAPrivateKey]


def load_public_key(key_data: KeyData) -> rsa.RSAPublicKey:
    """
    Load an RSA public key.

    Args:
        key_data: PEM/DER encoded key, or a key object (private keys are
            reduced to their public half)

    Returns:
        RSA public key

    Raises:
        InvalidConfiguration: If the key cannot be parsed, is not RSA, or
            is shorter than MIN_RSA_KEY_SIZE bits
    """
    if isinstance(key_data, rsa.RSAPrivateKey):
        key = key_data.public_key()
    elif isinstance(key_data, rsa.RSAPublicKey):
        key = key_data
    else:
        key = _parse_key(key_data)

    if key.key_size < MIN_RSA_KEY_SIZE:
        raise InvalidConfiguration(
            f"Encryption public key must be at least {MIN_RSA_KEY_SIZE} bits, got {key.key_size}"
        )
    return key


def _parse_key(key_data: Union[str, bytes]) -> rsa.RSAPublicKey:
    if isinstance(key_data, str):
        key_data = key_data.encode('utf-8')
    try:
        if b'PRIVATE KEY' in key_data:
            key = serialization.load_pem_private_key(key_data, password=None).public_key()
        elif key_data.lstrip().startswith(b'-----BEGIN'):
            key = serialization.load_pem_public_key(key_data)
        else:
            key = serialization.load_der_public_key(key_data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise InvalidConfiguration(f"Invalid encryption public key: {e}")

    if not isinstance(key, rsa.RSAPublicKey):
        raise InvalidConfiguration("Invalid encryption public key: not an RSA key")
    return key


def _oaep() -> rsa_padding.OAEP:
    return rsa_padding.OAEP(
        mgf=rsa_padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None
    )


class BaseEncryptionStrategy(ABC):
    """Abstract base class for encryption strategies."""

    @abstractmethod
    def encrypt_chunk(self, chunk_index: int, data: bytes) -> bytes:
        """Encrypt a chunk of data."""
        pass

    @abstractmethod
    def fields(self) -> Dict[str, str]:
        """Returns the request fields a receiver needs to decrypt."""
        pass


class RsaEncryptionStrategy(BaseEncryptionStrategy):
    """
    Hybrid RSA encryption.

    A random AES-256 key is generated per upload and wrapped with the
    receiver's RSA public key (OAEP, SHA-256). Every chunk is encrypted
    with AES-CTR; the 8-byte nonce is the 4-byte upload prefix followed by
    the 4-byte big-endian chunk index, so chunks can be encrypted (and
    re-encrypted on retry) in any order.
    """

    KEY_SIZE = 32
    NONCE_PREFIX_SIZE = 4
    MAX_CHUNK_INDEX = 2 ** 32 - 1

    def __init__(
        self,
        public_key: KeyData,
        session_key: Optional[bytes] = None,
        nonce_prefix: Optional[bytes] = None
    ):
        """
        Initialize encryption strategy.

        Args:
            public_key: Receiver's RSA public key
            session_key: Optional 32-byte AES key (random if not provided)
            nonce_prefix: Optional 4-byte nonce prefix (random if not provided)
        """
        self._public_key = load_public_key(public_key)
        self._key = session_key or get_random_bytes(self.KEY_SIZE)
        self._nonce_prefix = nonce_prefix or get_random_bytes(self.NONCE_PREFIX_SIZE)

        if len(self._key) != self.KEY_SIZE:
            raise ValueError(f"Key must be {self.KEY_SIZE} bytes")
        if len(self._nonce_prefix) != self.NONCE_PREFIX_SIZE:
            raise ValueError(f"Nonce prefix must be {self.NONCE_PREFIX_SIZE} bytes")

        self._encrypted_key = self._public_key.encrypt(self._key, _oaep())

        logger.debug(f"Session key wrapped with {self._public_key.key_size}-bit RSA key")

    @property
    def key(self) -> bytes:
        """Returns the AES session key."""
        return self._key

    @property
    def nonce_prefix(self) -> bytes:
        """Returns the per-upload nonce prefix."""
        return self._nonce_prefix

    @property
    def encrypted_key(self) -> bytes:
        """Returns the RSA wrapped session key."""
        return self._encrypted_key

    def chunk_nonce(self, chunk_index: int) -> bytes:
        """Returns the CTR nonce for a chunk."""
        if not 0 <= chunk_index <= self.MAX_CHUNK_INDEX:
            raise ValueError(f"Chunk index out of range for encryption: {chunk_index}")
        return self._nonce_prefix + chunk_index.to_bytes(4, byteorder='big')

    def encrypt_chunk(self, chunk_index: int, data: bytes) -> bytes:
        """
        Encrypt a chunk of data.

        Args:
            chunk_index: Index of the chunk (selects the CTR nonce)
            data: Raw data to encrypt

        Returns:
            Encrypted data (same length as data)
        """
        cipher = AES.new(self._key, AES.MODE_CTR, nonce=self.chunk_nonce(chunk_index))
        return cipher.encrypt(data)

    def decrypt_chunk(self, chunk_index: int, data: bytes) -> bytes:
        """Decrypt a chunk of data (CTR is symmetric)."""
        return self.encrypt_chunk(chunk_index, data)

    def fields(self) -> Dict[str, str]:
        return {
            'encryptionAlgorithm': ENCRYPTION_ALG_RSA,
            'encryptedKey': base64.b64encode(self._encrypted_key).decode(),
            'nonce': base64.b64encode(self._nonce_prefix).decode(),
        }


ENCRYPTION_STRATEGIES = {
    ENCRYPTION_ALG_RSA: RsaEncryptionStrategy,
}
