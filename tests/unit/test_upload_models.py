"""Tests for upload data models."""
import pytest

from chunkup.core.exceptions import InvalidConfiguration, TransferError, TransferFailure
from chunkup.core.upload.models import (
    Chunk,
    UploadOptions,
    UploadOutcome,
    UploadProgress,
    UploadSession,
)


class TestChunk:
    """Test suite for Chunk."""

    def test_creation(self):
        """Test creating chunk."""
        chunk = Chunk(index=2, offset=10, payload=None, byte_length=5)

        assert chunk.index == 2
        assert chunk.end == 15

    def test_immutable(self):
        """Test chunk is immutable."""
        chunk = Chunk(index=0, offset=0, payload=None, byte_length=5)

        with pytest.raises(AttributeError):
            chunk.index = 1


class TestUploadOptions:
    """Test suite for UploadOptions."""

    def test_defaults(self):
        """Test default values."""
        options = UploadOptions(endpoint="https://example.com", token="t")

        assert options.chunk_size == 1000000
        assert options.max_concurrent_connections == 3
        assert options.max_retries_per_connection == 3
        assert options.checksum is False
        assert options.encrypt is False
        assert options.retry_backoff is False

    @pytest.mark.parametrize("endpoint,token", [("", "t"), ("https://example.com", ""), (None, "t")])
    def test_missing_endpoint_or_token(self, endpoint, token):
        """Test missing endpoint or token raises error."""
        with pytest.raises(InvalidConfiguration, match="endpoint and/or upload token"):
            UploadOptions(endpoint=endpoint, token=token)

    @pytest.mark.parametrize("field", [
        'chunk_size', 'max_concurrent_connections', 'max_retries_per_connection'
    ])
    @pytest.mark.parametrize("value", [0, -3, 2.5, True])
    def test_non_positive_integers(self, field, value):
        """Test counts must be positive integers."""
        with pytest.raises(InvalidConfiguration):
            UploadOptions(endpoint="https://example.com", token="t", **{field: value})

    def test_unknown_checksum_algorithm(self):
        """Test unsupported checksum algorithm raises error."""
        with pytest.raises(InvalidConfiguration, match="checksum algorithm"):
            UploadOptions(endpoint="u", token="t", checksum=True, checksum_algorithm="crc32")

    def test_incremental_requires_checksum(self):
        """Test incremental checksums need checksum enabled."""
        with pytest.raises(InvalidConfiguration, match="checksumIncremental"):
            UploadOptions(endpoint="u", token="t", checksum_incremental=True)

    def test_encrypt_requires_key(self):
        """Test encryption needs a public key."""
        with pytest.raises(InvalidConfiguration, match="encryptionPublicKey"):
            UploadOptions(endpoint="u", token="t", encrypt=True)

    def test_unknown_encryption_algorithm(self):
        """Test unsupported encryption algorithm raises error."""
        with pytest.raises(InvalidConfiguration):
            UploadOptions(endpoint="u", token="t", encryption_algorithm="aes")

    def test_negative_delay(self):
        """Test negative retry delays raise error."""
        with pytest.raises(InvalidConfiguration):
            UploadOptions(endpoint="u", token="t", retry_base_delay=-1)

    @pytest.mark.parametrize("field", ['retry_base_delay', 'retry_max_delay'])
    @pytest.mark.parametrize("value", ["fast", None, True])
    def test_non_numeric_delay(self, field, value):
        """Test non-numeric retry delays raise configuration error."""
        with pytest.raises(InvalidConfiguration, match="non-negative number"):
            UploadOptions(endpoint="u", token="t", **{field: value})

    def test_float_delay(self):
        """Test fractional retry delays are accepted."""
        options = UploadOptions(endpoint="u", token="t", retry_base_delay=0.5, retry_max_delay=2)

        assert options.retry_base_delay == 0.5

    def test_from_dict_camel_case(self):
        """Test camelCase keys are accepted."""
        options = UploadOptions.from_dict({
            'endpoint': 'https://example.com',
            'token': 't',
            'chunkSize': 5,
            'maxConcurrentConnections': 2,
            'maxRetriesPerConnection': 4,
            'checksum': True,
            'checksumIncremental': True,
            'checksumAlgorithm': 'sha256',
        })

        assert options.chunk_size == 5
        assert options.max_concurrent_connections == 2
        assert options.max_retries_per_connection == 4
        assert options.checksum_incremental is True
        assert options.checksum_algorithm == 'sha256'

    def test_from_dict_snake_case(self):
        """Test snake_case keys are accepted."""
        options = UploadOptions.from_dict({'endpoint': 'u', 'token': 't', 'chunk_size': 7})

        assert options.chunk_size == 7

    def test_from_dict_unknown_key(self):
        """Test unknown keys raise error."""
        with pytest.raises(InvalidConfiguration, match="Unknown upload option: chunksize"):
            UploadOptions.from_dict({'endpoint': 'u', 'token': 't', 'chunksize': 5})

    def test_from_dict_missing_token(self):
        """Test missing token raises error."""
        with pytest.raises(InvalidConfiguration, match="endpoint and/or upload token"):
            UploadOptions.from_dict({'endpoint': 'u'})


class TestUploadOutcome:
    """Test suite for UploadOutcome."""

    def test_success(self):
        """Test successful outcome has no message."""
        outcome = UploadOutcome(success=True, chunks_uploaded=3, expected_chunks=3)

        assert outcome.message is None

    def test_failure_message(self):
        """Test failure message names the chunk."""
        failure = TransferFailure(4, TransferError(TransferError.REJECTED, "The request was not accepted."))
        outcome = UploadOutcome(success=False, chunks_uploaded=2, expected_chunks=6, error=failure)

        assert outcome.message == (
            "There was an issue uploading chunk 4. Error: The request was not accepted."
        )


class TestUploadProgress:
    """Test suite for UploadProgress."""

    def test_percentage(self):
        """Test percentage calculation."""
        progress = UploadProgress(total_chunks=4, uploaded_chunks=1)

        assert progress.percentage == 25.0
        assert not progress.is_complete

    def test_empty(self):
        """Test zero chunks gives zero percent."""
        assert UploadProgress(total_chunks=0).percentage == 0.0

    def test_complete(self):
        """Test completion."""
        assert UploadProgress(total_chunks=2, uploaded_chunks=2).is_complete


class TestUploadSession:
    """Test suite for UploadSession."""

    def test_defaults(self):
        """Test a fresh session is idle."""
        session = UploadSession()

        assert session.in_progress is False
        assert session.finished is False
        assert session.chunks_uploaded == 0
        assert session.pool_size == 0

    def test_progress_snapshot(self):
        """Test progress reflects counters."""
        session = UploadSession(expected_chunk_count=4, chunks_uploaded=2, total_bytes=40, uploaded_bytes=20)
        progress = session.progress()

        assert progress.total_chunks == 4
        assert progress.uploaded_chunks == 2
        assert progress.uploaded_bytes == 20
