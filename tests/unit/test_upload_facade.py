"""Tests for the upload facade."""
import pytest
from unittest.mock import AsyncMock

from chunkup.core.exceptions import InvalidConfiguration, TransferError, TransferFailure
from chunkup.core.upload import ChunkedUploader, UploadOptions, request_upload_token


class TestChunkedUploader:
    """Test suite for ChunkedUploader."""

    def test_keyword_options(self, fake_requester):
        """Test options from keyword arguments."""
        uploader = ChunkedUploader(endpoint="u", token="t", chunk_size=10, requester=fake_requester())

        assert uploader.manager.options.chunk_size == 10

    def test_dict_options_with_overrides(self, upload_options, fake_requester):
        """Test keyword arguments override dict options."""
        uploader = ChunkedUploader({**upload_options, 'chunkSize': 5}, requester=fake_requester(), chunk_size=7)

        assert uploader.manager.options.chunk_size == 7

    def test_options_object(self, fake_requester):
        """Test UploadOptions instances are passed through."""
        options = UploadOptions(endpoint="u", token="t")

        assert ChunkedUploader(options, requester=fake_requester()).manager.options is options

    def test_missing_token(self):
        """Test missing token raises error."""
        with pytest.raises(InvalidConfiguration):
            ChunkedUploader(endpoint="u")

    @pytest.mark.asyncio
    async def test_upload_success(self, upload_options, fake_requester):
        """Test successful upload returns the outcome."""
        requester = fake_requester()

        async with ChunkedUploader(upload_options, requester=requester, chunk_size=3) as uploader:
            outcome = await uploader.upload(b"abcdefgh")

        assert outcome.success
        assert outcome.chunks_uploaded == 3
        assert not requester.closed

    @pytest.mark.asyncio
    async def test_upload_failure_raises(self, upload_options, fake_requester):
        """Test failed upload raises TransferFailure."""
        requester = fake_requester(failures={2: -1})
        uploader = ChunkedUploader(upload_options, requester=requester, chunk_size=1)

        with pytest.raises(TransferFailure, match="issue uploading chunk 2"):
            await uploader.upload(b"abcdef")

        # siblings have settled before the error surfaced
        assert requester.active == 0

    @pytest.mark.asyncio
    async def test_upload_file(self, upload_options, fake_requester, sample_file):
        """Test uploading a file path."""
        requester = fake_requester()

        async with ChunkedUploader(upload_options, requester=requester, chunk_size=9) as uploader:
            outcome = await uploader.upload(sample_file)

        assert outcome.chunks_uploaded == 3
        data = {body['chunkNumber']: body['data'] for body in requester.bodies}
        assert data[2] == b"IJKLMNOPQ"


class TestRequestUploadToken:
    """Test suite for request_upload_token."""

    @pytest.mark.asyncio
    async def test_json_token(self, fake_requester):
        """Test token read from a JSON object."""
        token = await request_upload_token("https://example.com/token", requester=fake_requester())

        assert token == "fetched-token"

    @pytest.mark.asyncio
    async def test_custom_field(self):
        """Test token read from a custom field."""
        requester = AsyncMock()
        requester.get.return_value = {'uploadToken': 'abc'}

        token = await request_upload_token("u", requester=requester, field='uploadToken')

        assert token == 'abc'
        requester.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_raw_body_token(self):
        """Test raw body is taken as the token."""
        requester = AsyncMock()
        requester.get.return_value = b"  raw-token\n"

        assert await request_upload_token("u", requester=requester) == "raw-token"

    @pytest.mark.asyncio
    async def test_numeric_token(self):
        """Test numeric tokens are converted to strings."""
        requester = AsyncMock()
        requester.get.return_value = {'token': 42}

        assert await request_upload_token("u", requester=requester) == "42"

    @pytest.mark.asyncio
    async def test_missing_token(self):
        """Test missing token raises error."""
        requester = AsyncMock()
        requester.get.return_value = {'other': 'x'}

        with pytest.raises(TransferError, match="No upload token"):
            await request_upload_token("u", requester=requester)

    @pytest.mark.asyncio
    async def test_request_error_propagates(self):
        """Test transfer errors propagate."""
        requester = AsyncMock()
        requester.get.side_effect = TransferError(TransferError.NETWORK, "Connection refused")

        with pytest.raises(TransferError, match="Connection refused"):
            await request_upload_token("u", requester=requester)
