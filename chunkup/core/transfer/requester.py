"""
HTTP transfer client.

Sends single requests over a shared aiohttp session. Every call is one
attempt; retrying is left to the upload workers.
"""
import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from ..exceptions import TransferError
from ..logging import get_logger
from .config import TransferConfig
from .response_handler import ResponseHandler

DEFAULT_OPTIONS: Dict[str, Any] = {
    'method': 'GET',
    'cache': 'default',
}

# Cache policy -> Cache-Control directive (None sends no header)
CACHE_DIRECTIVES: Dict[str, Optional[str]] = {
    'default': None,
    'no-store': 'no-store',
    'no-cache': 'no-cache',
    'reload': 'no-cache',
    'force-cache': 'max-stale',
}


class Requester:
    """
    Handles HTTP requests for uploads.

    Reuses one HTTP session for all requests (critical for performance).

    Responsibilities:
    - Merge request options over defaults
    - Classify failures as network errors or rejections
    - Parse response bodies by declared content type
    """

    def __init__(
        self,
        config: Optional[TransferConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize requester.

        Args:
            config: Transfer configuration
            session: Optional shared session (not closed by close())
        """
        self._config = config or TransferConfig.default()
        self._session = session
        self._owns_session = False
        self._logger = get_logger('chunkup.transfer')

    @property
    def config(self) -> TransferConfig:
        """Returns the transfer configuration."""
        return self._config

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(**self._config.get_connector_kwargs()),
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close session if we own it."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def __aenter__(self) -> 'Requester':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **options) -> Any:
        """
        Send a GET request.

        Args:
            endpoint: URL to send the request to
            params: Optional query string parameters
            **options: Request options (headers, cache, timeout)

        Returns:
            Decoded JSON value, or raw bytes for other content types
        """
        options['method'] = 'GET'
        if params is not None:
            options['params'] = params
        return await self.fetch(endpoint, **options)

    async def post(self, endpoint: str, body: Any = None, **options) -> Any:
        """
        Send a POST request.

        A dict body is sent as multipart/form-data (bytes values become file
        parts); bytes and str bodies are sent as-is.

        Args:
            endpoint: URL to send the request to
            body: Request body
            **options: Request options (headers, cache, timeout)

        Returns:
            Decoded JSON value, or raw bytes for other content types
        """
        options['method'] = 'POST'
        if body is not None:
            options['body'] = body
        return await self.fetch(endpoint, **options)

    async def fetch(self, endpoint: str, **options) -> Any:
        """
        Perform a single request.

        Args:
            endpoint: URL to send the request to
            **options: method, body, params, headers, cache, timeout

        Returns:
            Decoded JSON value, or raw bytes for other content types

        Raises:
            TransferError: "network" on transport failures or malformed
                responses, "rejected" on non-2xx status codes
            ValueError: If the cache policy is unknown
        """
        request_options = {**DEFAULT_OPTIONS, **options}
        method = request_options.pop('method').upper()
        cache = request_options.pop('cache')
        body = request_options.pop('body', None)

        if cache not in CACHE_DIRECTIVES:
            raise ValueError(f"Unknown cache policy: {cache}")

        headers = dict(request_options.pop('headers', None) or {})
        directive = CACHE_DIRECTIVES[cache]
        if directive and 'Cache-Control' not in headers:
            headers['Cache-Control'] = directive

        timeout = request_options.pop('timeout', None)
        if isinstance(timeout, (int, float)):
            timeout = aiohttp.ClientTimeout(total=timeout)

        kwargs: Dict[str, Any] = {'headers': headers}
        if body is not None:
            kwargs['data'] = self._build_body(body)
        if timeout is not None:
            kwargs['timeout'] = timeout
        kwargs.update(request_options)

        session = await self._get_session()
        request_start = time.time()

        try:
            async with session.request(method, endpoint, **kwargs) as response:
                result = await ResponseHandler.process_response(response)
        except TransferError as e:
            elapsed = time.time() - request_start
            self._logger.debug(f"{method} {endpoint} failed after {elapsed:.2f}s: {e.message}")
            raise
        except asyncio.TimeoutError:
            elapsed = time.time() - request_start
            self._logger.debug(f"{method} {endpoint} timed out after {elapsed:.2f}s")
            raise TransferError(TransferError.NETWORK, f"Request timed out after {elapsed:.2f}s")
        except aiohttp.ClientError as e:
            elapsed = time.time() - request_start
            self._logger.debug(f"{method} {endpoint} failed after {elapsed:.2f}s: {e}")
            raise TransferError(TransferError.NETWORK, str(e) or type(e).__name__)

        elapsed = time.time() - request_start
        self._logger.debug(f"{method} {endpoint} completed in {elapsed:.2f}s")
        return result

    @staticmethod
    def _build_body(body: Any) -> Any:
        """Convert a dict body to multipart form data."""
        if not isinstance(body, dict):
            return body

        form = aiohttp.FormData()
        for name, value in body.items():
            if value is None:
                continue
            if isinstance(value, (bytes, bytearray, memoryview)):
                form.add_field(
                    name,
                    bytes(value),
                    filename=name,
                    content_type='application/octet-stream'
                )
            else:
                form.add_field(name, str(value))
        return form
