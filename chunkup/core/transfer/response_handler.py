"""Response handler for transfer responses."""
import json
from typing import Any

import aiohttp

from ..exceptions import TransferError

CONTENT_TYPE_HEADER_NAME = 'Content-Type'
CONTENT_TYPE_JSON = 'application/json'
NOT_ACCEPTED_MESSAGE = 'The request was not accepted.'


class ResponseHandler:
    """Classifies HTTP responses."""

    @staticmethod
    def check_status(response: aiohttp.ClientResponse) -> None:
        """Raises a rejected TransferError for non-2xx responses."""
        if not 200 <= response.status < 300:
            raise TransferError(
                TransferError.REJECTED,
                NOT_ACCEPTED_MESSAGE,
                status=response.status
            )

    @staticmethod
    def is_json(content_type: str) -> bool:
        """Returns True if the declared content type is JSON."""
        return CONTENT_TYPE_JSON in (content_type or '').lower()

    @staticmethod
    def parse_body(content_type: str, body: bytes) -> Any:
        """
        Parses a response body according to its declared content type.

        JSON bodies are decoded; anything else is returned as raw bytes
        for the caller to interpret.

        Raises:
            TransferError: If a JSON body cannot be decoded
        """
        if not ResponseHandler.is_json(content_type):
            return body
        try:
            return json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise TransferError(TransferError.NETWORK, f"Malformed JSON response: {e}")

    @staticmethod
    async def process_response(response: aiohttp.ClientResponse) -> Any:
        """Checks the status and returns the parsed body."""
        ResponseHandler.check_status(response)
        body = await response.read()
        content_type = response.headers.get(CONTENT_TYPE_HEADER_NAME, '')
        return ResponseHandler.parse_body(content_type, body)
