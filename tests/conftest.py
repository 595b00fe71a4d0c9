"""Pytest fixtures for chunkup tests."""
import asyncio
from collections import Counter

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from chunkup.core.exceptions import TransferError


class FakeRequester:
    """
    In-memory stand-in for Requester.

    Records every POST body, tracks how many requests are in flight at
    once, and fails chunks according to ``failures``:
    {chunk_number: number_of_failures} (-1 fails forever).
    """

    def __init__(self, failures=None, delays=None):
        self.failures = dict(failures or {})
        self.delays = dict(delays or {})
        self.bodies = []
        self.attempts = Counter()
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def post(self, endpoint, body=None, **options):
        chunk_number = body['chunkNumber']
        self.bodies.append(body)
        self.attempts[chunk_number] += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            # let sibling transfers start before this one completes
            for _ in range(self.delays.get(chunk_number, 1)):
                await asyncio.sleep(0)

            remaining = self.failures.get(chunk_number, 0)
            if remaining:
                if remaining > 0:
                    self.failures[chunk_number] = remaining - 1
                raise TransferError(TransferError.REJECTED, 'The request was not accepted.', status=500)
            return {'status': 'ok'}
        finally:
            self.active -= 1

    async def get(self, endpoint, params=None, **options):
        return {'token': 'fetched-token'}

    async def close(self):
        self.closed = True

    def uploaded_chunks(self):
        """Returns the chunk numbers that were POSTed, in request order."""
        return [body['chunkNumber'] for body in self.bodies]


@pytest.fixture
def fake_requester():
    """Returns a factory for FakeRequester instances."""
    return FakeRequester


@pytest.fixture
def upload_options():
    """Returns minimal upload options."""
    return {
        'endpoint': 'https://example.com/upload',
        'token': 'upload-token',
    }


@pytest.fixture(scope='session')
def rsa_key():
    """Generates a 2048-bit RSA key pair (once per test session)."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def public_key_pem(rsa_key):
    """Returns the PEM encoded public half of rsa_key."""
    return rsa_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo
    )


@pytest.fixture
def sample_file(tmp_path):
    """Creates a 27-byte file with known content."""
    path = tmp_path / 'sample.bin'
    path.write_bytes(b'0123456789ABCDEFGHIJKLMNOPQ')
    return path


@pytest.fixture(scope='session')
def small_rsa_key():
    """Generates a 1024-bit RSA key pair, below the accepted minimum."""
    return rsa.generate_private_key(public_exponent=65537, key_size=1024)
