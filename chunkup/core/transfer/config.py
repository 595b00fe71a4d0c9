"""
Transfer configuration module.

Provides configuration for the HTTP session used to send chunks.
"""
from dataclasses import dataclass, field
from typing import Dict, Any
import ssl

import aiohttp


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.

    Certificates are verified against the system trust store unless
    verification is turned off.
    """
    verify: bool = True

    def create_ssl_context(self):
        """Create SSL context from configuration (False disables verification)."""
        if not self.verify:
            return False

        return ssl.create_default_context()


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Granular control over different timeout types, in seconds.
    """
    total: float = 120.0
    connect: float = 10.0
    sock_read: float = 60.0

    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        """Convert to aiohttp ClientTimeout."""
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read
        )


@dataclass
class TransferConfig:
    """
    Complete transfer configuration.

    Centralizes the options of the aiohttp session shared by all workers.
    """
    user_agent: str = 'chunkup/1.0.0'

    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Connection pool settings
    limit: int = 10
    keepalive_timeout: float = 30.0

    @classmethod
    def default(cls) -> 'TransferConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def insecure(cls, **kwargs) -> 'TransferConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False),
            **kwargs
        )

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'keepalive_timeout': self.keepalive_timeout,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
