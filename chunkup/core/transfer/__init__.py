"""HTTP transfer client and its configuration."""
from .config import TransferConfig, TimeoutConfig, SSLConfig
from .requester import Requester
from .response_handler import ResponseHandler

__all__ = [
    'Requester',
    'ResponseHandler',
    'TransferConfig',
    'TimeoutConfig',
    'SSLConfig',
]
