"""Logging utilities for chunkup modules."""

import logging

LOGGER_NAMES = (
    'chunkup',
    'chunkup.cli',
    'chunkup.transfer',
    'chunkup.upload',
    'chunkup.upload.blob',
    'chunkup.upload.encoder',
    'chunkup.upload.encryption',
    'chunkup.upload.manager',
    'chunkup.upload.worker',
)


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.

    This ensures that loggers work with basicConfig() without needing
    explicit setup_logging() calls. The logger will:
    - Propagate to root logger (default behavior)
    - Only set a default level if root logger has no handlers

    Args:
        name: Logger name (typically 'chunkup.<component>')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    # basicConfig() not called yet
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for chunkup modules.

    Sets the level of every chunkup logger so that messages show up
    at the requested level.

    Args:
        level: Logging level (default: logging.INFO)
    """
    for logger_name in LOGGER_NAMES:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True
