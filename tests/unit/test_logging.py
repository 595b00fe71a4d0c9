"""Tests for logging module."""
import importlib
import logging

import pytest

from chunkup.core.logging import LOGGER_NAMES, get_logger, setup_logging


class TestLogging:
    """Test suite for chunkup logging helpers."""

    @pytest.fixture(autouse=True)
    def restore_levels(self):
        """Restore logger levels after each test."""
        levels = {name: logging.getLogger(name).level for name in LOGGER_NAMES}
        yield
        for name, level in levels.items():
            logging.getLogger(name).setLevel(level)

    def test_get_logger_name(self):
        """Test logger has the requested name."""
        logger = get_logger('chunkup.upload.worker')

        assert logger.name == 'chunkup.upload.worker'
        assert logger.propagate is True

    def test_get_logger_same_instance(self):
        """Test loggers are shared by name."""
        assert get_logger('chunkup.transfer') is get_logger('chunkup.transfer')

    def test_setup_logging_level(self):
        """Test setup_logging sets every chunkup logger."""
        setup_logging(logging.DEBUG)

        for name in LOGGER_NAMES:
            assert logging.getLogger(name).level == logging.DEBUG

    def test_setup_logging_default(self):
        """Test default level is INFO."""
        setup_logging()

        assert logging.getLogger('chunkup.upload.manager').level == logging.INFO

    def test_messages_reach_caplog(self, caplog):
        """Test messages propagate to the root logger."""
        logger = get_logger('chunkup.upload.manager')
        setup_logging(logging.DEBUG)

        with caplog.at_level(logging.DEBUG):
            logger.debug("Assigned chunk 0")

        assert "Assigned chunk 0" in caplog.text

    def test_module_loggers_registered(self):
        """Test every module logger is configured by setup_logging."""
        modules = [
            importlib.import_module(name) for name in (
                'chunkup.cli.main',
                'chunkup.core.blob',
                'chunkup.core.upload.facade',
                'chunkup.core.upload.manager',
                'chunkup.core.upload.worker',
                'chunkup.core.upload.strategies.encoder',
                'chunkup.core.upload.strategies.encryption',
            )
        ]

        names = [module.logger.name for module in modules]

        assert set(names) <= set(LOGGER_NAMES)
        assert len(set(names)) == len(names)
