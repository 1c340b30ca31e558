#!/usr/bin/env python3
"""
Tests for logging setup
"""

import logging

import pytest

from fnft_deploy import logging_utils
from fnft_deploy.logging_utils import address_logger, configure_logging


@pytest.fixture
def address_logger_state(monkeypatch):
    """Leave the root logger alone and restore the address logger afterwards"""
    monkeypatch.setattr(logging_utils.logging, "basicConfig", lambda **kwargs: None)
    handlers = list(address_logger.handlers)
    propagate, level = address_logger.propagate, address_logger.level
    yield
    for handler in list(address_logger.handlers):
        address_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        address_logger.addHandler(handler)
    address_logger.propagate = propagate
    address_logger.setLevel(level)


class TestConfigureLogging:
    """Test class for configure_logging"""

    def test_address_lines_go_to_log_file(self, tmp_path, address_logger_state):
        """Test address lines are written to the log file as well as stdout"""
        log_file = tmp_path / "deploy.log"
        configure_logging("INFO", str(log_file))

        logging_utils.log_address("TIPERC721_ADDRESS", "0xabc")
        for handler in address_logger.handlers:
            handler.flush()

        assert "Deploy: TIPERC721_ADDRESS=0xabc" in log_file.read_text()
        assert address_logger.propagate is False

    def test_reconfigure_closes_replaced_handlers(self, tmp_path, address_logger_state):
        """Test calling configure_logging again closes the previous log file"""
        log_file = str(tmp_path / "deploy.log")
        configure_logging("INFO", log_file)
        first = [h for h in address_logger.handlers if isinstance(h, logging.FileHandler)]

        configure_logging("INFO", log_file)

        assert len(first) == 1
        assert first[0].stream is None
        assert first[0] not in address_logger.handlers
        assert len([h for h in address_logger.handlers if isinstance(h, logging.FileHandler)]) == 1
