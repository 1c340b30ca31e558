#!/usr/bin/env python3
"""
Logging setup for deployment runs

Two streams:
- diagnostics, in the usual "time - name - level - message" format on stderr
  (and optionally a log file)
- deployed addresses, one bare ``Deploy: NAME=address`` line per contract on
  stdout. External tooling greps these lines, so their format is fixed.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ADDRESS_LOGGER_NAME = "fnft_deploy.addresses"

address_logger = logging.getLogger(ADDRESS_LOGGER_NAME)


def log_address(log_name: str, address: str, step: Optional[str] = None) -> None:
    """Emit the address line for a deployed contract"""
    address_logger.info("Deploy: %s=%s", log_name, address,
                        extra={"step": step or log_name, "address": address})


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure diagnostics and the address stream. Safe to call more than once."""
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    for handler in list(address_logger.handlers):
        address_logger.removeHandler(handler)
        handler.close()
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter('%(message)s'))
    address_logger.addHandler(stdout_handler)
    address_logger.setLevel(logging.INFO)
    # Address lines also land in the log file, but not twice on the console
    address_logger.propagate = False
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        address_logger.addHandler(file_handler)
