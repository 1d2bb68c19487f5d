"""
Pytest configuration for MotorNet tests.

Puts src/ on sys.path so tests run without an installed package, and
keeps the global Logger quiet unless a test installs a strategy.
"""

import sys
import os

import pytest

_src_root = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if _src_root not in sys.path:
    sys.path.insert(0, _src_root)

from motornet.utils.logger.logger import Logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Each test starts with no log storage and logging enabled."""
    Logger.set_log_storage_strategy(None)
    Logger.is_logging_enabled = True
    Logger.min_priority = Logger.LogPriority.DEBUG
    yield
    Logger.set_log_storage_strategy(None)
    Logger.is_logging_enabled = True
    Logger.min_priority = Logger.LogPriority.DEBUG
