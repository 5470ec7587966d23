"""Root conftest.py for platform_common tests.

This file MUST be at the repository root for fixtures to be discovered
when running tests from any subdirectory.

Provides shared fixtures used across all test modules:
- mock_logger: LoggerProtocol double
- ctx: empty request Context
"""

import pytest
from unittest.mock import MagicMock

from platform_common.context import Context


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing.

    bind() returns the same mock so component-bound loggers can be asserted
    on directly.
    """
    logger = MagicMock()
    logger.info = MagicMock()
    logger.debug = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    logger.bind = MagicMock(return_value=logger)
    return logger


@pytest.fixture
def ctx():
    """Empty background context."""
    return Context.background()
