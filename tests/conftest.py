import logging
import sys
from unittest.mock import AsyncMock

import pytest


# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)
logger.info("Test logging configured: level=DEBUG")


@pytest.fixture
def mock_transport():
    """模拟 GraphQLClient，只需要 raw_request"""
    transport = AsyncMock()
    transport.raw_request = AsyncMock()
    return transport


@pytest.fixture(autouse=True)
def log_test_start(request):
    """Log test start and end for each test."""
    logger.info("=" * 80)
    logger.info("Starting test: %s", request.node.name)
    yield
    logger.info("Completed test: %s", request.node.name)
    logger.info("=" * 80)
