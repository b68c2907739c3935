"""
Shared fixtures for the MongoDB lifecycle tests
"""

import logging
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest

from core.shutdown import ShutdownCoordinator
from database.mongodb import MongoDB

TEST_URI = "mongodb://db.example.com:27017"


@pytest.fixture(autouse=True)
def info_logs(caplog):
    """Capture INFO and above for every test"""
    caplog.set_level(logging.INFO)
    return caplog


@pytest.fixture
def fake_client():
    """Driver client double that answers ping"""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1.0})
    client.nodes = frozenset({("db.example.com", 27017)})
    client.close = Mock()
    return client


@pytest.fixture
def client_factory(fake_client):
    """Patch the motor client class to hand out the fake client"""
    with patch("motor.motor_asyncio.AsyncIOMotorClient", return_value=fake_client) as factory:
        yield factory


@pytest.fixture
def database():
    return MongoDB(uri=TEST_URI, db_name="test_db")


@pytest.fixture
def exit_func():
    return Mock()


@pytest.fixture
async def coordinator(exit_func):
    """Coordinator with a mocked exit, handlers removed after the test"""
    coord = ShutdownCoordinator(exit_func=exit_func)
    yield coord
    coord.remove_signal_handlers()


@pytest.fixture
def find_logs(caplog):
    """Log records containing text, optionally filtered by level"""

    def find(text, level=None):
        return [
            record for record in caplog.records
            if text in record.getMessage() and (level is None or record.levelno == level)
        ]

    return find
