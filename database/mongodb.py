"""
MongoDB connection handle and lifecycle initializer
"""

import sys
from typing import Any, Callable, Dict, Optional

import motor.motor_asyncio
from pymongo.errors import ConfigurationError, ConnectionFailure

from config import (
    MONGODB_URI, MONGODB_DB_NAME, MONGODB_POOL_SIZE, MONGODB_MIN_POOL_SIZE,
    MONGODB_MAX_IDLE_TIME, MONGODB_CONNECT_TIMEOUT, MONGODB_SOCKET_TIMEOUT,
    MONGODB_SERVER_SELECTION_TIMEOUT
)
from core.shutdown import ShutdownCoordinator, shutdown_coordinator
from core.utils import get_logger, format_hosts
from database.events import ConnectionEvents, HeartbeatListener, attach_logging_observers

logger = get_logger(__name__)


class MongoDB:
    """MongoDB connection handle"""

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None):
        self.uri = uri if uri is not None else MONGODB_URI
        self.db_name = db_name or MONGODB_DB_NAME
        self.client = None
        self.db = None
        self.host: Optional[str] = None
        self.is_connected = False
        self.events = ConnectionEvents()
        self.listener = HeartbeatListener(self.events)
        self.observers_attached = False
        self._connect_attempted = False

    async def connect(self) -> None:
        """Establish connection to MongoDB"""
        if self.is_connected:
            logger.warning("MongoDB connection already initialized, skipping")
            return
        if self._connect_attempted:
            raise ConnectionFailure("MongoDB connection was already attempted on this handle")
        self._connect_attempted = True

        try:
            if not self.uri:
                raise ConfigurationError("MONGODB_URI is not set")

            # Create client with connection pool
            self.client = motor.motor_asyncio.AsyncIOMotorClient(
                self.uri,
                maxPoolSize=MONGODB_POOL_SIZE,
                minPoolSize=MONGODB_MIN_POOL_SIZE,
                maxIdleTimeMS=MONGODB_MAX_IDLE_TIME,
                connectTimeoutMS=MONGODB_CONNECT_TIMEOUT,
                socketTimeoutMS=MONGODB_SOCKET_TIMEOUT,
                serverSelectionTimeoutMS=MONGODB_SERVER_SELECTION_TIMEOUT,
                retryWrites=True,
                retryReads=True,
                event_listeners=[self.listener]
            )

            # Test connection
            await self.client.admin.command('ping')

            self.db = self.client[self.db_name]
            self.host = format_hosts(self.client.nodes)
            self.is_connected = True
            logger.info(f"✅ MongoDB Connected: {self.host}")

        except ConnectionFailure as e:
            logger.error(f"❌ MongoDB connection failed: {e}")
            await self._discard_client()
            raise
        except Exception as e:
            logger.error(f"❌ MongoDB error: {e}")
            await self._discard_client()
            raise

    async def disconnect(self) -> None:
        """Close database connection, safe to call more than once"""
        if self.client is None:
            return

        client = self.client
        self.client = None
        self.db = None
        self.is_connected = False
        client.close()
        logger.info("🔌 Disconnected from MongoDB")

    async def _discard_client(self) -> None:
        if self.client is not None:
            self.client.close()
        self.client = None
        self.db = None

    def get_database(self):
        """Return the configured database"""
        if self.db is None:
            raise ConnectionFailure("MongoDB is not connected")
        return self.db

    # ============== HEALTH CHECK ==============

    async def ping(self) -> bool:
        """Check database connection"""
        if self.client is None:
            return False
        try:
            await self.client.admin.command('ping')
            return True
        except Exception:
            return False

    async def get_db_stats(self) -> Dict[str, Any]:
        """Get database statistics"""
        try:
            db_stats = await self.get_database().command("dbStats")
            collections = await self.db.list_collection_names()

            return {
                "database": self.db_name,
                "host": self.host,
                "collections": sorted(collections),
                "data_size": db_stats.get("dataSize", 0),
                "storage_size": db_stats.get("storageSize", 0),
                "indexes": db_stats.get("indexes", 0),
                "index_size": db_stats.get("indexSize", 0)
            }

        except Exception as e:
            logger.error(f"Error getting DB stats: {e}")
            return {}


# Global MongoDB instance
db = MongoDB()


# ============== INITIALIZATION ==============

def close_on_termination(database: MongoDB) -> Callable:
    """Build the shutdown cleanup that closes a handle"""

    async def close() -> None:
        try:
            await database.disconnect()
        except Exception as e:
            logger.error(f"Error closing MongoDB connection: {e}")
            raise
        logger.info("MongoDB connection closed through app termination")

    return close


async def init_db(
    database: Optional[MongoDB] = None,
    coordinator: Optional[ShutdownCoordinator] = None,
    exit_func: Callable[[int], None] = sys.exit,
) -> None:
    """Connect to MongoDB, log connection events and close on SIGINT/SIGTERM

    A failed connection is fatal: the failure is logged and the process exits
    with status 1. Nothing is returned on success.
    """
    database = database if database is not None else db
    coordinator = coordinator if coordinator is not None else shutdown_coordinator

    try:
        await database.connect()
    except Exception as e:
        logger.error(f"❌ Database connection failed: {e}")
        exit_func(1)
        return

    if not database.observers_attached:
        attach_logging_observers(database.events)
        database.observers_attached = True

    coordinator.register("mongodb", close_on_termination(database))
    coordinator.install_signal_handlers()


async def close_db(database: Optional[MongoDB] = None) -> None:
    """Close database connection"""
    database = database if database is not None else db
    await database.disconnect()
