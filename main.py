#!/usr/bin/env python3
"""
Reply Service - MongoDB Lifecycle
Main Entry Point
"""

import asyncio
import sys

from config import LOG_LEVEL, LOG_DIR
from core.shutdown import shutdown_coordinator
from core.utils import setup_logging, get_logger
from database.mongodb import init_db, db
from monitoring.health import HealthMonitor

logger = get_logger(__name__)


async def run() -> None:
    """Connect, start background monitoring and wait for termination"""
    logger.info("🚀 Starting reply service...")

    # Exits the process on failure
    await init_db(db, shutdown_coordinator)
    logger.info("✅ Database connected successfully")

    health_monitor = HealthMonitor(db)
    await health_monitor.start_monitoring()
    # Registered after the database so it stops first
    shutdown_coordinator.register("health monitor", health_monitor.stop_monitoring)

    logger.info("🎉 Service started, waiting for termination signal")
    await shutdown_coordinator.wait_for_shutdown()


def main() -> None:
    """Main entry point"""
    setup_logging(LOG_LEVEL, LOG_DIR)

    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("👋 Received keyboard interrupt")
    finally:
        logger.info("🏁 Service process ended")


if __name__ == "__main__":
    main()
