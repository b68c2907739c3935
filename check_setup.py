#!/usr/bin/env python3
"""
Setup check: verify environment variables and MongoDB connectivity
"""

import asyncio
import sys
from typing import Optional

from config import LOG_LEVEL, REQUIRED_ENV_VARS, missing_env_vars
from core.utils import setup_logging, get_logger
from database.mongodb import MongoDB, close_db

logger = get_logger(__name__)


def check_environment() -> bool:
    """Report each required environment variable"""
    logger.info("1. Testing environment variables...")
    missing = missing_env_vars()
    for key in REQUIRED_ENV_VARS:
        if key in missing:
            logger.error(f"   ❌ {key} is missing")
        else:
            logger.info(f"   ✅ {key} is set")
    return not missing


async def check_database(database: Optional[MongoDB] = None) -> bool:
    """Connect, ping and close"""
    logger.info("2. Testing MongoDB connection...")
    database = database if database is not None else MongoDB()
    try:
        await database.connect()
    except Exception as e:
        logger.error(f"   ❌ MongoDB connection failed: {e}")
        return False

    try:
        if not await database.ping():
            logger.error("   ❌ MongoDB ping failed")
            return False
        stats = await database.get_db_stats()
        logger.info(
            f"   ✅ MongoDB connection successful "
            f"({stats.get('database', database.db_name)}, "
            f"{len(stats.get('collections', []))} collections)"
        )
        return True
    finally:
        await close_db(database)


async def run_checks(database: Optional[MongoDB] = None) -> int:
    env_ok = check_environment()
    db_ok = await check_database(database)

    if env_ok and db_ok:
        logger.info("🎉 All checks passed")
        return 0
    logger.error("Some checks failed")
    return 1


def main() -> None:
    setup_logging(LOG_LEVEL)
    sys.exit(asyncio.run(run_checks()))


if __name__ == "__main__":
    main()
