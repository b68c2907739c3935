"""
Database Package - MongoDB connection lifecycle
"""

from .mongodb import MongoDB, db, init_db, close_db
from .events import ConnectionEvents

__all__ = ["MongoDB", "ConnectionEvents", "db", "init_db", "close_db"]
