"""
Utility functions for the service
"""

import os
import sys
import logging
from datetime import datetime
from typing import Iterable, Optional, Tuple


# ============== LOGGING SETUP ==============

_logging_configured = False


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Setup logging configuration"""
    global _logging_configured

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if _logging_configured:
        return

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))
    root_logger.addHandler(console_handler)

    # File handler, only when a log directory is configured
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(
            os.path.join(log_dir, f"service_{datetime.now().strftime('%Y%m%d')}.log"),
            encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        root_logger.addHandler(file_handler)

    # Set specific log levels for noisy libraries
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("motor").setLevel(logging.WARNING)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


# ============== FORMATTING ==============

def time_formatter(seconds: float) -> str:
    """Format seconds to human readable time"""
    if seconds < 0:
        seconds = 0

    seconds = int(seconds)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0:
        parts.append(f"{seconds}s")

    return " ".join(parts) if parts else "0s"


def format_hosts(nodes: Iterable[Tuple[str, int]]) -> str:
    """Format driver node addresses as a sorted, comma separated host list"""
    hosts = sorted(f"{host}:{port}" for host, port in nodes)
    return ", ".join(hosts) if hosts else "unknown"
