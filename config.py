"""
Configuration Management - MongoDB Lifecycle Service
"""

import os
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable"""
    val = os.getenv(key, str(default)).lower()
    return val in ('true', '1', 't', 'y', 'yes')


def get_int_env(key: str, default: int = 0) -> int:
    """Get integer from environment variable"""
    try:
        return int(os.getenv(key, default))
    except (ValueError, TypeError):
        return default


def get_float_env(key: str, default: float = 0.0) -> float:
    """Get float from environment variable"""
    try:
        return float(os.getenv(key, default))
    except (ValueError, TypeError):
        return default


# ============== MONGODB CONFIGURATION ==============
# No default: a missing URI must fail the startup instead of falling back to localhost
MONGODB_URI: Optional[str] = os.getenv("MONGODB_URI")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "reply_service")
MONGODB_POOL_SIZE = get_int_env("MONGODB_POOL_SIZE", 50)
MONGODB_MIN_POOL_SIZE = get_int_env("MONGODB_MIN_POOL_SIZE", 10)
MONGODB_MAX_IDLE_TIME = get_int_env("MONGODB_MAX_IDLE_TIME", 30000)  # ms
MONGODB_CONNECT_TIMEOUT = get_int_env("MONGODB_CONNECT_TIMEOUT", 5000)  # ms
MONGODB_SOCKET_TIMEOUT = get_int_env("MONGODB_SOCKET_TIMEOUT", 30000)  # ms
MONGODB_SERVER_SELECTION_TIMEOUT = get_int_env("MONGODB_SERVER_SELECTION_TIMEOUT", 5000)  # ms

# ============== LOGGING ==============
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "")

# ============== HEALTH MONITORING ==============
ENABLE_HEALTH_MONITORING = get_bool_env("ENABLE_HEALTH_MONITORING", True)
HEALTH_CHECK_INTERVAL = get_float_env("HEALTH_CHECK_INTERVAL", 60.0)  # seconds
HEALTH_MAX_FAILURES = get_int_env("HEALTH_MAX_FAILURES", 5)

# ============== VALIDATION ==============
REQUIRED_ENV_VARS = ["MONGODB_URI"]


def missing_env_vars(required: Optional[List[str]] = None) -> List[str]:
    """Return required environment variables that are unset or empty"""
    required = REQUIRED_ENV_VARS if required is None else required
    return [key for key in required if not os.getenv(key)]
