"""
Health Monitoring System
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from config import ENABLE_HEALTH_MONITORING, HEALTH_CHECK_INTERVAL, HEALTH_MAX_FAILURES
from core.utils import get_logger, time_formatter
from database.mongodb import MongoDB

logger = get_logger(__name__)


@dataclass
class HealthStatus:
    """Health check status"""
    healthy: bool = True
    message: str = "All systems operational"
    timestamp: float = field(default_factory=time.time)
    checks: Dict[str, bool] = field(default_factory=dict)


class HealthMonitor:
    """Monitor database health"""

    def __init__(
        self,
        database: MongoDB,
        check_interval: float = HEALTH_CHECK_INTERVAL,
        max_failures: int = HEALTH_MAX_FAILURES,
        enabled: bool = ENABLE_HEALTH_MONITORING,
    ):
        self.database = database
        self.check_interval = check_interval
        self.max_failures = max_failures
        self.enabled = enabled
        self.status = HealthStatus()
        self.is_running = False
        self.monitor_task: Optional[asyncio.Task] = None
        self.failure_count = 0
        self.start_time = time.time()

    async def start_monitoring(self) -> None:
        """Start the health monitoring loop"""
        if not self.enabled:
            logger.info("Health monitoring is disabled")
            return
        if self.is_running:
            return

        self.is_running = True
        self.monitor_task = asyncio.create_task(self._monitor_loop())
        logger.info("Health monitoring started")

    async def stop_monitoring(self) -> None:
        """Stop health monitoring"""
        if self.monitor_task is None and not self.is_running:
            return

        self.is_running = False
        if self.monitor_task:
            self.monitor_task.cancel()
            try:
                await self.monitor_task
            except asyncio.CancelledError:
                pass
            self.monitor_task = None
        logger.info("Health monitoring stopped")

    async def _monitor_loop(self) -> None:
        """Main monitoring loop"""
        while self.is_running:
            try:
                await self.run_health_check()
                await asyncio.sleep(self.check_interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in health monitor loop: {e}")
                await asyncio.sleep(min(self.check_interval, 10))

    async def run_health_check(self) -> HealthStatus:
        """Run the database health check"""
        checks = {"database": await self._check_database()}

        all_healthy = all(checks.values())
        self.status = HealthStatus(
            healthy=all_healthy,
            message="All systems operational" if all_healthy else "Some systems degraded",
            timestamp=time.time(),
            checks=checks
        )

        if not all_healthy:
            self.failure_count += 1
            logger.warning(f"Health check failed ({self.failure_count}/{self.max_failures}): {checks}")

            if self.failure_count == self.max_failures:
                logger.critical(f"Critical health failure: {checks}")
        else:
            # Reset failure count on success
            self.failure_count = 0

        return self.status

    async def _check_database(self) -> bool:
        """Check database connection"""
        try:
            return await self.database.ping()
        except Exception as e:
            logger.error(f"Database check failed: {e}")
            return False

    def get_uptime(self) -> float:
        return time.time() - self.start_time

    def get_status(self) -> Dict[str, Any]:
        """Get current health status"""
        uptime = self.get_uptime()
        return {
            "status": "OK" if self.status.healthy else "DEGRADED",
            "healthy": self.status.healthy,
            "message": self.status.message,
            "timestamp": datetime.fromtimestamp(self.status.timestamp, tz=timezone.utc).isoformat(),
            "uptime": uptime,
            "uptime_human": time_formatter(uptime),
            "checks": self.status.checks,
            "failure_count": self.failure_count,
        }
