"""
Monitoring Package
"""

from .health import HealthMonitor, HealthStatus

__all__ = ["HealthMonitor", "HealthStatus"]
