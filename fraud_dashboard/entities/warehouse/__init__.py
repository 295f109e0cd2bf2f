"""
Warehouse access for the dashboard.

Provides:
- SnowflakeSettings: environment-driven connection settings
- ConnectionManager: cached connection with OAuth token rotation
- QueryExecutor: SQL execution with a single reconnect-and-retry
"""

from .connection import ConnectionManager
from .executor import QueryExecutor, is_retryable_error
from .settings import SnowflakeSettings, get_settings

__all__ = [
    "ConnectionManager",
    "QueryExecutor",
    "SnowflakeSettings",
    "get_settings",
    "is_retryable_error",
]
