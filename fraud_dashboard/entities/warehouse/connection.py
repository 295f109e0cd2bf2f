"""
Cached Snowflake connection with OAuth token rotation.

Inside Snowpark Container Services the platform mounts a short-lived OAuth
token at a well-known path and rotates it while the service is running. Outside
the platform the connection falls back to username/password settings.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import snowflake.connector
from snowflake.connector import SnowflakeConnection

from fraud_dashboard.entities.errors import WarehouseConnectionError
from fraud_dashboard.entities.warehouse.settings import SnowflakeSettings

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Owns the single process-wide warehouse connection.

    The connection is created lazily on first use and reused until either the
    mounted OAuth token changes or the query executor invalidates it after a
    retryable error. Creation is serialised with an asyncio lock so concurrent
    first requests share one connection.

    Usage:
        manager = ConnectionManager(get_settings())
        conn = await manager.get_connection()
    """

    def __init__(
        self,
        settings: SnowflakeSettings,
        connect: Callable[..., SnowflakeConnection] = snowflake.connector.connect,
    ):
        """
        Initialize the connection manager.

        Args:
            settings: Warehouse settings (account, warehouse, credentials)
            connect: Factory used to open connections (the connector by default)
        """
        self.settings = settings
        self._connect = connect
        self._connection: SnowflakeConnection | None = None
        self._cached_token: str | None = None
        self._lock = asyncio.Lock()
        self._teardown_tasks: set[asyncio.Task] = set()

    @property
    def connection(self) -> SnowflakeConnection | None:
        """The cached connection, or None if none is open."""
        return self._connection

    def read_oauth_token(self) -> str | None:
        """
        Read the platform session token.

        Returns:
            The token text, or None when the file is absent, unreadable or empty
        """
        token_path = Path(self.settings.SNOWFLAKE_TOKEN_PATH)
        try:
            if token_path.is_file():
                token = token_path.read_text(encoding="utf-8").strip()
                return token or None
        except OSError as e:
            logger.debug("Session token at %s not readable: %s", token_path, e)
        return None

    def connection_params(self, token: str | None) -> dict[str, Any]:
        """
        Build connector arguments for the resolved credential.

        An OAuth token always wins over the password settings. A missing
        password is passed through unchanged and rejected by the warehouse.
        """
        params: dict[str, Any] = {
            "account": self.settings.SNOWFLAKE_ACCOUNT,
            "warehouse": self.settings.SNOWFLAKE_WAREHOUSE,
            "database": self.settings.SNOWFLAKE_DATABASE,
            "schema": self.settings.SNOWFLAKE_SCHEMA,
        }

        if token:
            params.update(authenticator="oauth", token=token)
            if self.settings.SNOWFLAKE_HOST:
                params["host"] = self.settings.SNOWFLAKE_HOST
            return params

        params.update(
            user=self.settings.SNOWFLAKE_USER,
            password=self.settings.SNOWFLAKE_PASSWORD,
        )
        return params

    async def get_connection(self) -> SnowflakeConnection:
        """
        Return the cached connection, opening or rotating it if needed.

        Raises:
            WarehouseConnectionError: If the warehouse is unreachable or rejects
                the credential
        """
        async with self._lock:
            token = await asyncio.to_thread(self.read_oauth_token)

            if self._connection is not None:
                if self._cached_token is None or token == self._cached_token:
                    return self._connection

                logger.info("OAuth token changed, reconnecting")
                self._schedule_teardown(self._connection)
                self._connection = None

            logger.info("Connecting with OAuth token" if token else "Connecting with password")
            try:
                connection = await asyncio.to_thread(self._connect, **self.connection_params(token))
            except Exception as e:
                logger.error("Failed to connect to Snowflake: %s", e)
                raise WarehouseConnectionError(str(e), errno=getattr(e, "errno", None)) from e

            self._connection = connection
            self._cached_token = token
            return connection

    def invalidate(self, connection: SnowflakeConnection | None = None) -> None:
        """
        Drop the cached connection so the next call opens a new one.

        Args:
            connection: The handle that failed. If a newer connection has already
                replaced it, the cached slot is left alone.
        """
        if connection is not None and connection is not self._connection:
            return
        self._connection = None

    def _schedule_teardown(self, connection: SnowflakeConnection) -> None:
        """Close a replaced connection in the background, logging any failure."""
        task = asyncio.get_running_loop().create_task(asyncio.to_thread(connection.close))
        self._teardown_tasks.add(task)
        task.add_done_callback(self._teardown_done)

    def _teardown_done(self, task: asyncio.Task) -> None:
        self._teardown_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Error closing rotated Snowflake connection: %s", error)

    async def close(self) -> None:
        """Close the cached connection and wait for pending teardowns."""
        async with self._lock:
            connection, self._connection = self._connection, None
            self._cached_token = None

        if connection is not None:
            try:
                await asyncio.to_thread(connection.close)
            except Exception as e:
                logger.warning("Error closing Snowflake connection: %s", e)

        if self._teardown_tasks:
            await asyncio.gather(*self._teardown_tasks, return_exceptions=True)
