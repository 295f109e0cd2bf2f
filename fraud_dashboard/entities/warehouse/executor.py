"""
SQL execution against the Snowflake warehouse.
"""

import asyncio
import datetime
import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from snowflake.connector import DictCursor, SnowflakeConnection

from fraud_dashboard.entities.errors import QueryError, WarehouseConnectionError
from fraud_dashboard.entities.warehouse.connection import ConnectionManager

logger = logging.getLogger(__name__)

# A stale session is recovered by reconnecting once; never more
MAX_RETRIES = 1

RETRYABLE_MESSAGES = (
    "OAuth access token expired",
    "terminated connection",
)

# 407002: connection dropped, 390112/390114: session or token expired
RETRYABLE_ERROR_CODES = frozenset({407002, 390112, 390114})


def is_retryable_error(error: BaseException) -> bool:
    """Return True if the error signals a stale session rather than a bad query."""
    message = str(error)
    if any(marker in message for marker in RETRYABLE_MESSAGES):
        return True
    return getattr(error, "errno", None) in RETRYABLE_ERROR_CODES


def _json_safe(value: Any) -> Any:
    """Convert connector values into JSON-serializable scalars."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _run_statement(
    connection: SnowflakeConnection,
    sql: str,
    params: Mapping[str, Any] | None,
) -> list[dict[str, Any]]:
    with connection.cursor(DictCursor) as cursor:
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params)
        return cursor.fetchall() or []


class QueryExecutor:
    """
    Runs SQL through the shared warehouse connection.

    Every call returns a list of row dictionaries keyed by column name. Stale
    sessions are recovered by reconnecting once; all other failures propagate.
    """

    def __init__(self, connections: ConnectionManager):
        self.connections = connections

    async def execute(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
        retries: int = MAX_RETRIES,
    ) -> list[dict[str, Any]]:
        """
        Execute a statement and return its rows.

        Args:
            sql: SQL text. Use %(name)s placeholders when passing params.
            params: Optional bind parameters
            retries: Reconnect attempts left for retryable errors (capped at one)

        Returns:
            List of dictionaries, one per row, with JSON-safe values

        Raises:
            WarehouseConnectionError: If no connection could be opened
            QueryError: If the statement failed and cannot be retried
        """
        retries = min(retries, MAX_RETRIES)
        connection = None

        try:
            connection = await self.connections.get_connection()
            raw_rows = await asyncio.to_thread(_run_statement, connection, sql, params)
        except Exception as e:
            logger.error("Query error: %s", e)
            retryable = is_retryable_error(e)

            if retries > 0 and retryable:
                logger.warning("Retryable warehouse error, reconnecting (%d retries left)", retries)
                self.connections.invalidate(connection)
                return await self.execute(sql, params, retries - 1)

            if isinstance(e, (QueryError, WarehouseConnectionError)):
                raise
            raise QueryError(str(e), errno=getattr(e, "errno", None), retryable=retryable) from e

        rows = [{column: _json_safe(value) for column, value in row.items()} for row in raw_rows]
        logger.debug("Query returned %d rows", len(rows))
        return rows
