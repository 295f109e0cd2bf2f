"""
SQL console route.

Used by the intelligence page to re-run generated SQL for the table view.
"""

import logging

from fastapi import APIRouter, Depends

from fraud_dashboard.api.dependencies import error_response, get_executor, get_optional_user_id
from fraud_dashboard.api.models import ExecuteSqlRequest, ExecuteSqlResponse
from fraud_dashboard.entities.warehouse import QueryExecutor
from fraud_dashboard.entities.warehouse.policy import ensure_select_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sql"])


@router.post("/execute-sql", response_model=ExecuteSqlResponse)
async def execute_sql(
    body: ExecuteSqlRequest,
    executor: QueryExecutor = Depends(get_executor),
    user_id: str | None = Depends(get_optional_user_id),
):
    """
    Execute a read-only statement.

    Returns 400 if `sql` is missing or does not start with SELECT.
    """
    sql = ensure_select_only(body.sql)
    logger.info("Executing SQL for user=%s: %s", user_id, sql[:200])

    try:
        results = await executor.execute(sql)
    except Exception as e:
        logger.error("Error executing SQL: %s", e)
        return error_response("Failed to execute SQL")

    return {"results": results}
