"""
Statement policy for user-submitted SQL.
"""

from fraud_dashboard.entities.errors import PolicyError, ValidationError


def is_select_statement(sql: str) -> bool:
    """True if the statement text starts with SELECT (case-insensitive, trimmed)."""
    return sql.strip().lower().startswith("select")


def ensure_select_only(sql: str | None) -> str:
    """
    Validate SQL submitted from the UI before it reaches the warehouse.

    The check is purely textual: it does not parse the statement, so a
    leading comment or a WITH clause is rejected even when it only reads.

    Raises:
        ValidationError: If no statement was given
        PolicyError: If the statement does not start with SELECT
    """
    if not sql:
        raise ValidationError("SQL query is required")
    if not is_select_statement(sql):
        raise PolicyError("Only SELECT queries are allowed")
    return sql
