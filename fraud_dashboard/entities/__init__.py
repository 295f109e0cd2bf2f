"""
Entities package - the warehouse-facing core of the dashboard.

Each subpackage owns one concern:
- warehouse/: connection management, SQL execution and statement policy
- intelligence/: natural language questions answered with Cortex SQL
- dashboard/: fraud aggregates, alerts and customer queries
- predictions/: transaction scoring with heuristic fallback

Shared models and errors are available at the package level.
"""

from fraud_dashboard.entities.errors import (
    DashboardError,
    LLMError,
    PolicyError,
    QueryError,
    ValidationError,
    WarehouseConnectionError,
)
from fraud_dashboard.entities.models import ContentBlock, IntelligenceTurn, ParsedCompletion

__all__ = [
    "ContentBlock",
    "DashboardError",
    "IntelligenceTurn",
    "LLMError",
    "ParsedCompletion",
    "PolicyError",
    "QueryError",
    "ValidationError",
    "WarehouseConnectionError",
]
