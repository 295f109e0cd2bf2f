"""
FastAPI dependencies for request identity and shared services.
"""

import logging
from typing import TYPE_CHECKING

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from fraud_dashboard.entities.dashboard import DashboardService
    from fraud_dashboard.entities.intelligence import IntelligenceOrchestrator
    from fraud_dashboard.entities.predictions import FraudPredictor
    from fraud_dashboard.entities.warehouse import QueryExecutor

logger = logging.getLogger(__name__)


def get_optional_user_id(request: Request) -> str | None:
    """Get the ingress user from request state, or None if not forwarded."""
    return getattr(request.state, "user_id", None)


def _from_state(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} not initialized")
    return service


def get_executor(request: Request) -> "QueryExecutor":
    """
    Get the query executor from app state.

    Raises HTTPException 503 if not initialized.
    """
    return _from_state(request, "executor", "Query executor")


def get_dashboard(request: Request) -> "DashboardService":
    return _from_state(request, "dashboard", "Dashboard service")


def get_predictor(request: Request) -> "FraudPredictor":
    return _from_state(request, "predictor", "Fraud predictor")


def get_orchestrator(request: Request) -> "IntelligenceOrchestrator":
    return _from_state(request, "orchestrator", "Intelligence assistant")


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    """JSON error body in the `{"error": ...}` shape the UI expects."""
    return JSONResponse(status_code=status_code, content={"error": message})
