"""
API routers package.
"""

from fraud_dashboard.api.routers.dashboard import router as dashboard_router
from fraud_dashboard.api.routers.intelligence import router as intelligence_router
from fraud_dashboard.api.routers.predictions import router as predictions_router
from fraud_dashboard.api.routers.sql import router as sql_router

__all__ = ["dashboard_router", "intelligence_router", "predictions_router", "sql_router"]
