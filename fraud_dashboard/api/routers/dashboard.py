"""
Dashboard API routes.

Read-only views over the fraud tables: alerts, fraud aggregates, period
comparison, customer investigation, KPIs, model performance and report export.
Failures return 500 with a generic `{"error": ...}` body; details are logged.
"""

import datetime
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from fraud_dashboard.api.dependencies import error_response, get_dashboard
from fraud_dashboard.api.models import MapDataResponse
from fraud_dashboard.entities.dashboard import DashboardService, report_to_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/alerts")
async def get_alerts(
    pending: bool = Query(False, description="Only alerts still pending or under investigation"),
    limit: int = Query(50, ge=1, le=1000, description="Maximum number of alerts"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Most recent fraudulent transactions, newest first."""
    try:
        return await dashboard.alerts(pending=pending, limit=limit)
    except Exception as e:
        logger.error("Error fetching alerts: %s", e)
        return error_response("Failed to fetch alerts")


@router.get("/fraud-by-time")
async def get_fraud_by_time(dashboard: DashboardService = Depends(get_dashboard)):
    """Daily transaction and fraud counts."""
    try:
        return await dashboard.fraud_by_time()
    except Exception as e:
        logger.error("Error fetching fraud by time: %s", e)
        return error_response("Failed to fetch data")


@router.get("/fraud-by-category")
async def get_fraud_by_category(dashboard: DashboardService = Depends(get_dashboard)):
    """Fraud rate per merchant category, highest first."""
    try:
        return await dashboard.fraud_by_category()
    except Exception as e:
        logger.error("Error fetching fraud by category: %s", e)
        return error_response("Failed to fetch data")


@router.get("/fraud-by-geography")
async def get_fraud_by_geography(dashboard: DashboardService = Depends(get_dashboard)):
    """Top 20 cities by fraud count."""
    try:
        return await dashboard.fraud_by_geography()
    except Exception as e:
        logger.error("Error fetching fraud by geography: %s", e)
        return error_response("Failed to fetch data")


@router.get("/compare")
async def compare_periods(
    period1_start: datetime.date = Query(datetime.date(2025, 1, 1)),
    period1_end: datetime.date = Query(datetime.date(2025, 1, 15)),
    period2_start: datetime.date = Query(datetime.date(2025, 1, 16)),
    period2_end: datetime.date = Query(datetime.date(2025, 1, 31)),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Side-by-side aggregates for two date ranges (ISO dates)."""
    try:
        return await dashboard.compare_periods(
            (period1_start, period1_end),
            (period2_start, period2_end),
        )
    except Exception as e:
        logger.error("Error comparing periods: %s", e)
        return error_response("Failed to compare periods")


@router.get("/customers")
async def get_customers(
    search: str | None = Query(None, description="Name or email fragment"),
    customer_id: str | None = Query(None, alias="id", description="Customer ID"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """
    Customer investigation.

    - `id`: the customer's latest 100 transactions as `{"transactions": [...]}`
    - `search`: matching customers as `{"customers": [...]}`
    - neither: the 10 highest-risk customers as `{"customers": [...]}`
    """
    try:
        if customer_id:
            return {"transactions": await dashboard.customer_transactions(customer_id)}
        if search:
            return {"customers": await dashboard.search_customers(search)}
        return {"customers": await dashboard.top_risk_customers()}
    except Exception as e:
        logger.error("Error fetching customers: %s", e)
        return error_response("Failed to fetch customers")


@router.get("/metrics")
async def get_metrics(dashboard: DashboardService = Depends(get_dashboard)):
    """Headline KPIs across all labelled transactions."""
    try:
        return await dashboard.metrics()
    except Exception as e:
        logger.error("Error fetching metrics: %s", e)
        return error_response("Failed to fetch metrics")


@router.get("/model-performance")
async def get_model_performance(dashboard: DashboardService = Depends(get_dashboard)):
    """Confusion matrix of the scoring model with derived percentages."""
    try:
        return await dashboard.model_performance()
    except Exception as e:
        logger.error("Error fetching model performance: %s", e)
        return error_response("Failed to fetch model performance")


@router.get("/map-data", response_model=MapDataResponse)
async def get_map_data(dashboard: DashboardService = Depends(get_dashboard)):
    """Transactions and fraud rate per city for the map view."""
    try:
        return {"data": await dashboard.map_data()}
    except Exception as e:
        logger.error("Error fetching map data: %s", e)
        return JSONResponse(status_code=500, content={"data": []})


@router.get("/export")
async def export_report(
    export_format: str = Query("json", alias="format", pattern="^(json|csv)$"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Fraud report as JSON or as a downloadable CSV."""
    try:
        report = await dashboard.export_report()
    except Exception as e:
        logger.error("Error generating report: %s", e)
        return error_response("Failed to generate report")

    if export_format == "csv":
        filename = f"fraud_report_{report['generatedAt'][:10]}.csv"
        return Response(
            content=report_to_csv(report),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    return report
