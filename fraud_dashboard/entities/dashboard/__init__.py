"""
Dashboard queries - fraud aggregates, alerts, customers and model metrics.
"""

from .service import DashboardService, confusion_metrics, report_to_csv

__all__ = ["DashboardService", "confusion_metrics", "report_to_csv"]
