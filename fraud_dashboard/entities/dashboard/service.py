"""
Dashboard data access.

Thin async wrappers that pair each dashboard query with its bind parameters
and shape the rows the way the UI consumes them.
"""

import asyncio
import csv
import datetime
import io
import logging
from typing import Any

from fraud_dashboard.entities.warehouse import QueryExecutor

from . import queries

logger = logging.getLogger(__name__)

Rows = list[dict[str, Any]]


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def confusion_metrics(row: dict[str, Any] | None) -> dict[str, Any]:
    """
    Derive precision, recall, F1 and accuracy (as percentages) from a confusion matrix row.

    Undefined ratios (zero denominators) are reported as 0.
    """
    row = row or {}
    tp = row.get("TRUE_POSITIVES") or 0
    fp = row.get("FALSE_POSITIVES") or 0
    fn = row.get("FALSE_NEGATIVES") or 0
    tn = row.get("TRUE_NEGATIVES") or 0

    precision = _ratio(tp, tp + fp)
    recall = _ratio(tp, tp + fn)
    f1 = _ratio(2 * precision * recall, precision + recall)
    accuracy = _ratio(tp + tn, tp + tn + fp + fn)

    return {
        **row,
        "precision": precision * 100,
        "recall": recall * 100,
        "f1": f1 * 100,
        "accuracy": accuracy * 100,
    }


def report_to_csv(report: dict[str, Any]) -> str:
    """Render an export report as the sectioned CSV the analysts download."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    summary = report.get("summary") or {}

    writer.writerow(["FRAUD REPORT"])
    writer.writerow([f"Generated: {report['generatedAt']}"])
    writer.writerow([])

    writer.writerow(["SUMMARY"])
    writer.writerow(["Total Transactions", summary.get("TOTAL_TRANSACTIONS")])
    writer.writerow(["Total Frauds", summary.get("TOTAL_FRAUDS")])
    writer.writerow(["Fraud Rate", f"{summary.get('FRAUD_RATE')}%"])
    writer.writerow(["Total Amount", f"${summary.get('TOTAL_AMOUNT')}"])
    writer.writerow(["Fraud Amount", f"${summary.get('FRAUD_AMOUNT')}"])
    writer.writerow([])

    writer.writerow(["FRAUD BY CATEGORY"])
    writer.writerow(["Category", "Frauds", "Fraud Rate"])
    for row in report.get("fraudByCategory", []):
        writer.writerow([row.get("CATEGORIA"), row.get("FRAUDES"), f"{row.get('TASA_FRAUDE')}%"])
    writer.writerow([])

    writer.writerow(["FRAUD BY CITY"])
    writer.writerow(["City", "Frauds", "Fraud Rate"])
    for row in report.get("fraudByCity", []):
        writer.writerow([row.get("CIUDAD"), row.get("FRAUDES"), f"{row.get('TASA_FRAUDE')}%"])

    return buffer.getvalue()


class DashboardService:
    """Queries behind the dashboard, alerts, analysis and investigation pages."""

    def __init__(self, executor: QueryExecutor, schema: str):
        """
        Args:
            executor: Shared query executor
            schema: Fully qualified DATABASE.SCHEMA holding the fraud tables
        """
        self.executor = executor
        self.schema = schema

    async def alerts(self, pending: bool = False, limit: int = 50) -> Rows:
        return await self.executor.execute(queries.alerts(self.schema, pending), {"limit": limit})

    async def fraud_by_time(self) -> Rows:
        return await self.executor.execute(queries.fraud_by_time(self.schema))

    async def fraud_by_category(self) -> Rows:
        return await self.executor.execute(queries.fraud_by_category(self.schema))

    async def fraud_by_geography(self) -> Rows:
        return await self.executor.execute(queries.fraud_by_geography(self.schema))

    async def compare_periods(
        self,
        period1: tuple[datetime.date, datetime.date],
        period2: tuple[datetime.date, datetime.date],
    ) -> Rows:
        """Aggregate two date ranges side by side (one row per period)."""
        params = {
            "period1_start": period1[0].isoformat(),
            "period1_end": period1[1].isoformat(),
            "period2_start": period2[0].isoformat(),
            "period2_end": period2[1].isoformat(),
        }
        return await self.executor.execute(queries.compare_periods(self.schema), params)

    async def customer_transactions(self, customer_id: str) -> Rows:
        return await self.executor.execute(
            queries.customer_transactions(self.schema), {"customer_id": customer_id}
        )

    async def search_customers(self, search: str) -> Rows:
        return await self.executor.execute(queries.search_customers(self.schema), {"search": search})

    async def top_risk_customers(self) -> Rows:
        return await self.executor.execute(queries.top_risk_customers(self.schema))

    async def metrics(self) -> dict[str, Any]:
        rows = await self.executor.execute(queries.metrics(self.schema))
        return rows[0] if rows else {}

    async def model_performance(self) -> dict[str, Any]:
        rows = await self.executor.execute(queries.model_performance(self.schema))
        return confusion_metrics(rows[0] if rows else None)

    async def map_data(self) -> Rows:
        rows = await self.executor.execute(queries.map_data(self.schema))
        return [
            {
                "city": row.get("CITY"),
                "count": row.get("TOTAL_TRANSACTIONS"),
                "fraudRate": row.get("FRAUD_RATE"),
            }
            for row in rows
        ]

    async def export_report(self) -> dict[str, Any]:
        """Collect the summary, top categories and top cities for export."""
        summary, categories, cities = await asyncio.gather(
            self.executor.execute(queries.metrics(self.schema)),
            self.executor.execute(queries.top_categories(self.schema)),
            self.executor.execute(queries.top_cities(self.schema)),
        )
        return {
            "generatedAt": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "summary": summary[0] if summary else {},
            "fraudByCategory": categories,
            "fraudByCity": cities,
        }
