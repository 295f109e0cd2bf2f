"""
Fraud prediction for a single transaction.

The registered XGBoost model is called through the warehouse. If the call fails
or returns nothing, a fixed-weight heuristic produces the answer instead.
The two paths are independent and can disagree for the same input.
"""

import logging
from typing import Any

from pydantic import BaseModel

from fraud_dashboard.entities.warehouse import QueryExecutor

logger = logging.getLogger(__name__)

MODEL_NAME = "XGBoost v1"
HEURISTIC_NAME = "Heuristic Fallback"
HEURISTIC_CONFIDENCE = 0.7
HEURISTIC_THRESHOLD = 40


class PredictionFeatures(BaseModel):
    """Transaction features accepted by the fraud model."""

    amount: float
    hour_of_day: int
    day_of_week: int
    is_weekend: int
    is_night: int
    tx_count_1h: int
    tx_count_24h: int
    amount_vs_avg_ratio: float
    customer_risk_score: float
    merchant_risk_score: int
    location_changed: int
    device_changed: int
    high_velocity_1h: int
    is_international: int


# Features the dashboard does not collect; passed as neutral defaults
_DEFAULT_MODEL_ARGS = """
    0.0::FLOAT,
    100::INTEGER,
    10::INTEGER,
    1000.0::FLOAT,
    300.0::FLOAT,
    5::INTEGER,
    0::INTEGER,
    3::INTEGER,
    0::INTEGER,
    2::INTEGER,
    2::INTEGER,
    2::INTEGER,
    365::INTEGER"""


def model_statement(schema: str) -> str:
    """PREDICT call with bind placeholders for every collected feature."""
    return f"""
SELECT {schema}.FRAUD_DETECTION_MODEL!PREDICT(
    %(amount)s::FLOAT,
    %(hour_of_day)s::INTEGER,
    %(day_of_week)s::INTEGER,
    %(is_weekend)s::INTEGER,
    %(is_night)s::INTEGER,
    %(tx_count_1h)s::INTEGER,
    %(tx_count_24h)s::INTEGER,
    %(amount_vs_avg_ratio)s::FLOAT,
    %(customer_risk_score)s::FLOAT,
    %(merchant_risk_score)s::INTEGER,
    %(location_changed)s::INTEGER,
    %(device_changed)s::INTEGER,
    %(high_velocity_1h)s::INTEGER,
    %(is_international)s::INTEGER,{_DEFAULT_MODEL_ARGS}
) AS PREDICTION
"""


def heuristic_score(features: PredictionFeatures) -> int:
    """Weighted risk score in points; 40 or more is flagged as fraud."""
    score = 0
    if features.amount > 2000:
        score += 30
    if features.customer_risk_score > 70:
        score += 25
    if features.tx_count_1h > 3:
        score += 15
    if features.amount_vs_avg_ratio > 3:
        score += 15
    if features.location_changed:
        score += 10
    if features.device_changed:
        score += 10
    if features.is_international:
        score += 5
    if features.is_night:
        score += 5
    if features.merchant_risk_score == 3:
        score += 10
    return score


def heuristic_prediction(features: PredictionFeatures) -> dict[str, Any]:
    risk_score = heuristic_score(features)
    return {
        "prediction": 1 if risk_score >= HEURISTIC_THRESHOLD else 0,
        "confidence": HEURISTIC_CONFIDENCE,
        "model": HEURISTIC_NAME,
        "riskScore": risk_score,
    }


def _as_label(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"Unexpected model output: {value!r}")


class FraudPredictor:
    """Scores transactions with the warehouse model, falling back to the heuristic."""

    def __init__(self, executor: QueryExecutor, schema: str):
        self.executor = executor
        self.schema = schema

    async def predict(self, features: PredictionFeatures) -> dict[str, Any]:
        """
        Predict whether a transaction is fraudulent.

        Returns:
            Dictionary with prediction (0/1), confidence and model name.
            Heuristic answers also carry riskScore.
        """
        try:
            rows = await self.executor.execute(model_statement(self.schema), features.model_dump())
            if rows:
                prediction = _as_label(rows[0].get("PREDICTION"))
                return {
                    "prediction": prediction,
                    "confidence": 0.85 if prediction == 1 else 0.92,
                    "model": MODEL_NAME,
                }
            logger.warning("Fraud model returned no rows, using heuristic")
        except Exception as e:
            logger.warning("Fraud model call failed, using heuristic: %s", e)

        return heuristic_prediction(features)
