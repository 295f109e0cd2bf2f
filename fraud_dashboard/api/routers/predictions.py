"""
Fraud prediction route.
"""

import logging

from fastapi import APIRouter, Depends

from fraud_dashboard.api.dependencies import error_response, get_predictor
from fraud_dashboard.api.models import PredictionResponse
from fraud_dashboard.entities.predictions import FraudPredictor, PredictionFeatures

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["predictions"])


@router.post("/predictions", response_model=PredictionResponse, response_model_exclude_none=True)
async def predict(
    features: PredictionFeatures,
    predictor: FraudPredictor = Depends(get_predictor),
):
    """
    Score a single transaction.

    Uses the registered XGBoost model; falls back to the heuristic score when
    the model call fails. Invalid feature payloads return 400.
    """
    try:
        return await predictor.predict(features)
    except Exception as e:
        logger.error("Error making prediction: %s", e)
        return error_response("Failed to make prediction")
