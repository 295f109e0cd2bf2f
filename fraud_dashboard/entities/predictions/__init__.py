"""
Transaction fraud scoring.
"""

from .scorer import FraudPredictor, PredictionFeatures, heuristic_prediction, heuristic_score

__all__ = ["FraudPredictor", "PredictionFeatures", "heuristic_prediction", "heuristic_score"]
