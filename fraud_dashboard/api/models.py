"""
Pydantic models for API request/response schemas.
"""

from pydantic import BaseModel

from fraud_dashboard.entities.models import ContentBlock


class ExecuteSqlRequest(BaseModel):
    """Request body for the SQL console endpoint."""
    sql: str | None = None


class ExecuteSqlResponse(BaseModel):
    results: list[dict]


class AssistantMessage(BaseModel):
    """Assistant reply as an ordered list of content blocks."""
    content: list[ContentBlock]


class IntelligenceResponse(BaseModel):
    message: AssistantMessage


class PredictionResponse(BaseModel):
    """Fraud prediction for a single transaction."""
    prediction: int
    confidence: float
    model: str
    riskScore: int | None = None


class MapDataResponse(BaseModel):
    data: list[dict]
