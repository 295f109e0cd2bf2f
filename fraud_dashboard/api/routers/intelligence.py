"""
Intelligence assistant route.

Answers natural language questions about fraud data. The reply is always a
200 with content blocks; failures inside a turn degrade to an apology. The
only rejected request is one without a question.
"""

import logging

from fastapi import APIRouter, Depends, Request

from fraud_dashboard.api.dependencies import get_optional_user_id, get_orchestrator
from fraud_dashboard.api.models import AssistantMessage, IntelligenceResponse
from fraud_dashboard.entities.errors import ValidationError
from fraud_dashboard.entities.intelligence import IntelligenceOrchestrator
from fraud_dashboard.entities.intelligence.orchestrator import APOLOGY_TEXT
from fraud_dashboard.entities.models import ContentBlock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["intelligence"])


def _reply(content: list[ContentBlock]) -> dict:
    response = IntelligenceResponse(message=AssistantMessage(content=content))
    return response.model_dump(exclude_none=True)


@router.post("/intelligence")
async def ask(
    request: Request,
    orchestrator: IntelligenceOrchestrator = Depends(get_orchestrator),
    user_id: str | None = Depends(get_optional_user_id),
):
    """
    Ask a question about the fraud data.

    Body: `{"question": "...", "reset": false}`. `reset: true` returns
    `{"success": true}`; there is no server-side conversation state to clear.
    A body that is not a JSON object is answered with an apology.
    """
    try:
        body = await request.json()
    except ValueError as e:
        logger.warning("Unreadable intelligence request body: %s", e)
        return _reply([ContentBlock.text_block(APOLOGY_TEXT)])

    if not isinstance(body, dict):
        logger.warning("Intelligence request body is not an object: %s", type(body).__name__)
        return _reply([ContentBlock.text_block(APOLOGY_TEXT)])

    if body.get("reset"):
        return {"success": True}

    question = body.get("question")
    if question is None or question == "":
        raise ValidationError("Question is required")

    logger.info("Intelligence request from user=%s", user_id)
    turn = await orchestrator.answer(str(question))

    return _reply(turn.content)
