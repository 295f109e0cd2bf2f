"""
Shared models for entities.

These models are passed between the intelligence orchestrator and the API layer.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ContentBlock(BaseModel):
    """
    One segment of an assistant reply.

    The UI renders `text` blocks as markdown, re-executes `sql` blocks for the
    tabular view and shows `suggestions` as clickable follow-up questions.
    """

    type: Literal["text", "sql", "suggestions"]

    text: str | None = Field(
        default=None,
        description="Markdown text (type=text)"
    )

    statement: str | None = Field(
        default=None,
        description="SQL statement that produced the answer (type=sql)"
    )

    suggestions: list[str] | None = Field(
        default=None,
        description="Follow-up questions (type=suggestions)"
    )

    @classmethod
    def text_block(cls, text: str) -> "ContentBlock":
        return cls(type="text", text=text)

    @classmethod
    def sql_block(cls, statement: str) -> "ContentBlock":
        return cls(type="sql", statement=statement)

    @classmethod
    def suggestions_block(cls, suggestions: list[str]) -> "ContentBlock":
        return cls(type="suggestions", suggestions=list(suggestions))


class ParsedCompletion(BaseModel):
    """JSON object the model is instructed to return."""

    thinking: str | None = None
    sql: str | None = None
    response_text: str | None = None


class IntelligenceTurn(BaseModel):
    """
    Record of a single question/answer pass.

    Created per question and never persisted; turn history belongs to the UI.
    """

    question: str

    raw_completion: str = Field(
        default="",
        description="Unmodified completion text returned by the model"
    )

    parsed: ParsedCompletion | None = Field(
        default=None,
        description="Extracted JSON payload, None if extraction failed"
    )

    executed_rows: list[dict[str, Any]] | None = Field(
        default=None,
        description="Rows returned by the extracted SQL, None if it was not run"
    )

    content: list[ContentBlock] = Field(
        default_factory=list,
        description="Ordered content blocks returned to the UI"
    )
