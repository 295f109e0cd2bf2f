"""
Natural-language question answering over the fraud warehouse.

A question is answered in a single pass:
1. Compose a prompt from the schema context in prompt.md and the question
2. Run it through SNOWFLAKE.CORTEX.COMPLETE via the query executor
3. Extract the JSON payload from the completion text
4. Execute the generated SQL, if any, and render the answer as content blocks
"""

import json
import logging
import re
from decimal import Decimal
from pathlib import Path
from typing import Any

from fraud_dashboard.entities.errors import LLMError
from fraud_dashboard.entities.models import ContentBlock, IntelligenceTurn, ParsedCompletion
from fraud_dashboard.entities.warehouse import QueryExecutor

logger = logging.getLogger(__name__)

SCHEMA_PLACEHOLDER = "{{schema}}"

# Greedy: from the first "{" to the last "}" across lines
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

FOLLOW_UP_SUGGESTIONS = [
    "What is the fraud rate?",
    "Which categories have the most fraud?",
    "What is the average fraud amount?",
]

NO_RESULTS_TEXT = "No results were found for this query."
QUERY_FAILED_TEXT = "There was an error running the query."
NO_QUERY_TEXT = "I could not generate a query for this question."
APOLOGY_TEXT = "I could not process your question. Please try rephrasing it."


def _load_prompt() -> str:
    """Load prompt from prompt.md in this folder."""
    prompt_path = Path(__file__).parent / "prompt.md"

    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt template not found: {prompt_path}")

    return prompt_path.read_text(encoding="utf-8")


def escape_sql_literal(text: str) -> str:
    """Escape text for use inside a single-quoted Snowflake string literal."""
    return text.replace("\\", "\\\\").replace("'", "''")


def format_value(value: Any) -> str:
    """Render a column value for chat display, grouping thousands in numbers."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float, Decimal)):
        text = f"{value:,.2f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text
    return str(value)


def format_row(row: dict[str, Any]) -> str:
    """Flatten a row into `**COLUMN**: value` pairs."""
    return ", ".join(f"**{column}**: {format_value(value)}" for column, value in row.items())


def extract_completion(text: str) -> ParsedCompletion | None:
    """
    Pull the JSON payload out of a completion.

    The whole response is tried first. If it is not a JSON object (prose,
    code fences, or an array wrapping the object), the greedy
    brace-delimited span is used instead.

    Returns:
        The parsed payload, or None if no JSON object could be recovered
    """
    try:
        data: Any = json.loads(text.strip())
    except json.JSONDecodeError:
        data = None

    if not isinstance(data, dict):
        match = JSON_OBJECT_PATTERN.search(text)
        if not match:
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None

    def _text_field(key: str) -> str | None:
        value = data.get(key)
        return value if isinstance(value, str) else None

    return ParsedCompletion(
        thinking=_text_field("thinking"),
        sql=_text_field("sql"),
        response_text=_text_field("response_text"),
    )


class IntelligenceOrchestrator:
    """
    Answers fraud questions with Cortex-generated SQL.

    The orchestrator holds no per-conversation state; every call to `answer`
    builds a fresh IntelligenceTurn.
    """

    def __init__(self, executor: QueryExecutor, model: str, schema: str):
        """
        Initialize the orchestrator.

        Args:
            executor: Query executor used for both completion and generated SQL
            model: Cortex model identifier passed to COMPLETE
            schema: Fully qualified DATABASE.SCHEMA embedded in the prompt
        """
        self.executor = executor
        self.model = model
        self.schema_context = _load_prompt().replace(SCHEMA_PLACEHOLDER, schema)
        logger.info("IntelligenceOrchestrator initialized with model %s", model)

    def build_prompt(self, question: str) -> str:
        return f"{self.schema_context}\nUser question: {question}\n\nGenerate the JSON response:"

    def completion_statement(self, prompt: str) -> str:
        """Wrap a prompt in a SNOWFLAKE.CORTEX.COMPLETE call."""
        return (
            "SELECT SNOWFLAKE.CORTEX.COMPLETE(\n"
            f"  '{escape_sql_literal(self.model)}',\n"
            f"  '{escape_sql_literal(prompt)}'\n"
            ") AS RESPONSE"
        )

    async def complete(self, prompt: str) -> str:
        """
        Run one completion.

        Raises:
            LLMError: If the call fails or returns an empty response
        """
        try:
            rows = await self.executor.execute(self.completion_statement(prompt))
        except Exception as e:
            raise LLMError(f"Completion call failed: {e}") from e

        response = rows[0].get("RESPONSE") if rows else None
        if not response:
            raise LLMError("No LLM response")
        return str(response)

    async def answer(self, question: str) -> IntelligenceTurn:
        """
        Answer a question, degrading to text-only replies on any failure.

        Args:
            question: The user's natural language question

        Returns:
            The completed turn; `turn.content` is what the UI renders
        """
        turn = IntelligenceTurn(question=question)
        logger.info("Intelligence question: %s", question[:100])

        try:
            turn.raw_completion = await self.complete(self.build_prompt(question))

            turn.parsed = extract_completion(turn.raw_completion)
            if turn.parsed is None:
                logger.warning("No JSON object found in completion, returning raw text")
                turn.content = [ContentBlock.text_block(turn.raw_completion)]
                return turn

            turn.content = await self._render(turn)
            turn.content.append(ContentBlock.suggestions_block(FOLLOW_UP_SUGGESTIONS))

        except Exception as e:
            logger.error("Error in intelligence turn: %s", e, exc_info=True)
            turn.executed_rows = None
            turn.content = [ContentBlock.text_block(APOLOGY_TEXT)]

        return turn

    async def _render(self, turn: IntelligenceTurn) -> list[ContentBlock]:
        """Execute the generated SQL, if any, and build the reply blocks."""
        parsed = turn.parsed
        sql = parsed.sql

        if not sql or not sql.strip():
            return [ContentBlock.text_block(parsed.response_text or NO_QUERY_TEXT)]

        try:
            rows = await self.executor.execute(sql)
        except Exception as e:
            logger.error("SQL execution error: %s", e)
            return [ContentBlock.text_block(parsed.response_text or QUERY_FAILED_TEXT)]

        turn.executed_rows = rows
        if not rows:
            return [ContentBlock.text_block(NO_RESULTS_TEXT)]

        text = parsed.response_text or f"Found {len(rows)} result(s)."
        if len(rows) == 1:
            text = f"{text}\n\n{format_row(rows[0])}"

        return [ContentBlock.text_block(text), ContentBlock.sql_block(sql)]
