"""
Intelligence Orchestrator Tests
================================
Prompt composition, JSON extraction and content block rendering.
"""

import json
from decimal import Decimal

import pytest

from fraud_dashboard.entities.intelligence import (
    FOLLOW_UP_SUGGESTIONS,
    IntelligenceOrchestrator,
    extract_completion,
    format_value,
)
from fraud_dashboard.entities.intelligence.orchestrator import (
    APOLOGY_TEXT,
    NO_QUERY_TEXT,
    NO_RESULTS_TEXT,
    QUERY_FAILED_TEXT,
)


def completion(payload) -> list[dict]:
    """Rows as returned by the COMPLETE statement."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return [{"RESPONSE": text}]


@pytest.fixture
def orchestrator(mock_executor):
    return IntelligenceOrchestrator(mock_executor, "llama3.1-70b", "TEST_DB.FRAUD")


def block_types(turn):
    return [block.type for block in turn.content]


class TestPrompt:
    """Tests for prompt composition and the completion statement."""

    def test_schema_is_embedded(self, orchestrator):
        prompt = orchestrator.build_prompt("How many frauds?")

        assert "TEST_DB.FRAUD.TRANSACTIONS" in prompt
        assert "{{schema}}" not in prompt
        assert "How many frauds?" in prompt

    def test_single_quotes_are_doubled(self, orchestrator):
        statement = orchestrator.completion_statement("Frauds at O'Brien's store?")

        assert "O''Brien''s" in statement
        assert "SNOWFLAKE.CORTEX.COMPLETE" in statement
        assert "'llama3.1-70b'" in statement

    @pytest.mark.asyncio
    async def test_question_reaches_completion_call(self, orchestrator, mock_executor):
        mock_executor.execute.return_value = completion({"sql": None, "response_text": "n/a"})

        await orchestrator.answer("What's the rate?")

        statement = mock_executor.execute.call_args_list[0].args[0]
        assert "What''s the rate?" in statement


class TestExtraction:
    """Tests for extract_completion."""

    def test_plain_json(self):
        parsed = extract_completion('{"thinking": "t", "sql": "SELECT 1", "response_text": "r"}')

        assert parsed.sql == "SELECT 1"
        assert parsed.response_text == "r"

    def test_json_wrapped_in_prose_and_fences(self):
        text = 'Sure! Here it is:\n```json\n{\n  "sql": null,\n  "response_text": "hi"\n}\n```\nDone.'

        parsed = extract_completion(text)

        assert parsed.sql is None
        assert parsed.response_text == "hi"

    def test_no_json(self):
        assert extract_completion("I cannot answer that.") is None

    def test_malformed_json(self):
        assert extract_completion("result: {sql: SELECT 1}") is None

    def test_non_object_json(self):
        assert extract_completion("[1, 2, 3]") is None

    def test_object_wrapped_in_array(self):
        parsed = extract_completion('[{"sql": null, "response_text": "hi"}]')

        assert parsed.sql is None
        assert parsed.response_text == "hi"

    def test_non_string_sql_is_ignored(self):
        parsed = extract_completion('{"sql": 42, "response_text": "x"}')

        assert parsed.sql is None


class TestFormatting:
    """Tests for value rendering."""

    @pytest.mark.parametrize("value, expected", [
        (5, "5"),
        (1234567, "1,234,567"),
        (1234.5, "1,234.5"),
        (0.125, "0.12"),
        (Decimal("2.50"), "2.5"),
        ("x", "x"),
        (True, "true"),
        (None, "null"),
    ])
    def test_format_value(self, value, expected):
        assert format_value(value) == expected


class TestAnswer:
    """Tests for a full intelligence turn."""

    @pytest.mark.asyncio
    async def test_null_sql_returns_text_and_suggestions(self, orchestrator, mock_executor):
        mock_executor.execute.return_value = completion(
            {"thinking": "t", "sql": None, "response_text": "That is not in the data."}
        )

        turn = await orchestrator.answer("Who will win the election?")

        assert block_types(turn) == ["text", "suggestions"]
        assert turn.content[0].text == "That is not in the data."
        assert turn.content[1].suggestions == FOLLOW_UP_SUGGESTIONS
        assert turn.executed_rows is None
        assert mock_executor.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_null_sql_without_text_uses_fallback(self, orchestrator, mock_executor):
        mock_executor.execute.return_value = completion({"sql": None})

        turn = await orchestrator.answer("?")

        assert turn.content[0].text == NO_QUERY_TEXT

    @pytest.mark.asyncio
    async def test_single_row_is_rendered_inline(self, orchestrator, mock_executor):
        sql = "SELECT 5 AS A, 'x' AS B"
        mock_executor.execute.side_effect = [
            completion({"sql": sql, "response_text": "Here you go."}),
            [{"A": 5, "B": "x"}],
        ]

        turn = await orchestrator.answer("Give me A and B")

        assert block_types(turn) == ["text", "sql", "suggestions"]
        text = turn.content[0].text
        assert text.startswith("Here you go.")
        assert "**A**: 5" in text
        assert "**B**: x" in text
        assert turn.content[1].statement == sql
        assert turn.executed_rows == [{"A": 5, "B": "x"}]
        assert mock_executor.execute.call_args_list[1].args == (sql,)

    @pytest.mark.asyncio
    async def test_multiple_rows_report_count(self, orchestrator, mock_executor):
        mock_executor.execute.side_effect = [
            completion({"sql": "SELECT CITY FROM T"}),
            [{"CITY": "Cali"}, {"CITY": "Neiva"}, {"CITY": "Pasto"}],
        ]

        turn = await orchestrator.answer("Which cities?")

        assert turn.content[0].text == "Found 3 result(s)."
        assert block_types(turn) == ["text", "sql", "suggestions"]

    @pytest.mark.asyncio
    async def test_zero_rows(self, orchestrator, mock_executor):
        mock_executor.execute.side_effect = [
            completion({"sql": "SELECT 1 WHERE FALSE", "response_text": "Lots of fraud."}),
            [],
        ]

        turn = await orchestrator.answer("Anything?")

        assert block_types(turn) == ["text", "suggestions"]
        assert turn.content[0].text == NO_RESULTS_TEXT

    @pytest.mark.asyncio
    async def test_sql_failure_degrades_to_text(self, orchestrator, mock_executor):
        mock_executor.execute.side_effect = [
            completion({"sql": "SELECT NOPE", "response_text": "The rate is high."}),
            RuntimeError("invalid identifier 'NOPE'"),
        ]

        turn = await orchestrator.answer("Rate?")

        assert block_types(turn) == ["text", "suggestions"]
        assert turn.content[0].text == "The rate is high."
        assert turn.executed_rows is None

    @pytest.mark.asyncio
    async def test_sql_failure_without_text_uses_fallback(self, orchestrator, mock_executor):
        mock_executor.execute.side_effect = [
            completion({"sql": "SELECT NOPE"}),
            RuntimeError("boom"),
        ]

        turn = await orchestrator.answer("Rate?")

        assert turn.content[0].text == QUERY_FAILED_TEXT

    @pytest.mark.asyncio
    async def test_array_wrapped_completion_is_unwrapped(self, orchestrator, mock_executor):
        mock_executor.execute.return_value = completion('[{"sql": null, "response_text": "hi"}]')

        turn = await orchestrator.answer("Hello")

        assert block_types(turn) == ["text", "suggestions"]
        assert turn.content[0].text == "hi"

    @pytest.mark.asyncio
    async def test_unparseable_completion_returned_verbatim(self, orchestrator, mock_executor):
        raw = "I am not sure what you mean."
        mock_executor.execute.return_value = completion(raw)

        turn = await orchestrator.answer("Hmm")

        assert block_types(turn) == ["text"]
        assert turn.content[0].text == raw
        assert turn.parsed is None
        assert mock_executor.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_completion_failure_apologizes(self, orchestrator, mock_executor):
        mock_executor.execute.side_effect = RuntimeError("Cortex unavailable")

        turn = await orchestrator.answer("Rate?")

        assert block_types(turn) == ["text"]
        assert turn.content[0].text == APOLOGY_TEXT

    @pytest.mark.asyncio
    async def test_empty_completion_apologizes(self, orchestrator, mock_executor):
        mock_executor.execute.return_value = [{"RESPONSE": ""}]

        turn = await orchestrator.answer("Rate?")

        assert [block.text for block in turn.content] == [APOLOGY_TEXT]

    @pytest.mark.asyncio
    async def test_turns_do_not_share_results(self, orchestrator, mock_executor):
        mock_executor.execute.side_effect = [
            completion({"sql": "SELECT 1 AS N", "response_text": "one"}),
            [{"N": 1}],
            completion("no json here"),
        ]

        first = await orchestrator.answer("first")
        second = await orchestrator.answer("second")

        assert first.executed_rows == [{"N": 1}]
        assert second.executed_rows is None
        assert second.content[0].text == "no json here"
