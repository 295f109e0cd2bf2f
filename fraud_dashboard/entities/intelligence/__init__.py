"""
Intelligence assistant - natural language questions answered with Cortex SQL.
"""

from .orchestrator import (
    FOLLOW_UP_SUGGESTIONS,
    IntelligenceOrchestrator,
    extract_completion,
    format_row,
    format_value,
)

__all__ = [
    "FOLLOW_UP_SUGGESTIONS",
    "IntelligenceOrchestrator",
    "extract_completion",
    "format_row",
    "format_value",
]
