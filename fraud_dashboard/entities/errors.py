"""
Error taxonomy shared by the warehouse layer, the intelligence flow and the API.

The HTTP layer maps these to status codes in main.py:
- PolicyError, ValidationError -> 400
- WarehouseConnectionError, QueryError -> 500 (details logged only)
- LLMError never leaves the intelligence turn
"""


class DashboardError(Exception):
    """Base class for all fraud dashboard errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WarehouseConnectionError(DashboardError):
    """The warehouse was unreachable or rejected the configured credential."""

    def __init__(self, message: str, errno: int | None = None):
        super().__init__(message)
        self.errno = errno


class QueryError(DashboardError):
    """A statement failed to execute."""

    def __init__(self, message: str, errno: int | None = None, retryable: bool = False):
        super().__init__(message)
        self.errno = errno
        self.retryable = retryable


class LLMError(DashboardError):
    """The completion call failed or produced an empty response."""


class PolicyError(DashboardError):
    """The submitted statement is not allowed."""


class ValidationError(DashboardError):
    """A required request field is missing or invalid."""
