"""
Pytest Configuration and Fixtures
==================================
Shared fixtures for the fraud dashboard test suite.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from fraud_dashboard.entities.warehouse.settings import SnowflakeSettings, get_settings

TEST_SCHEMA = "TEST_DB.FRAUD"


# =============================================================================
# ENVIRONMENT FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def mock_environment(monkeypatch, tmp_path):
    """Point the settings at test values and a token path that does not exist."""
    monkeypatch.setenv("SNOWFLAKE_ACCOUNT", "test-account")
    monkeypatch.setenv("SNOWFLAKE_USER", "test-user")
    monkeypatch.setenv("SNOWFLAKE_PASSWORD", "test-password")
    monkeypatch.setenv("SNOWFLAKE_DATABASE", "TEST_DB")
    monkeypatch.setenv("SNOWFLAKE_SCHEMA", "FRAUD")
    monkeypatch.setenv("SNOWFLAKE_TOKEN_PATH", str(tmp_path / "missing" / "token"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def token_path(tmp_path):
    """Path where tests can write a session token."""
    return tmp_path / "token"


@pytest.fixture
def settings(token_path):
    """Settings whose OAuth token file is `token_path`."""
    return SnowflakeSettings(SNOWFLAKE_TOKEN_PATH=str(token_path))


# =============================================================================
# MOCK FIXTURES
# =============================================================================

def make_connection(rows=None):
    """Mock connector connection whose DictCursor returns `rows`."""
    connection = MagicMock(name="connection")
    cursor = MagicMock(name="cursor")
    cursor.fetchall.return_value = rows if rows is not None else []
    connection.cursor.return_value.__enter__.return_value = cursor
    return connection


@pytest.fixture
def connection_factory():
    """Build mock connections: `connection_factory(rows)`."""
    return make_connection


@pytest.fixture
def connect():
    """Connection factory returning a fresh mock connection per call."""
    return MagicMock(side_effect=lambda **kwargs: make_connection())


@pytest.fixture
def mock_executor():
    """Query executor whose `execute` is an AsyncMock returning no rows."""
    executor = MagicMock(name="executor")
    executor.execute = AsyncMock(return_value=[])
    return executor


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def client(mock_executor):
    """Test client with every service wired to `mock_executor`."""
    from fraud_dashboard.api import dependencies
    from fraud_dashboard.entities.dashboard import DashboardService
    from fraud_dashboard.entities.intelligence import IntelligenceOrchestrator
    from fraud_dashboard.entities.predictions import FraudPredictor
    from fraud_dashboard.main import app

    app.dependency_overrides[dependencies.get_executor] = lambda: mock_executor
    app.dependency_overrides[dependencies.get_dashboard] = lambda: DashboardService(mock_executor, TEST_SCHEMA)
    app.dependency_overrides[dependencies.get_predictor] = lambda: FraudPredictor(mock_executor, TEST_SCHEMA)
    app.dependency_overrides[dependencies.get_orchestrator] = lambda: IntelligenceOrchestrator(
        mock_executor, "test-model", TEST_SCHEMA
    )

    yield TestClient(app)

    app.dependency_overrides.clear()
