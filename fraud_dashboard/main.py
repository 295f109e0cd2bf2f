"""
FastAPI server for the fraud monitoring dashboard.

This module handles application setup, lifespan management, middleware and
error mapping. Route handlers are organized in the api/routers/ package.

The API is a thin layer over the Snowflake warehouse:
- DashboardService: aggregate views, alerts and customer investigation
- FraudPredictor: transaction scoring with the registered model
- IntelligenceOrchestrator: natural language questions answered with Cortex SQL
All of them share one QueryExecutor and its cached connection.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fraud_dashboard.api.auth import IngressUserMiddleware
from fraud_dashboard.api.routers import (
    dashboard_router,
    intelligence_router,
    predictions_router,
    sql_router,
)
from fraud_dashboard.entities.dashboard import DashboardService
from fraud_dashboard.entities.errors import (
    PolicyError,
    QueryError,
    ValidationError,
    WarehouseConnectionError,
)
from fraud_dashboard.entities.intelligence import IntelligenceOrchestrator
from fraud_dashboard.entities.predictions import FraudPredictor
from fraud_dashboard.entities.warehouse import ConnectionManager, QueryExecutor, get_settings

load_dotenv()

# Configure logging - use force=True to prevent duplicate handlers
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, force=True)

# Reduce noise from the Snowflake connector and HTTP libraries
logging.getLogger("snowflake.connector").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

settings = get_settings()


@asynccontextmanager
async def lifespan(application: FastAPI):
    """
    Application lifespan handler.

    Builds the shared warehouse services on startup and closes the cached
    connection on shutdown. No connection is opened until the first query.
    """
    connections = ConnectionManager(settings)
    executor = QueryExecutor(connections)
    schema = settings.qualified_schema

    application.state.connections = connections
    application.state.executor = executor
    application.state.dashboard = DashboardService(executor, schema)
    application.state.predictor = FraudPredictor(executor, schema)
    application.state.orchestrator = IntelligenceOrchestrator(executor, settings.CORTEX_MODEL, schema)

    logger.info(
        "Fraud dashboard initialized (account=%s, warehouse=%s, schema=%s)",
        settings.SNOWFLAKE_ACCOUNT,
        settings.SNOWFLAKE_WAREHOUSE,
        schema,
    )

    yield

    # Shutdown: Cleanup
    await connections.close()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Fraud Monitoring Dashboard",
    lifespan=lifespan,
)

app.add_middleware(IngressUserMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(dashboard_router)
app.include_router(sql_router)
app.include_router(predictions_router)
app.include_router(intelligence_router)


@app.exception_handler(PolicyError)
@app.exception_handler(ValidationError)
async def bad_request_handler(request: Request, exc: PolicyError | ValidationError):
    """Policy and validation failures surface as 400 with their message."""
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are reported as 400."""
    logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(WarehouseConnectionError)
@app.exception_handler(QueryError)
async def warehouse_error_handler(request: Request, exc: WarehouseConnectionError | QueryError):
    """Warehouse failures are logged in full and reported generically."""
    logger.error("Warehouse error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    connections = getattr(app.state, "connections", None)
    return {
        "status": "healthy",
        "warehouse_ready": getattr(app.state, "executor", None) is not None,
        "connected": connections is not None and connections.connection is not None,
    }


if __name__ == "__main__":
    uvicorn.run("fraud_dashboard.main:app", host="0.0.0.0", port=8000, reload=True)
