"""
API package for the fraud dashboard FastAPI server.

Contains:
- auth.py: ingress identity middleware
- models.py: Pydantic models for API requests/responses
- dependencies.py: FastAPI dependencies
- routers/: Route handlers for dashboard, SQL, predictions and intelligence
"""
