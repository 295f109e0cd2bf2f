"""
Platform ingress identity.

Snowpark Container Services authenticates users at the public endpoint and
forwards the Snowflake user name to the service in a request header. This
module exposes that identity to route handlers; it never rejects requests.
"""

import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CURRENT_USER_HEADER = "Sf-Context-Current-User"

# Paths that are not attributed to a user in the logs
PUBLIC_PATHS = {
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


class IngressUserMiddleware(BaseHTTPMiddleware):
    """
    Middleware that copies the ingress user header into request state.

    Handlers read it with `get_optional_user_id`. Requests without the header
    (local development) get `user_id = None`.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.user_id = request.headers.get(CURRENT_USER_HEADER) or None

        if request.url.path not in PUBLIC_PATHS and request.method != "OPTIONS":
            logger.debug(
                "%s %s user=%s",
                request.method,
                request.url.path,
                request.state.user_id or "(anonymous)",
            )

        return await call_next(request)
