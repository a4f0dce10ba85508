"""Middleware turning unhandled exceptions into JSON error bodies."""
from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Answer any uncaught error with ``500 {"error": ...}``.

    Installed inside the CORS middleware so the response still carries CORS
    headers, and the error is not re-raised to the server.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse({"error": "Internal server error"}, status_code=500)
