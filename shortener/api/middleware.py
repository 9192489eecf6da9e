"""
Request logging middleware.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from shortener.core.logging import get_logger

logger = get_logger("shortener.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its status and latency, leveled by status class."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000

        extra = {
            "status": response.status_code,
            "latency_ms": round(latency_ms, 2),
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else None,
        }

        if response.status_code >= 500:
            logger.error("Server error", extra=extra)
        elif response.status_code >= 400:
            logger.warning("Client error", extra=extra)
        elif response.status_code >= 300:
            logger.info("Redirection", extra=extra)
        else:
            logger.info("Success", extra=extra)

        return response
