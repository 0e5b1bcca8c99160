"""
Custom middleware for FastAPI/Starlette applications.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from utilkit.logger import log_request, logger
from utilkit.request import RequestContext


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a RequestContext to every request and log the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Build the request context, process the request and log details.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response
        """
        start_time = time.time()

        # Starlette caches the body, so handlers can still read it
        body = await request.body()
        context = RequestContext.from_request(request, body)
        request.state.context = context

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Error: {request.method} {request.url.path} "
                f"- Error: {str(e)} - Duration: {duration:.3f}s"
            )
            raise

        duration = time.time() - start_time
        log_request(
            request.method,
            request.url.path,
            response.status_code,
            duration,
            client_ip=context.client_ip()
        )

        response.headers["X-Process-Time"] = str(duration)

        return response
