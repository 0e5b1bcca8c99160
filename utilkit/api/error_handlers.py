"""
Error handlers mapping utilkit exceptions to JSON responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from utilkit.exceptions import FetchError, FetchStatusError, LockError
from utilkit.logger import logger
from utilkit.schemas import ErrorResponse


async def fetch_exception_handler(request: Request, exc: FetchError):
    """
    Handle failed outbound fetches as a bad gateway.

    Args:
        request: Request that caused the exception
        exc: Fetch exception

    Returns:
        JSON error response
    """
    logger.error(f"Fetch Exception: {type(exc).__name__} - {str(exc)}")

    error_response = ErrorResponse(
        error="Upstream request failed",
        detail=str(exc),
        status_code=exc.status_code if isinstance(exc, FetchStatusError) else None
    )

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=error_response.model_dump(mode='json')
    )


async def lock_exception_handler(request: Request, exc: LockError):
    """
    Handle a busy lock as a locked resource.

    Args:
        request: Request that caused the exception
        exc: Lock exception

    Returns:
        JSON error response
    """
    logger.warning(f"Lock Exception: {str(exc)}")

    error_response = ErrorResponse(
        error="Resource is locked",
        detail=str(exc)
    )

    return JSONResponse(
        status_code=status.HTTP_423_LOCKED,
        content=error_response.model_dump(mode='json')
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the utilkit exception handlers on an application."""
    app.add_exception_handler(FetchError, fetch_exception_handler)
    app.add_exception_handler(LockError, lock_exception_handler)
