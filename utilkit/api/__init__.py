"""
FastAPI integration: per-request contexts, dependencies and error handlers.
"""

from .middleware import RequestContextMiddleware
from .dependencies import get_request_context
from .error_handlers import (
    fetch_exception_handler,
    lock_exception_handler,
    register_error_handlers
)

__all__ = [
    "RequestContextMiddleware",
    "get_request_context",
    "fetch_exception_handler",
    "lock_exception_handler",
    "register_error_handlers",
]
