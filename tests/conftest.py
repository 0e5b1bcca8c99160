"""
Shared pytest fixtures for utilkit tests.

Fixtures:
    - json_context: JSON POST request behind a proxy
    - form_context: URL-encoded POST request with a query string
    - app: FastAPI application wired with the utilkit middleware and handlers
    - client: TestClient for ``app``
"""

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from utilkit.api import RequestContextMiddleware, get_request_context, register_error_handlers
from utilkit.exceptions import FetchStatusError, LockError
from utilkit.request import RequestContext


@pytest.fixture
def json_context():
    """JSON POST request forwarded by a proxy."""
    return RequestContext(
        method="post",
        headers={
            "Content-Type": "application/json; charset=utf-8",
            "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
            "X-Requested-With": "XMLHttpRequest",
        },
        query_string="page=2",
        body=b'{"name": "Ada", "tags": ["a", "b"]}',
        remote_addr="10.0.0.1",
        scheme="http"
    )


@pytest.fixture
def form_context():
    """URL-encoded POST request with a query string."""
    return RequestContext(
        method="POST",
        headers=[
            ("Content-Type", "application/x-www-form-urlencoded"),
            ("Content-Length", "23"),
        ],
        query_string="id=1&id=2&sort=asc",
        body=b"name=Ada&sort=desc&x=%26",
        remote_addr="192.0.2.10",
        scheme="https"
    )


@pytest.fixture
def app():
    """FastAPI app using the request context middleware and error handlers."""
    application = FastAPI()
    application.add_middleware(RequestContextMiddleware)
    register_error_handlers(application)

    @application.post("/echo")
    async def echo(request: Request, context: RequestContext = Depends(get_request_context)):
        return {
            "method": context.method(),
            "json": context.json(),
            "query": context.query(),
            "content_type": context.content_type(),
            "from_middleware": request.state.context is context,
        }

    @application.get("/summary")
    async def summary(context: RequestContext = Depends(get_request_context)):
        return context.summary().model_dump()

    @application.get("/upstream")
    async def upstream():
        raise FetchStatusError("https://upstream.example.com/", 503, "unavailable")

    @application.get("/locked")
    async def locked():
        raise LockError("jobs.lock")

    return application


@pytest.fixture
def client(app):
    """Test client for the sample app."""
    return TestClient(app)
