"""Tests for the FastAPI integration in utilkit.api."""

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from utilkit.api import get_request_context
from utilkit.request import RequestContext


class TestRequestContextMiddleware:
    """Per-request contexts attached by the middleware"""

    def test_context_reads_request(self, client):
        response = client.post("/echo?page=3", json={"a": 1})
        assert response.status_code == 200
        assert response.json() == {
            "method": "POST",
            "json": {"a": 1},
            "query": {"page": "3"},
            "content_type": "application/json",
            "from_middleware": True,
        }

    def test_process_time_header(self, client):
        response = client.get("/summary")
        assert float(response.headers["X-Process-Time"]) >= 0

    def test_summary(self, client):
        response = client.get("/summary", headers={"X-Requested-With": "XMLHttpRequest"})
        assert response.json() == {
            "method": "GET",
            "content_type": None,
            "client_ip": None,
            "is_ajax": True,
            "is_https": False,
        }

    def test_each_request_gets_its_own_context(self, client):
        first = client.post("/echo?page=1", json={"n": 1}).json()
        second = client.post("/echo?page=2", json={"n": 2}).json()
        assert first["query"] == {"page": "1"}
        assert first["json"] == {"n": 1}
        assert second["query"] == {"page": "2"}
        assert second["json"] == {"n": 2}

    def test_unhandled_errors_propagate(self, app):
        @app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            TestClient(app).get("/boom")


class TestGetRequestContext:
    """Dependency without the middleware"""

    def test_builds_and_stores_context(self):
        app = FastAPI()

        @app.post("/form")
        async def form(request: Request, context: RequestContext = Depends(get_request_context)):
            return {
                "name": context.form("name"),
                "stored": request.state.context is context,
            }

        response = TestClient(app).post("/form", data={"name": "Ada"})
        assert response.json() == {"name": "Ada", "stored": True}


class TestErrorHandlers:
    """Exception to response mapping"""

    def test_fetch_error_is_bad_gateway(self, client):
        response = client.get("/upstream")
        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "Upstream request failed"
        assert body["status_code"] == 503
        assert "https://upstream.example.com/" in body["detail"]
        assert "timestamp" in body

    def test_lock_error_is_locked(self, client):
        response = client.get("/locked")
        assert response.status_code == 423
        body = response.json()
        assert body["error"] == "Resource is locked"
        assert body["detail"] == "Lock already held: jobs.lock"
        assert body["status_code"] is None
