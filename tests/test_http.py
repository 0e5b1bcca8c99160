"""Tests for utilkit.http.fetch, using httpx.MockTransport instead of the network."""

import httpx
import pytest

from utilkit.config import settings
from utilkit.exceptions import FetchError, FetchStatusError, FetchTransportError
from utilkit.http import fetch


def make_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFetch:
    """Outbound GET helper"""

    def test_invalid_url_sends_nothing(self):
        calls = []
        client = make_client(lambda request: calls.append(request) or httpx.Response(200))
        assert fetch("not a url", client=client) is None
        assert fetch("", client=client) is None
        assert calls == []

    def test_success_returns_text(self):
        client = make_client(lambda request: httpx.Response(200, text="hello"))
        assert fetch("https://example.com/data", client=client) == "hello"

    def test_options_are_passed_through(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["token"] = request.headers.get("x-token")
            seen["query"] = dict(request.url.params)
            return httpx.Response(200, text="ok")

        client = make_client(handler)
        options = {"headers": {"X-Token": "abc"}, "params": {"page": "2"}}
        assert fetch("https://example.com/items", options=options, client=client) == "ok"
        assert seen == {"method": "GET", "token": "abc", "query": {"page": "2"}}
        assert options == {"headers": {"X-Token": "abc"}, "params": {"page": "2"}}

    def test_timeout_applied_to_caller_client(self):
        seen = {}

        def handler(request):
            seen["timeout"] = request.extensions["timeout"]
            return httpx.Response(200)

        fetch("https://example.com/", timeout=5.0, client=make_client(handler))
        assert seen["timeout"]["connect"] == 5.0
        assert seen["timeout"]["read"] == 5.0

    def test_status_not_allowed(self):
        client = make_client(lambda request: httpx.Response(404, text="missing"))
        with pytest.raises(FetchStatusError) as exc_info:
            fetch("https://example.com/nope", client=client)
        error = exc_info.value
        assert error.status_code == 404
        assert error.body == "missing"
        assert error.url == "https://example.com/nope"
        assert isinstance(error, FetchError)

    def test_custom_allowed_statuses(self):
        client = make_client(lambda request: httpx.Response(404, text="missing"))
        assert fetch("https://example.com/nope", allowed=[200, 404], client=client) == "missing"

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchTransportError) as exc_info:
            fetch("https://example.com/", client=make_client(handler))
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert "connection refused" in exc_info.value.reason

    def test_redirect_loop_is_a_transport_error(self):
        client = make_client(
            lambda request: httpx.Response(302, headers={"Location": "https://example.com/loop"})
        )
        with pytest.raises(FetchTransportError) as exc_info:
            fetch("https://example.com/loop", options={"follow_redirects": True}, client=client)
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    def test_unsupported_scheme_is_a_transport_error(self):
        """Valid URLs that httpx cannot send are wrapped as well"""
        with pytest.raises(FetchTransportError) as exc_info:
            fetch("ftp://files.example.com/pub")
        assert isinstance(exc_info.value.__cause__, httpx.UnsupportedProtocol)

    def test_timeout_is_a_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(FetchTransportError):
            fetch("https://example.com/", client=make_client(handler))

    def test_caller_client_left_open(self):
        client = make_client(lambda request: httpx.Response(200, text="ok"))
        fetch("https://example.com/", client=client)
        assert not client.is_closed
        client.close()

    def test_owned_client_closed(self, monkeypatch):
        created = []
        real_client = httpx.Client

        def factory(**kwargs):
            client = real_client(
                transport=httpx.MockTransport(lambda request: httpx.Response(200, text="ok")),
                **kwargs
            )
            created.append(client)
            return client

        monkeypatch.setattr(httpx, "Client", factory)
        assert fetch("https://example.com/") == "ok"
        assert len(created) == 1
        assert created[0].is_closed
        assert created[0].timeout.connect == settings.fetch_timeout
