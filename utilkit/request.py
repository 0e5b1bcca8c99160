"""
Read-only introspection of one inbound HTTP request.

A RequestContext is created per request (see utilkit.api.middleware) and
holds every derived value for that request: the raw body, the parsed query
and form maps and the CGI-style server variables are each computed at most
once. Nothing is cached at module level, so contexts of different requests
never share state.
"""

import copy
import json
from collections.abc import Mapping
from functools import cached_property
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from starlette.datastructures import Headers, QueryParams
from starlette.requests import Request

from utilkit.config import settings
from utilkit.logger import get_logger
from utilkit.schemas import RequestSummary
from utilkit.validators import IPV4, IPV6, is_ip_address


logger = get_logger(__name__)

# Checked in order when the client sits behind a proxy
PROXY_IP_HEADERS = (
    "X-Forwarded-For",
    "Client-IP",
    "X-Client-IP",
    "X-Cluster-Client-IP",
)

SUPPORTED_CONTENT_TYPES = {
    "json": "application/json",
    "jsonp": "application/javascript",
    "text": "text/plain",
}

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

HeadersInput = Union[Mapping, Iterable[Tuple[str, str]], None]


def _fetch_all(needle: Any, haystack: Dict[str, Any], default: Any = None) -> Any:
    """
    Look up one key, several keys, or copy the whole map.

    Args:
        needle: None for a deep copy of the map, a list/tuple of keys for a
            dict of those keys, or a single key
        haystack: Map to read
        default: Value for a missing single key

    Returns:
        The value, a dict of values, or a deep copy of the map
    """
    if needle is None:
        return copy.deepcopy(haystack)

    if isinstance(needle, (list, tuple)):
        return {key: _fetch_all(key, haystack) for key in needle}

    if needle in haystack:
        return haystack[needle]

    return default


def _is_client_ip(value: Optional[str]) -> bool:
    return is_ip_address(value, IPV4) or is_ip_address(value, IPV6)


class RequestContext:
    """Request-scoped, read-only view over an inbound request."""

    def __init__(
        self,
        method: str = "GET",
        headers: HeadersInput = None,
        query_string: str = "",
        body: Optional[bytes] = None,
        body_loader: Optional[Callable[[], Optional[bytes]]] = None,
        remote_addr: Optional[str] = None,
        scheme: str = "http"
    ):
        """
        Initialize a request context.

        Args:
            method: HTTP method
            headers: Mapping or list of (name, value) pairs; lookups are case-insensitive
            query_string: Raw query string without the leading "?"
            body: Raw body bytes, if already read
            body_loader: Called once, on first access, when body is not given
            remote_addr: Address of the direct peer
            scheme: "http" or "https"
        """
        self._method = method or ""
        self._headers = self._build_headers(headers)
        self._query_string = query_string or ""
        self._body = body
        self._body_loaded = body is not None or body_loader is None
        self._body_loader = body_loader
        self._remote_addr = remote_addr
        self._scheme = (scheme or "http").lower()

    @staticmethod
    def _build_headers(headers: HeadersInput) -> Headers:
        if headers is None:
            return Headers()
        if isinstance(headers, Headers):
            return headers
        if isinstance(headers, Mapping):
            pairs = headers.items()
        else:
            pairs = headers
        raw = [(str(name).lower().encode("latin-1"), str(value).encode("latin-1", errors="replace"))
               for name, value in pairs]
        return Headers(raw=raw)

    @classmethod
    def from_request(cls, request: Request, body: Optional[bytes] = None) -> "RequestContext":
        """
        Build a context from a Starlette/FastAPI request.

        Args:
            request: The incoming request
            body: Body bytes already read with ``await request.body()``

        Returns:
            RequestContext for this request
        """
        return cls(
            method=request.method,
            headers=request.headers,
            query_string=request.url.query,
            body=body,
            remote_addr=request.client.host if request.client else None,
            scheme=request.url.scheme
        )

    # Raw data

    def method(self, to_upper: bool = True) -> str:
        """
        Get the request method.

        Args:
            to_upper: Upper-case (default) or lower-case the method

        Returns:
            Formatted request method
        """
        return self._method.upper() if to_upper else self._method.lower()

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self._headers.get(name, default)

    @property
    def headers(self) -> Headers:
        return self._headers

    def body(self) -> Optional[bytes]:
        """
        Get the raw request body.

        Returns:
            Body bytes; None when the request has no body
        """
        if not self._body_loaded:
            self._body = self._body_loader()
            self._body_loaded = True
        return self._body

    def text(self, encoding: Optional[str] = None) -> Optional[str]:
        """
        Get the request body as text.

        Args:
            encoding: Body encoding (defaults to settings.encoding)

        Returns:
            Decoded body, None when the request has no body
        """
        body = self.body()
        if body is None:
            return None
        return body.decode(encoding or settings.encoding, errors="replace")

    def json(self, default: Any = None) -> Any:
        """
        Parse the request body as JSON.

        Args:
            default: Returned when the body is absent, empty or not JSON

        Returns:
            Parsed JSON document, or default
        """
        text = self.text()
        if not text:
            return default

        try:
            return json.loads(text)
        except ValueError as e:
            logger.debug(f"Request body is not JSON: {e}")
            return default

    # Derived maps

    @cached_property
    def _query_map(self) -> Dict[str, str]:
        return dict(QueryParams(self._query_string))

    @cached_property
    def _form_map(self) -> Dict[str, str]:
        media_type = (self._headers.get("content-type") or "").split(";")[0].strip().lower()
        if media_type != FORM_CONTENT_TYPE:
            return {}
        return dict(QueryParams(self.text() or ""))

    @cached_property
    def _server_map(self) -> Dict[str, str]:
        server = {
            "REQUEST_METHOD": self.method(),
            "REQUEST_SCHEME": self._scheme,
            "QUERY_STRING": self._query_string,
        }
        if self._remote_addr is not None:
            server["REMOTE_ADDR"] = self._remote_addr
        if self._scheme == "https":
            server["HTTPS"] = "on"
        if "content-type" in self._headers:
            server["CONTENT_TYPE"] = self._headers["content-type"]
        if "content-length" in self._headers:
            server["CONTENT_LENGTH"] = self._headers["content-length"]
        for name, value in self._headers.items():
            server["HTTP_" + name.upper().replace("-", "_")] = value
        return server

    def query(self, key: Any = None, default: Any = None) -> Any:
        """
        Get query-string parameters.

        Args:
            key: None for a copy of all parameters, a list of names for a
                dict of those parameters, or a single name
            default: Value for a missing single name

        Returns:
            Parameter value(s); the last value wins for repeated names
        """
        return _fetch_all(key, self._query_map, default)

    # HEAD parameters come from the query string as well
    head = query

    def form(self, key: Any = None, default: Any = None) -> Any:
        """
        Get URL-encoded body fields.

        The body is parsed once, whatever the method, which makes this the
        accessor for POST, PUT, PATCH and DELETE fields alike. Only bodies
        sent as application/x-www-form-urlencoded have fields.

        Args:
            key: None, a list of names or a single name (see query())
            default: Value for a missing single name

        Returns:
            Field value(s)
        """
        return _fetch_all(key, self._form_map, default)

    post = form
    put = form
    patch = form
    delete = form

    def params(self, key: Any = None, default: Any = None) -> Any:
        """Query parameters merged with body fields; body fields win."""
        return _fetch_all(key, {**self._query_map, **self._form_map}, default)

    def server(self, key: Any = None, default: Any = None) -> Any:
        """
        Get CGI-style server variables.

        REQUEST_METHOD, REQUEST_SCHEME, QUERY_STRING, REMOTE_ADDR, HTTPS,
        CONTENT_TYPE, CONTENT_LENGTH and one HTTP_<NAME> entry per header.

        Args:
            key: None, a list of names or a single name (see query())
            default: Value for a missing single name

        Returns:
            Variable value(s)
        """
        return _fetch_all(key, self._server_map, default)

    # Introspection

    def client_ip(self, trust_proxy: Optional[bool] = None) -> Optional[str]:
        """
        Get the client's IP address.

        Forwarding headers are only consulted when trust_proxy is set, and
        only a value that parses as an IP address is returned. Headers can
        still be spoofed by clients talking to the server directly.

        Args:
            trust_proxy: Check proxy headers (defaults to settings.trust_proxy)

        Returns:
            IPv4 or IPv6 address; None if the peer address is not valid
        """
        if trust_proxy is None:
            trust_proxy = settings.trust_proxy

        if trust_proxy:
            for name in PROXY_IP_HEADERS:
                value = self._headers.get(name)
                if value is None:
                    continue
                # Proxies may append the whole chain, the client comes first
                candidate = value.split(",")[0].strip()
                if _is_client_ip(candidate):
                    return candidate

        return self._remote_addr if _is_client_ip(self._remote_addr) else None

    def content_type(self) -> Optional[str]:
        """
        Get the content type, if it is one of SUPPORTED_CONTENT_TYPES.

        Returns:
            Media type without parameters, e.g. "application/json"; otherwise None
        """
        value = self._headers.get("content-type")
        if not value:
            return None

        media_type = value.split(";")[0].strip().lower()
        return media_type if media_type in SUPPORTED_CONTENT_TYPES.values() else None

    def is_ajax(self) -> bool:
        """Check if the request was made with XMLHttpRequest."""
        value = self._headers.get("x-requested-with")
        return bool(value) and value.lower() == "xmlhttprequest"

    def is_https(self) -> bool:
        """
        Check if the request came in over an encrypted connection.

        Returns:
            True if the connection itself is HTTPS, X-Forwarded-Proto is
            "https", or Front-End-Https is set to anything but "off"
        """
        https = self._server_map.get("HTTPS")
        if https and https.lower() != "off":
            return True

        forwarded_proto = self._headers.get("x-forwarded-proto")
        if forwarded_proto and forwarded_proto.lower() == "https":
            return True

        front_end_https = self._headers.get("front-end-https")
        if front_end_https and front_end_https.lower() != "off":
            return True

        return False

    def summary(self) -> RequestSummary:
        """Summarize the request for logging and debugging."""
        return RequestSummary(
            method=self.method(),
            content_type=self.content_type(),
            client_ip=self.client_ip(),
            is_ajax=self.is_ajax(),
            is_https=self.is_https()
        )

    def __repr__(self) -> str:
        return f"RequestContext(method={self._method!r}, remote_addr={self._remote_addr!r})"
