"""Exception classes raised by utilkit helpers."""

from typing import Optional


class UtilkitError(Exception):
    """Base class for exceptions raised by utilkit."""
    pass


class FetchError(UtilkitError):
    """Base class for failures of the outbound fetch helper."""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(message or f"Fetch failed: {url}")


class FetchTransportError(FetchError):
    """Raised when no HTTP response was received (DNS, refused connection, timeout)."""

    def __init__(self, url: str, reason: str):
        self.reason = reason
        super().__init__(url, f"Fetch transport error for {url}: {reason}")


class FetchStatusError(FetchError):
    """Raised when the response status code is not in the allowed list."""

    def __init__(self, url: str, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(url, f"Invalid response from {url}: HTTP {status_code}")


class LockError(UtilkitError):
    """Raised when a file lock is already held by another handle."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Lock already held: {path}")
