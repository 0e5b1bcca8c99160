"""
Outbound HTTP fetch.

A single GET helper with a fixed timeout that tells transport failures
apart from unexpected status codes.
"""

from typing import Any, Dict, Iterable, Optional

import httpx

from utilkit.config import settings
from utilkit.exceptions import FetchStatusError, FetchTransportError
from utilkit.logger import get_logger
from utilkit.validators import is_url


logger = get_logger(__name__)


def fetch(
    url: str,
    options: Optional[Dict[str, Any]] = None,
    allowed: Optional[Iterable[int]] = None,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None
) -> Optional[str]:
    """
    Get the contents of a URL.

    Args:
        url: URL to get
        options: Extra request arguments passed to httpx (headers, params,
            cookies, follow_redirects, ...)
        allowed: Acceptable status codes (defaults to settings.fetch_allowed_status)
        timeout: Timeout in seconds (defaults to settings.fetch_timeout)
        client: Optional httpx.Client to send the request with; it is not closed

    Returns:
        Response body text; None if url is not a valid URL

    Raises:
        FetchTransportError: If no response was received
        FetchStatusError: If the status code is not in allowed
    """
    if not is_url(url):
        logger.debug(f"Not fetching invalid URL: {url!r}")
        return None

    allowed_codes = list(allowed) if allowed is not None else list(settings.fetch_allowed_status)
    timeout = settings.fetch_timeout if timeout is None else timeout
    options = dict(options or {})

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout)
    else:
        options.setdefault("timeout", timeout)

    try:
        logger.debug(f"GET {url}")
        response = client.get(url, **options)
    except (httpx.RequestError, httpx.InvalidURL) as e:
        logger.warning(f"Fetch failed for {url}: {type(e).__name__}: {e}")
        raise FetchTransportError(url, f"{type(e).__name__}: {e}") from e
    finally:
        if owns_client:
            client.close()

    if response.status_code not in allowed_codes:
        logger.warning(f"Fetch of {url} returned HTTP {response.status_code}")
        raise FetchStatusError(url, response.status_code, response.text)

    return response.text
