"""
Validation predicates.

Every function here returns a bool and never raises on malformed input.
"""

import ipaddress
import json
import re
import sys
from functools import lru_cache
from typing import Any, Optional, Union
from urllib.parse import urlsplit

from email_validator import EmailNotValidError, validate_email
from pydantic import AnyUrl, TypeAdapter, ValidationError

from utilkit.config import settings
from utilkit.strings import to_text


IPV4 = "ipv4"
IPV6 = "ipv6"

IMAGE_EXTENSIONS = ("gif", "jpg", "jpeg", "png", "svg", "tif", "webp")

# Leading zeros are rejected, which also rules out "0" itself
_INTEGER_RE = re.compile(r'-?(?!0+)[0-9]+')
_FLOAT_RE = re.compile(r'-?(?!0{2,})[0-9]+\.[0-9]+')
_IMAGE_RE = re.compile(r'\.(?:gif|jpe?g|png|svg|tif|webp)$', re.IGNORECASE)
_VERSION_RE = re.compile(r'^\s*([0-9]+(?:\.[0-9]+)*)')

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _is_private_or_reserved(address: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> bool:
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_unspecified
    )


def is_ip_address(value: Any, family: str = IPV4, exclude_private_and_reserved: bool = False) -> bool:
    """
    Validate an IP address.

    Args:
        value: Address to check
        family: IPV4 ("ipv4") or IPV6 ("ipv6"); anything else means IPv4
        exclude_private_and_reserved: Reject private (RFC 1918, ULA), loopback,
            link-local, unspecified and reserved addresses

    Returns:
        True if value is a valid address of the given family
    """
    if not value or not isinstance(value, str):
        return False

    # Zone ids ("fe80::1%eth0") are not addresses
    if "%" in value:
        return False

    try:
        if str(family).lower() == IPV6:
            address = ipaddress.IPv6Address(value)
        else:
            address = ipaddress.IPv4Address(value)
    except ValueError:
        return False

    if exclude_private_and_reserved and _is_private_or_reserved(address):
        return False

    return True


def is_url(value: Any) -> bool:
    """
    Validate an absolute URL.

    Args:
        value: URL string

    Returns:
        True if value has a scheme and, for web schemes, a host
    """
    if not value or not isinstance(value, str):
        return False

    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def is_email_address(value: Any) -> bool:
    """
    Validate e-mail address syntax. No DNS lookups are made.

    Args:
        value: E-mail address

    Returns:
        True if valid e-mail address format
    """
    if not value or not isinstance(value, str):
        return False

    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_integer(value: Any) -> bool:
    """
    Check if a value looks like an integer, e.g. "42" or "-7".

    Numbers with a leading zero are rejected, and so is "0".

    Args:
        value: Value to check; non-strings are converted with str()

    Returns:
        True if value has integer shape
    """
    return _INTEGER_RE.fullmatch(to_text(value)) is not None


def is_float(value: Any) -> bool:
    """
    Check if a value looks like a decimal number, e.g. "3.14".

    Args:
        value: Value to check; non-strings are converted with str()

    Returns:
        True if value has digits on both sides of a single dot
    """
    return _FLOAT_RE.fullmatch(to_text(value)) is not None


def is_utf8(value: Any, encoding: Optional[str] = None) -> bool:
    """
    Check if a value is valid in the configured encoding (UTF-8 by default).

    Args:
        value: bytes to decode or str to encode
        encoding: Encoding to check against (defaults to settings.encoding)

    Returns:
        True if the conversion succeeds without errors
    """
    encoding = encoding or settings.encoding
    try:
        if isinstance(value, (bytes, bytearray)):
            bytes(value).decode(encoding)
        elif isinstance(value, str):
            value.encode(encoding)
        else:
            return False
    except (UnicodeError, LookupError):
        return False
    return True


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def is_json(value: Any) -> bool:
    """
    Check if a value is a valid JSON document.

    Args:
        value: String to check

    Returns:
        True if value is a non-empty string that parses as strict JSON
    """
    if not value or not isinstance(value, str):
        return False

    try:
        json.loads(value, parse_constant=_reject_constant)
    except ValueError:
        return False
    return True


def is_image_path(value: Any) -> bool:
    """
    Check if the path of a URL ends with an image extension, e.g. ".png".

    Args:
        value: URL or file path

    Returns:
        True if the path ends in one of IMAGE_EXTENSIONS (case-insensitive)
    """
    try:
        path = urlsplit(to_text(value)).path
    except ValueError:
        return False
    return _IMAGE_RE.search(path) is not None


def is_python_version(version: Any) -> bool:
    """
    Check if the running interpreter is at least the given version.

    Args:
        version: Dotted version such as "3.10" or "3.11.2"; other values
            are converted with str()

    Returns:
        True if sys.version_info >= version
    """
    return _is_python_version(str(version))


@lru_cache(maxsize=None)
def _is_python_version(version: str) -> bool:
    match = _VERSION_RE.match(version)
    if match is None:
        return False

    required = [int(part) for part in match.group(1).split(".")][:3]
    required += [0] * (3 - len(required))
    return tuple(sys.version_info[:3]) >= tuple(required)
