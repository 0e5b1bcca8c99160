"""
General-purpose helpers for web applications.

This package provides:
- String transformations and HTML escaping
- Accessors for mappings and sequences
- Per-request introspection of inbound HTTP requests
- Validation predicates
- Miscellaneous helpers (GUIDs, CSV, locked file writes, redirects)
- An outbound HTTP fetch helper
"""

from .config import Settings, settings
from .logger import logger, setup_logger, get_logger
from .exceptions import (
    UtilkitError,
    FetchError,
    FetchTransportError,
    FetchStatusError,
    LockError
)
from .strings import (
    compact,
    display_width,
    to_camel_case,
    to_snake_case,
    to_lower,
    to_upper,
    to_title,
    starts_with,
    ends_with,
    contains,
    is_empty,
    length,
    substr,
    normalize_eol,
    parse_template,
    sanitize,
    sanitize_email
)
from .arrays import (
    get,
    set_value,
    filter_keys,
    flatten,
    first,
    last,
    is_assoc,
    to_array,
    obj_to_dict
)
from .request import RequestContext
from .validators import (
    IPV4,
    IPV6,
    is_ip_address,
    is_url,
    is_email_address,
    is_integer,
    is_float,
    is_utf8,
    is_json,
    is_image_path,
    is_python_version
)
from .helpers import (
    guid,
    html_escape,
    to_csv,
    file_write,
    FileLock,
    lock,
    dump,
    dd,
    build_path,
    parse_query_params,
    percent_diff,
    value_or_default,
    redirect
)
from .http import fetch

__version__ = "1.0.0"

__all__ = [
    # Configuration and logging
    "Settings",
    "settings",
    "logger",
    "setup_logger",
    "get_logger",
    # Exceptions
    "UtilkitError",
    "FetchError",
    "FetchTransportError",
    "FetchStatusError",
    "LockError",
    # Strings
    "compact",
    "display_width",
    "to_camel_case",
    "to_snake_case",
    "to_lower",
    "to_upper",
    "to_title",
    "starts_with",
    "ends_with",
    "contains",
    "is_empty",
    "length",
    "substr",
    "normalize_eol",
    "parse_template",
    "sanitize",
    "sanitize_email",
    # Arrays
    "get",
    "set_value",
    "filter_keys",
    "flatten",
    "first",
    "last",
    "is_assoc",
    "to_array",
    "obj_to_dict",
    # Request
    "RequestContext",
    # Validators
    "IPV4",
    "IPV6",
    "is_ip_address",
    "is_url",
    "is_email_address",
    "is_integer",
    "is_float",
    "is_utf8",
    "is_json",
    "is_image_path",
    "is_python_version",
    # Helpers
    "guid",
    "html_escape",
    "to_csv",
    "file_write",
    "FileLock",
    "lock",
    "dump",
    "dd",
    "build_path",
    "parse_query_params",
    "percent_diff",
    "value_or_default",
    "redirect",
    # HTTP
    "fetch",
]
