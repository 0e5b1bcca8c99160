"""
String helpers.

All functions work on code points rather than bytes. ``bytes`` input is
decoded with the configured encoding (settings.encoding) unless an explicit
``encoding`` is passed.
"""

import re
from typing import Any, Dict, Optional, Union

from wcwidth import wcwidth

from utilkit.config import settings


ELLIPSIS = "..."

_SNAKE_CASE_RE = re.compile(r'(.)(?=[A-Z])')
_WORD_START_RE = re.compile(r'(^|\s)(\S)')
_EMAIL_UNSAFE_RE = re.compile(r"[^A-Za-z0-9!#$%&'*+\-=?^_`{|}~@.\[\]]")
_BARE_AMPERSAND_RE = re.compile(r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)")
_HTML_SPECIAL_CHARS = str.maketrans({
    "<": "&lt;",
    ">": "&gt;",
    "\"": "&quot;",
    "'": "&#039;",
})


def to_text(value: Any, encoding: Optional[str] = None) -> str:
    """
    Coerce a value to text.

    Args:
        value: str, bytes or any other value
        encoding: Encoding used to decode bytes (defaults to settings.encoding)

    Returns:
        Decoded text; invalid byte sequences are replaced
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(encoding or settings.encoding, errors="replace")
    if value is None:
        return ""
    return str(value)


def display_width(value: Union[str, bytes]) -> int:
    """
    Calculate the number of terminal columns a string occupies.

    East Asian wide characters count as two columns, combining and
    non-printable characters as zero.

    Args:
        value: Text to measure

    Returns:
        Display width
    """
    width = 0
    for char in to_text(value):
        char_width = wcwidth(char)
        if char_width > 0:
            width += char_width
    return width


def compact(value: Union[str, bytes], max_width: int = 0) -> str:
    """
    Truncate a string to a maximum display width, appending an ellipsis.

    Args:
        value: Text to compact
        max_width: Maximum display width including the ellipsis. 0 disables truncation

    Returns:
        The original string if it fits; otherwise the widest prefix that
        fits together with "..."

    Raises:
        ValueError: If max_width is negative
    """
    if max_width < 0:
        raise ValueError(f"max_width must not be negative, got {max_width}")

    text = to_text(value)
    if max_width == 0 or display_width(text) <= max_width:
        return text

    budget = max_width - display_width(ELLIPSIS)
    if budget <= 0:
        return ELLIPSIS[:max_width]

    width = 0
    end = 0
    for index, char in enumerate(text):
        char_width = max(wcwidth(char), 0)
        if width + char_width > budget:
            break
        width += char_width
        end = index + 1

    return text[:end] + ELLIPSIS


def to_camel_case(value: Union[str, bytes]) -> str:
    """
    Convert a snake-case or kebab-case string to camel case.

    Args:
        value: e.g. "foo_bar" or "foo-bar"

    Returns:
        e.g. "fooBar"
    """
    text = to_text(value).replace('-', ' ').replace('_', ' ')
    # Only the first letter of each word changes, like ucwords()
    text = _WORD_START_RE.sub(lambda m: m.group(1) + m.group(2).upper(), text)
    text = text.replace(' ', '')
    return text[:1].lower() + text[1:]


def to_snake_case(value: Union[str, bytes], delimiter: str = '_') -> str:
    """
    Convert a camel-case string to snake case.

    Args:
        value: e.g. "fooBar"
        delimiter: Inserted before each interior upper-case letter

    Returns:
        e.g. "foo_bar"
    """
    text = _SNAKE_CASE_RE.sub(lambda m: m.group(1) + delimiter, to_text(value))
    return text.lower()


def to_lower(value: Union[str, bytes], encoding: Optional[str] = None) -> str:
    """Convert a string to lower case."""
    return to_text(value, encoding).lower()


def to_upper(value: Union[str, bytes], encoding: Optional[str] = None) -> str:
    """Convert a string to upper case."""
    return to_text(value, encoding).upper()


def to_title(value: Union[str, bytes], encoding: Optional[str] = None) -> str:
    """Convert a string to title case."""
    return to_text(value, encoding).title()


def starts_with(value: str, needle: str, case_sensitive: bool = True) -> bool:
    """
    Check if a string begins with a substring.

    Args:
        value: String to search within
        needle: String to search for
        case_sensitive: Case-sensitive matching (default True)

    Returns:
        True if value starts with needle; an empty needle always matches
    """
    value, needle = to_text(value), to_text(needle)
    if not case_sensitive:
        value, needle = value.casefold(), needle.casefold()
    return value.startswith(needle)


def ends_with(value: str, needle: str, case_sensitive: bool = True) -> bool:
    """
    Check if a string ends with a substring.

    Args:
        value: String to search within
        needle: String to search for
        case_sensitive: Case-sensitive matching (default True)

    Returns:
        True if value ends with needle; an empty needle always matches
    """
    value, needle = to_text(value), to_text(needle)
    if not case_sensitive:
        value, needle = value.casefold(), needle.casefold()
    return value.endswith(needle)


def contains(value: str, needle: str, case_sensitive: bool = True) -> bool:
    """
    Check if a string contains a substring.

    Args:
        value: String to search within
        needle: String to search for
        case_sensitive: Case-sensitive matching (default True)

    Returns:
        True if needle occurs in value; an empty needle always matches
    """
    value, needle = to_text(value), to_text(needle)
    if not case_sensitive:
        value, needle = value.casefold(), needle.casefold()
    return needle in value


def is_empty(value: Any) -> bool:
    """
    Check if a string is empty after trimming whitespace.

    Unlike a plain truthiness check, anything that is not a str counts as empty.

    Args:
        value: Value to check

    Returns:
        True if value is not a string or only contains whitespace
    """
    if not isinstance(value, str):
        return True
    return len(value.strip()) == 0


def length(value: Union[str, bytes], encoding: Optional[str] = None) -> int:
    """Return the number of code points in a string."""
    return len(to_text(value, encoding))


def substr(value: Union[str, bytes], start: int, length: Optional[int] = None) -> str:
    """
    Return part of a string.

    A negative start counts from the end of the string; a negative length
    leaves that many characters off the end.

    Args:
        value: Source string
        start: First character position
        length: Maximum number of characters (None means to the end)

    Returns:
        The substring, possibly empty
    """
    part = to_text(value)[start:]
    if length is None:
        return part
    return part[:length]


def normalize_eol(value: Union[str, bytes]) -> str:
    """Standardize line endings to unix-like."""
    return to_text(value).replace('\r\n', '\n').replace('\r', '\n')


def parse_template(template: Any, context: Dict[str, Any]) -> str:
    """
    Interpolate a Mustache-like template, e.g. "Hello {{name}}".

    Replacement happens in a single pass, so substituted values are never
    themselves expanded.

    Args:
        template: Template string
        context: Mapping of placeholder name to value

    Returns:
        Interpolated string; empty string if template is not a string
    """
    if not isinstance(template, str):
        return ""
    if not context:
        return template

    replacements = {f"{{{{{key}}}}}": str(value) for key, value in context.items()}
    pattern = re.compile("|".join(
        re.escape(placeholder)
        for placeholder in sorted(replacements, key=len, reverse=True)
    ))
    return pattern.sub(lambda m: replacements[m.group(0)], template)


def clean(value: Union[str, bytes], encoding: Optional[str] = None) -> str:
    """
    Strip characters that are not valid in the given encoding.

    Args:
        value: Text or raw bytes
        encoding: Target encoding (defaults to settings.encoding)

    Returns:
        Text containing only characters representable in the encoding
    """
    encoding = encoding or settings.encoding
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(encoding, errors="ignore")
    return to_text(value).encode(encoding, errors="ignore").decode(encoding)


def escape(value: Union[str, bytes], double_encode: bool = False,
           encoding: Optional[str] = None) -> str:
    """
    Escape the HTML special characters & < > " ' of a string.

    Args:
        value: Text to escape
        double_encode: Also escape the ampersand of existing entities such as "&amp;"
        encoding: Encoding used to decode bytes (defaults to settings.encoding)

    Returns:
        Escaped text
    """
    text = to_text(value, encoding)
    if double_encode:
        text = text.replace("&", "&amp;")
    else:
        text = _BARE_AMPERSAND_RE.sub("&amp;", text)
    return text.translate(_HTML_SPECIAL_CHARS)


def sanitize(value: str) -> str:
    """
    HTML-escape a string.

    Args:
        value: String to sanitize

    Returns:
        Escaped string

    Raises:
        TypeError: If value is not a str
    """
    if not isinstance(value, str):
        raise TypeError(f"sanitize() expects a str, got {type(value).__name__}")

    return escape(value)


def sanitize_email(value: Any) -> str:
    """Remove every character that is not allowed in an e-mail address."""
    return _EMAIL_UNSAFE_RE.sub('', to_text(value))
