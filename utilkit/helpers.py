"""
Helper functions for common operations.
"""

import csv
import fcntl
import io
import os
import pprint
import random
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Dict, Optional, Union

from starlette.datastructures import QueryParams
from starlette.responses import RedirectResponse

from utilkit.config import settings
from utilkit.exceptions import LockError
from utilkit.logger import get_logger
from utilkit.strings import escape
from utilkit.validators import is_url


logger = get_logger(__name__)

DUMP_STYLE = (
    "background: #3498db; color: #000; border: 1px dotted #000; margin: 10px 0; "
    "padding: 10px; text-align: left; white-space: pre-wrap;"
)


def guid() -> str:
    """
    Generate a random globally unique identifier.

    The third group is drawn from 0x4000-0x4FFF and the fourth from
    0x8000-0xBFFF, the ranges of a version 4 GUID. Uses the non-cryptographic
    random module: fine for display and correlation ids, not for tokens.

    Returns:
        e.g. "3F2504E0-4F89-41D3-9A0C-0305E82C3301"
    """
    return "%04X%04X-%04X-%04X-%04X-%04X%04X%04X" % (
        random.randint(0, 0xFFFF),
        random.randint(0, 0xFFFF),
        random.randint(0, 0xFFFF),
        random.randint(0x4000, 0x4FFF),
        random.randint(0x8000, 0xBFFF),
        random.randint(0, 0xFFFF),
        random.randint(0, 0xFFFF),
        random.randint(0, 0xFFFF),
    )


def html_escape(value: Any, double_encode: bool = False, encoding: Optional[str] = None) -> Any:
    """
    HTML-escape a string, or every string inside a list, tuple or dict.

    Args:
        value: Value to escape
        double_encode: Also escape existing entities such as "&amp;"
        encoding: Encoding used to decode bytes (defaults to settings.encoding)

    Returns:
        Escaped value of the same shape; falsy values and non-string
        scalars are returned unchanged
    """
    if not value:
        return value

    if isinstance(value, Mapping):
        return {key: html_escape(item, double_encode, encoding) for key, item in value.items()}
    if isinstance(value, list):
        return [html_escape(item, double_encode, encoding) for item in value]
    if isinstance(value, tuple):
        return tuple(html_escape(item, double_encode, encoding) for item in value)
    if isinstance(value, (str, bytes, bytearray)):
        return escape(value, double_encode, encoding)

    return value


def _is_record(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _record_keys(record: Union[Mapping, Sequence]) -> list:
    if isinstance(record, Mapping):
        return list(record.keys())
    return list(range(len(record)))


def _csv_field(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def _record_values(record: Union[Mapping, Sequence]) -> list:
    values = record.values() if isinstance(record, Mapping) else record
    return [_csv_field(value) for value in values]


def to_csv(data: Any, delimiter: str = ",", enclosure: str = '"') -> str:
    """
    Convert a record, or a sequence of records, to a CSV string.

    The header row is taken from the keys of the first record (indexes for
    sequence records). None and False are written as empty fields, True as
    "1". Output stops at the first item that is not a record.

    Args:
        data: A mapping, a flat sequence, or a sequence of mappings/sequences
        delimiter: Field delimiter (one character, None means ",")
        enclosure: Field enclosure (one character, None means '"')

    Returns:
        CSV text with "\\n" line endings; empty string for empty data
    """
    if delimiter is None:
        delimiter = ","
    if enclosure is None:
        enclosure = '"'

    if not data:
        return ""

    if isinstance(data, Mapping):
        records = [data]
    elif _is_record(data) and _is_record(data[0]):
        records = data
    elif _is_record(data):
        records = [data]
    else:
        records = [[data]]

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, quotechar=enclosure, lineterminator="\n")

    writer.writerow(_record_keys(records[0]))
    for record in records:
        if not _is_record(record):
            break
        writer.writerow(_record_values(record))

    return buffer.getvalue()


def file_write(path: Union[str, Path], data: Union[str, bytes], overwrite: bool = False) -> bool:
    """
    Write to a file while holding an exclusive lock on it.

    Args:
        path: File to write
        data: Text or bytes to append (or write)
        overwrite: Truncate the file instead of appending (default False)

    Returns:
        True if the data was written; False on an OS error
    """
    # Opened for append so nothing is truncated before the lock is held
    mode = "a"
    encoding = settings.encoding
    if isinstance(data, (bytes, bytearray)):
        mode += "b"
        encoding = None

    try:
        with open(path, mode, encoding=encoding) as handle:
            fcntl.flock(handle, fcntl.LOCK_EX)
            try:
                if overwrite:
                    handle.truncate(0)
                handle.write(data)
                handle.flush()
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)
    except OSError as e:
        logger.warning(f"Could not write to {path}: {e}")
        return False

    return True


class FileLock:
    """
    Exclusive, non-blocking lock on ``<name>.lock``.

    The lock is released, and its handle closed, by release() or when
    leaving the ``with`` block.
    """

    def __init__(self, name: Union[str, Path]):
        self.path = f"{name}.lock"
        self._handle = None

    @property
    def locked(self) -> bool:
        """Whether this instance currently holds the lock."""
        return self._handle is not None

    def acquire(self) -> bool:
        """
        Try to take the lock without waiting.

        Returns:
            True if the lock is now held by this instance
        """
        if self._handle is not None:
            return True

        handle = open(self.path, "w+")
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            handle.close()
            logger.debug(f"Lock busy: {self.path}")
            return False
        except OSError:
            handle.close()
            raise

        self._handle = handle
        return True

    def release(self) -> None:
        """Release the lock; a no-op when it is not held."""
        if self._handle is None:
            return
        try:
            fcntl.flock(self._handle, fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None

    def __enter__(self):
        if not self.acquire():
            raise LockError(self.path)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


def lock(name: Union[str, Path]) -> Optional[FileLock]:
    """
    Acquire an exclusive lock file.

    Args:
        name: Lock name; the file is ``<name>.lock``

    Returns:
        The held FileLock (call release() or use it as a context manager),
        or None if the lock is held elsewhere
    """
    file_lock = FileLock(name)
    return file_lock if file_lock.acquire() else None


def dump(data: Any, label: str = "dump", echo: bool = True) -> Optional[str]:
    """
    Dump variable data as an HTML block.

    Args:
        data: Data to dump
        label: Label printed next to the data
        echo: Print the block (default) instead of returning it

    Returns:
        The HTML block when echo is False; otherwise None
    """
    output = escape(pprint.pformat(data, indent=2, sort_dicts=False), double_encode=True)
    output = f'<pre style="{DUMP_STYLE}">{escape(label)} => {output}</pre>'

    if not echo:
        return output

    print(output)
    return None


def dd(data: Any, label: str = "dump"):
    """Dump and exit."""
    dump(data, label, echo=True)
    sys.exit(0)


def build_path(*parts: Union[str, Path]) -> str:
    """Join path parts with the platform directory separator."""
    return os.sep.join(str(part) for part in parts)


def parse_query_params(url: Any) -> Dict[str, str]:
    """
    Parse the query parameters of a URL.

    Args:
        url: URL string, e.g. "http://host/index?key_1=value1&key_2=value2"

    Returns:
        Dict of parameter name to value (last value wins); empty when the
        URL has no query string
    """
    query = str(url).partition("?")[2].partition("#")[0]
    return dict(QueryParams(query))


def percent_diff(old: float, new: float) -> str:
    """
    Get the percentage change from one value to another.

    Args:
        old: Previous value
        new: Current value

    Returns:
        e.g. "50%" for old=10, new=15

    Raises:
        ValueError: If old is zero
    """
    if old == 0:
        raise ValueError("Cannot compute a percentage difference from zero")
    return f"{(new - old) / old * 100:g}%"


def value_or_default(value: Any, default: Any) -> Any:
    """Return value unless it is None, in which case return default."""
    return default if value is None else value


def redirect(url: str, permanent: bool = False, validate: bool = True) -> Optional[RedirectResponse]:
    """
    Build a redirect response.

    Args:
        url: Target URL
        permanent: Use 301 Moved Permanently instead of 302 Found
        validate: Refuse to redirect to something that is not an absolute URL

    Returns:
        RedirectResponse, or None when validation fails
    """
    if validate and not is_url(url):
        logger.debug(f"Refusing redirect to invalid URL: {url!r}")
        return None

    return RedirectResponse(url, status_code=301 if permanent else 302)
