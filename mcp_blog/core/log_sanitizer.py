"""
Helpers for logging client-controlled values.
"""

import re
from typing import Any

_CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f\x7f-\x9f]')
# Matches Unicode line separators (LINE SEPARATOR and PARAGRAPH SEPARATOR)
_UNICODE_NEWLINES_RE = re.compile(r'[\u2028\u2029]')


def sanitize_for_logging(value: Any) -> str:
    """
    Strip newlines and control characters from a value before logging it.

    Slugs and session IDs arrive from MCP clients. Stripping line breaks
    and non-printable characters keeps a client from forging log entries.

    Args:
        value: Any value to sanitize. Non-strings are converted with str().

    Returns:
        str: The sanitized string.

    Examples:
        >>> sanitize_for_logging("hello\\nworld")
        'helloworld'
        >>> sanitize_for_logging("tab\\there")
        'tabhere'
        >>> sanitize_for_logging(None)
        ''
    """
    if value is None:
        return ''
    if not isinstance(value, str):
        value = str(value)
    value = _CONTROL_CHARS_RE.sub('', value)
    return _UNICODE_NEWLINES_RE.sub('', value)
