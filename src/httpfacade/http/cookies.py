"""
=============================================================================
COOKIE HEADER PARSING
=============================================================================

Turns a request `Cookie` header into a plain dict.

    Cookie: name=foo; theme="dark"; path=%2Fhome
                     │
                     ▼
    {"name": "foo", "theme": "dark", "path": "/home"}

Rules:
    - pairs are separated by ";"
    - the first "=" splits name from value, so values may contain "="
    - surrounding double quotes are removed from the value
    - percent-escapes are decoded; a value that fails to decode is kept raw
    - the first occurrence of a name wins
    - fragments without "=" are ignored
=============================================================================
"""

import logging
from typing import Dict, Iterable, Optional, Union
from urllib.parse import unquote

logger = logging.getLogger(__name__)

CookieJar = Dict[str, str]


def _decode(value: str) -> str:
    if "%" not in value:
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def parse_cookie_header(header: Optional[Union[str, Iterable[str]]]) -> CookieJar:
    """
    Parse one or several Cookie header values.

    Args:
        header: The header value. A list (repeated Cookie headers) is
                treated as if its items were joined with "; ".

    Returns:
        A new dict of cookie name to decoded value; empty when the header
        is absent or blank.
    """
    if not header:
        return {}
    if not isinstance(header, str):
        header = "; ".join(header)

    jar: CookieJar = {}
    for fragment in header.split(";"):
        name, sep, value = fragment.partition("=")
        if not sep:
            if fragment.strip():
                logger.debug("Ignoring cookie fragment without '=': %r", fragment)
            continue

        name = name.strip()
        if not name or name in jar:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]

        jar[name] = _decode(value)

    return jar
