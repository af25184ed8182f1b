"""
=============================================================================
CONDITIONAL REQUEST FRESHNESS
=============================================================================

Decides whether the client's cached copy is still good, i.e. whether a
server could answer 304 Not Modified instead of sending the body again.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   VALIDATORS ON BOTH SIDES                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   REQUEST (client's memory)        RESPONSE (server's current)      │
    │   ─────────────────────────        ───────────────────────────      │
    │   If-None-Match: "abc", W/"x"  ↔   ETag: "abc"                      │
    │   If-Modified-Since: <date>    ↔   Last-Modified: <date>            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The response validators are not known to the request; they are passed in
each time. The result is never cached.

=============================================================================
DECISION ORDER
=============================================================================

    1. method not GET/HEAD                        → stale
       status given and not 2xx / 304             → stale
    2. no If-None-Match and no If-Modified-Since  → stale
    3. Cache-Control: no-cache, no validators     → stale
    4. If-None-Match present:
         "*" listed, or a tag equals the ETag     → fresh
         (weak comparison: W/ ignored on both sides)
    5. else If-Modified-Since parses:
         Last-Modified <= If-Modified-Since       → fresh   (whole seconds)
    6. anything else                              → stale

=============================================================================
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional, Union
import logging
import re

logger = logging.getLogger(__name__)

LastModified = Union[datetime, str, int, float]

CACHEABLE_METHODS = frozenset({"GET", "HEAD"})

NO_CACHE_PATTERN = re.compile(r"(?:^|,)\s*no-cache\s*(?:,|$)", re.IGNORECASE)


def parse_http_date(value: Optional[LastModified]) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime with whole seconds.

    Accepts an HTTP-date string, a datetime (naive means UTC) or epoch
    seconds. Returns None when the value is missing or cannot be parsed.
    """
    if value is None or value == "":
        return None

    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        elif isinstance(value, str):
            parsed = parsedate_to_datetime(value)
        else:
            return None
    except (TypeError, ValueError, IndexError, OverflowError, OSError):
        logger.debug("Unparsable HTTP date: %r", value)
        return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).replace(microsecond=0)


def _strip_weak(tag: str) -> str:
    tag = tag.strip()
    if tag[:2] in ("W/", "w/"):
        return tag[2:]
    return tag


def etag_matches(if_none_match: str, etag: Optional[str]) -> bool:
    """
    Weak comparison of an If-None-Match list against one ETag.

    Examples:
        etag_matches('"a", "b"', '"b"')     → True
        etag_matches('W/"a"', '"a"')        → True
        etag_matches('*', None)             → True
        etag_matches('"a"', None)           → False
    """
    tags = [tag.strip() for tag in if_none_match.split(",") if tag.strip()]
    if "*" in tags:
        return True
    if not etag:
        return False

    current = _strip_weak(etag)
    return any(_strip_weak(tag) == current for tag in tags)


def is_fresh(
    method: str,
    headers: Mapping[str, str],
    etag: Optional[str] = None,
    last_modified: Optional[LastModified] = None,
    status: Optional[int] = None,
) -> bool:
    """
    Evaluate request freshness against the response validators.

    Args:
        method: Request method (any case).
        headers: Request headers with lower-case names.
        etag: Response ETag, if the response has one.
        last_modified: Response Last-Modified, if any.
        status: Response status; when given, only 2xx and 304 can be fresh.

    Returns:
        True when the client's cached representation is still current.
    """
    if (method or "").upper() not in CACHEABLE_METHODS:
        return False

    if status is not None and not (200 <= status < 300 or status == 304):
        return False

    if_none_match = headers.get("if-none-match")
    if_modified_since = headers.get("if-modified-since")
    if not if_none_match and not if_modified_since:
        return False

    has_validators = bool(etag) or last_modified is not None
    cache_control = headers.get("cache-control", "")
    if cache_control and NO_CACHE_PATTERN.search(cache_control) and not has_validators:
        return False

    if if_none_match:
        return etag_matches(if_none_match, etag)

    since = parse_http_date(if_modified_since)
    if since is None:
        return False

    modified = parse_http_date(last_modified)
    if modified is None:
        return False

    return modified <= since


def is_stale(
    method: str,
    headers: Mapping[str, str],
    etag: Optional[str] = None,
    last_modified: Optional[LastModified] = None,
    status: Optional[int] = None,
) -> bool:
    """Exactly `not is_fresh(...)`."""
    return not is_fresh(method, headers, etag, last_modified, status)
