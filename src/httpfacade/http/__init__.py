"""
=============================================================================
HTTP COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST FACADE (facade.py)                                          │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Request - lazy, cached views over one RawRequest                    │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ composes
                                    ▼
    ┌─────────────────┬─────────────────┬──────────────────┬─────────────┐
    │ freshness.py    │ negotiation.py  │ forwarded.py     │ uploads.py  │
    │ fresh()/stale() │ accepts()/is_() │ ip()/ips()       │ file()      │
    ├─────────────────┼─────────────────┼──────────────────┼─────────────┤
    │ subdomains.py   │ cookies.py      │ mime_types.py    │ request.py  │
    │ subdomains()    │ cookies()       │ short names      │ RawRequest  │
    └─────────────────┴─────────────────┴──────────────────┴─────────────┘

=============================================================================
"""

from .request import Connection, RawRequest
from .facade import Request
from .uploads import FileDescriptor, FileError, FileValidationOptions, UploadedFile
from .forwarded import AddressResolver
from .freshness import is_fresh, is_stale
from .negotiation import best_media_type, type_matches
from .subdomains import parse_subdomains
from .cookies import parse_cookie_header
from .mime_types import get_mime_type, lookup

__all__ = [
    # Raw input
    "Connection",
    "RawRequest",

    # Facade
    "Request",

    # Uploads
    "FileDescriptor",
    "FileError",
    "FileValidationOptions",
    "UploadedFile",

    # Protocol helpers
    "AddressResolver",
    "is_fresh",
    "is_stale",
    "best_media_type",
    "type_matches",
    "parse_subdomains",
    "parse_cookie_header",

    # MIME types
    "get_mime_type",
    "lookup",
]
