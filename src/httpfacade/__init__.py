"""
=============================================================================
HTTPFACADE - Read-side request inspection
=============================================================================

A facade over one incoming HTTP request: lazily parsed query, body,
cookies, route parameters, headers and uploaded files, plus the HTTP rules
a request object has to get right (conditional-request freshness, content
negotiation, proxy-aware client addresses, subdomains).

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpfacade/
    ├── __init__.py          # This file - package exports
    ├── config.py            # FacadeConfig dataclass, logging setup
    ├── exceptions.py        # FacadeError hierarchy
    ├── core/
    │   └── lazy.py          # LazySlot memoization cell
    └── http/
        ├── request.py       # RawRequest, Connection
        ├── facade.py        # Request facade
        ├── cookies.py       # Cookie header parsing
        ├── freshness.py     # If-None-Match / If-Modified-Since
        ├── negotiation.py   # Accept*, Content-Type matching
        ├── forwarded.py     # X-Forwarded-For, trusted proxies
        ├── subdomains.py    # hostname → subdomain labels
        ├── uploads.py       # uploaded file views and validation
        └── mime_types.py    # short names and extensions

=============================================================================
QUICK START
=============================================================================

    from httpfacade import Request, RawRequest, Connection, FacadeConfig

    raw = RawRequest(
        url="/users/7?fields=name",
        headers={"Accept": "application/json", "Cookie": "sid=abc"},
        connection=Connection(remote_address="127.0.0.1"),
    )
    request = Request(raw, FacadeConfig(), params={"id": "7"})

    request.get()                   # {"fields": "name"}
    request.param("id")             # "7"
    request.cookie("sid")           # "abc"
    request.accepts("html", "json") # "json"
    request.ip()                    # "127.0.0.1"

=============================================================================
"""

from .config import FacadeConfig, configure_logging
from .exceptions import ConfigError, FacadeError, FileMoveError, RequestError
from .http import (
    Connection,
    FileDescriptor,
    FileError,
    FileValidationOptions,
    RawRequest,
    Request,
    UploadedFile,
)

__version__ = "1.0.0"

__all__ = [
    "FacadeConfig",
    "configure_logging",
    "FacadeError",
    "RequestError",
    "FileMoveError",
    "ConfigError",
    "Connection",
    "RawRequest",
    "Request",
    "FileDescriptor",
    "FileError",
    "FileValidationOptions",
    "UploadedFile",
]
