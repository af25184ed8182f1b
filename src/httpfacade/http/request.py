"""
=============================================================================
RAW REQUEST
=============================================================================

The raw, unprocessed input handed to the request facade by the server
that owns the socket.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      RAW REQUEST CONTENTS                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   method      "GET"                                                 │
    │   url         "/users?page=1"  or  "http://virk.abc.com/"           │
    │   headers     {"Host": "abc.com", "Accept": [...], ...}            │
    │   connection  Connection(remote_address, remote_port, encrypted)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Everything except `url` has a default. A test double can be as small as
RawRequest(url="http://virk.abc.com") with no socket behind it.

Header values are a string, or a list of strings when the header was
repeated on the wire. Names are matched case-insensitively by the facade.
The body never lives here: the body parser binds its result to the facade
with Request.bind_body().

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Union


HeaderValue = Union[str, List[str]]


@dataclass(frozen=True)
class Connection:
    """
    What the facade needs to know about the transport.

    remote_address: Peer IP as reported by the socket (None for doubles)
    remote_port:    Peer port
    encrypted:      True when the request arrived over TLS
    """

    remote_address: Optional[str] = None
    remote_port: int = 0
    encrypted: bool = False


@dataclass
class RawRequest:
    """
    An incoming request as received from the transport.

    The facade never mutates it.
    """

    url: str
    method: str = "GET"
    headers: Mapping[str, HeaderValue] = field(default_factory=dict)
    connection: Connection = field(default_factory=Connection)

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RawRequest":
        """Build a minimal request carrying nothing but a URL."""
        return cls(url=url, **kwargs)
