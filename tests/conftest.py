"""
pytest configuration and fixtures.
"""

from pathlib import Path
from typing import Callable
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpfacade import Connection, FileDescriptor, RawRequest, Request


@pytest.fixture
def sample_raw_request(local_connection: Connection) -> RawRequest:
    """A GET request as handed over by the server, with the headers most accessors read."""
    return RawRequest(
        url="/api/users?page=1&limit=10",
        method="GET",
        headers={
            "Host": "virk.abc.com:8080",
            "User-Agent": "pytest",
            "Accept": "text/html, application/json;q=0.9",
            "Cookie": ["name=foo", "theme=dark"],
            "X-Requested-With": "XMLHttpRequest",
        },
        connection=local_connection,
    )


@pytest.fixture
def local_connection() -> Connection:
    """Plain-text connection from the loopback address."""
    return Connection(remote_address="127.0.0.1", remote_port=51234)


@pytest.fixture
def make_request(local_connection: Connection) -> Callable[..., Request]:
    """
    Build a Request from a target and headers.

    Usage:
        request = make_request("/?name=foo", headers={"Accept": "text/html"})
    """

    def _make(url: str = "/", method: str = "GET", headers=None, connection=None,
              config=None, **kwargs) -> Request:
        raw = RawRequest(
            url=url,
            method=method,
            headers=headers or {},
            connection=connection or local_connection,
        )
        return Request(raw, config, **kwargs)

    return _make


@pytest.fixture
def uploaded_logo(tmp_path: Path) -> FileDescriptor:
    """A small SVG written to a temporary upload location."""
    tmp_file = tmp_path / "upload_0a1b2c"
    tmp_file.write_text('<svg xmlns="http://www.w3.org/2000/svg"></svg>')
    return FileDescriptor(
        field_name="logo",
        client_name="npm-logo.svg",
        tmp_path=str(tmp_file),
        size=tmp_file.stat().st_size,
        type="image/svg+xml",
    )


@pytest.fixture
def uploaded_favicon(tmp_path: Path) -> FileDescriptor:
    """A fake favicon upload."""
    tmp_file = tmp_path / "upload_3d4e5f"
    tmp_file.write_bytes(b"\x00\x00\x01\x00" + b"\x00" * 60)
    return FileDescriptor(
        field_name="favicon",
        client_name="favicon.ico",
        tmp_path=str(tmp_file),
        size=64,
        type="image/x-icon",
    )
