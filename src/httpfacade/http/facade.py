"""
=============================================================================
REQUEST FACADE
=============================================================================

One Request object wraps one RawRequest and answers every question a
handler asks about it.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        WHERE ANSWERS COME FROM                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   RawRequest.url ─────────► get(), url(), original_url(), hostname() │
    │   RawRequest.headers ─────► header(), cookies(), accepts(), is_(),   │
    │                             fresh(), ajax(), pjax()                  │
    │   RawRequest.connection ──► ip(), ips(), secure(), protocol()        │
    │                                                                      │
    │   body parser ──bind_body()───► post(), all(), input()               │
    │   router ───────bind_params()─► params(), param()                    │
    │   multipart ────bind_files()──► files(), file()                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CACHING
=============================================================================

query, body, cookies, params and files are each held in a LazySlot:
computed on first read and never again. If the router re-binds params
after a handler already read them, the handler keeps seeing the first
value. The cookie jar is returned by reference, so a caller that adds a
cookie to it sees that cookie on every later cookies() call.

fresh()/stale() depend on response validators and are evaluated on
every call.

=============================================================================
ABSENT VALUES
=============================================================================

Nothing here raises for missing data:

    get(), post(), params(), cookies()   → {}
    input(), header(), param(), cookie() → None (or the given default)
    file("missing")                      → UploadedFile with exists() False
    hostname()                           → None

The only failure is at construction: a target that cannot be parsed
raises RequestError.

=============================================================================
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import SplitResult, parse_qsl, urlsplit
import logging

from ..config import FacadeConfig
from ..core.lazy import LazySlot
from ..exceptions import RequestError
from .cookies import CookieJar, parse_cookie_header
from .forwarded import AddressResolver
from .freshness import LastModified, is_fresh
from .negotiation import (
    best_media_type,
    best_token,
    preferred_media_types,
    preferred_tokens,
    type_matches,
)
from .request import HeaderValue, RawRequest
from .subdomains import parse_subdomains
from .uploads import FileDescriptor, FileValidationOptions, UploadedFile

logger = logging.getLogger(__name__)

FileInput = Union[FileDescriptor, Mapping[str, Any]]
FilesMapping = Mapping[str, Union[FileInput, Iterable[FileInput]]]


def _parse_target(url: Any) -> SplitResult:
    """
    Validate the request target once, at construction.

    Accepted forms:
        origin-form     "/path?query"
        absolute-form   "http://host/path?query"
        asterisk-form   "*"
    """
    if not isinstance(url, str) or not url.strip():
        raise RequestError(f"Invalid request target: {url!r}")

    try:
        target = urlsplit(url)
        target.port  # raises ValueError on a bad port
    except ValueError as e:
        raise RequestError(f"Invalid request target: {url!r} ({e})") from e

    if url.startswith("/") or url == "*":
        return target
    if target.scheme and target.netloc:
        return target

    raise RequestError(f"Invalid request target: {url!r}")


def _normalize_header(value: Any) -> HeaderValue:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return str(value)


def _join_header(name: str, value: HeaderValue) -> str:
    if isinstance(value, str):
        return value
    separator = "; " if name == "cookie" else ", "
    return separator.join(value)


def _split_host(value: Optional[str]) -> Optional[str]:
    """Host header value to bare host: "Example.com:8080" → "example.com"."""
    if not value:
        return None
    try:
        return urlsplit("//" + value.strip()).hostname or None
    except ValueError:
        logger.debug("Unparsable host value: %r", value)
        return None


def _first(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.split(",", 1)[0].strip() or None


def _coerce_descriptor(field_name: str, item: FileInput) -> FileDescriptor:
    if isinstance(item, FileDescriptor):
        return item
    return FileDescriptor(
        field_name=item.get("field_name") or field_name,
        client_name=item.get("client_name") or "",
        tmp_path=item.get("tmp_path") or "",
        size=int(item.get("size") or 0),
        type=item.get("type") or "application/octet-stream",
    )


class Request:
    """
    Read-side facade over one incoming request.

    Args:
        raw: The raw request from the transport.
        config: Shared settings (trust policy, subdomain offset, upload
                defaults). Defaults to FacadeConfig().
        body: Parsed body mapping, if already available.
        params: Route parameters, if already available.
        files: Field name → FileDescriptor (or a list of them). A plain
               mapping is accepted in place of a FileDescriptor, with the
               keys:

                   client_name   file name sent by the client
                   tmp_path      where the multipart parser stored it
                   size          size in bytes (missing or None → 0)
                   type          media type (default application/octet-stream)
                   field_name    optional; defaults to the files key

    Raises:
        RequestError: If the raw request target cannot be parsed.

    Example:
        request = Request(RawRequest(url="/users?page=2"), params={"id": 7})
        request.get()        # {"page": "2"}
        request.param("id")  # 7
    """

    def __init__(
        self,
        raw: RawRequest,
        config: Optional[FacadeConfig] = None,
        *,
        body: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        files: Optional[FilesMapping] = None,
    ):
        self.raw = raw
        self.config = config or FacadeConfig()
        self._target = _parse_target(raw.url)

        self._headers: Dict[str, HeaderValue] = {
            str(name).lower(): _normalize_header(value)
            for name, value in (raw.headers or {}).items()
        }
        self._joined: Dict[str, str] = {
            name: _join_header(name, value) for name, value in self._headers.items()
        }

        self._body_store = body
        self._params_store = params
        self._files_store = files

        self._query: LazySlot[Dict[str, Any]] = LazySlot("query")
        self._body: LazySlot[Dict[str, Any]] = LazySlot("body")
        self._cookies: LazySlot[CookieJar] = LazySlot("cookies")
        self._params: LazySlot[Dict[str, Any]] = LazySlot("params")
        self._files: LazySlot[Dict[str, List[UploadedFile]]] = LazySlot("files")

        self._resolver = AddressResolver(self.config.trust_proxy)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.method()} {self.original_url()}>"

    # =========================================================================
    # INJECTION (router / body parser / multipart parser)
    # =========================================================================

    def bind_body(self, body: Optional[Mapping[str, Any]]) -> None:
        """Provide the parsed body. Ignored once post() has been read."""
        self._warn_if_read(self._body)
        self._body_store = body

    def bind_params(self, params: Optional[Mapping[str, Any]]) -> None:
        """Provide route parameters. Ignored once params() has been read."""
        self._warn_if_read(self._params)
        self._params_store = params

    def bind_files(self, files: Optional[FilesMapping]) -> None:
        """Provide uploaded files. Ignored once files() has been read."""
        self._warn_if_read(self._files)
        self._files_store = files

    def _warn_if_read(self, slot: LazySlot) -> None:
        if slot.computed:
            logger.debug("%s already read; late bind on %r has no effect", slot.name, self)

    # =========================================================================
    # QUERY AND BODY
    # =========================================================================

    def get(self) -> Dict[str, Any]:
        """
        Query string as a dict.

        A repeated plain key keeps its last value. Keys written with "[]"
        collect every value into a list under the bare name:

            ?a=1&a=2            → {"a": "2"}
            ?tag[]=x&tag[]=y    → {"tag": ["x", "y"]}
        """
        return self._query.get(self._parse_query)

    def _parse_query(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        for key, value in parse_qsl(self._target.query, keep_blank_values=True):
            if key.endswith("[]") and len(key) > 2:
                name = key[:-2]
                existing = query.get(name)
                if isinstance(existing, list):
                    existing.append(value)
                else:
                    query[name] = [value]
            else:
                query[key] = value
        return query

    def post(self) -> Dict[str, Any]:
        """Parsed body as bound by the body parser; {} when none."""
        return self._body.get(lambda: dict(self._body_store or {}))

    def all(self) -> Dict[str, Any]:
        """Query and body merged; body values win on key collisions."""
        merged = dict(self.get())
        merged.update(self.post())
        return merged

    def input(self, key: str, default: Any = None) -> Any:
        """Single value from all(), or `default`."""
        return self.all().get(key, default)

    def only(self, *keys: str) -> Dict[str, Any]:
        """Subset of all() with the given keys (missing keys are skipped)."""
        data = self.all()
        return {key: data[key] for key in keys if key in data}

    def except_(self, *keys: str) -> Dict[str, Any]:
        """all() without the given keys."""
        return {key: value for key, value in self.all().items() if key not in keys}

    def has(self, *keys: str) -> bool:
        """True when every key is present with a value other than None or ""."""
        data = self.all()
        return all(data.get(key) not in (None, "") for key in keys)

    # =========================================================================
    # HEADERS AND COOKIES
    # =========================================================================

    def headers(self) -> Dict[str, HeaderValue]:
        """All headers with lower-case names; repeated headers stay lists."""
        return self._headers

    def header(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        One header value, case-insensitive.

        Repeated headers are joined with ", " ("; " for Cookie).
        """
        return self._joined.get(key.lower(), default)

    def cookies(self) -> CookieJar:
        """
        Cookies parsed from the Cookie header.

        The same dict is returned on every call, so changes made to it by
        the caller persist for the rest of the request.
        """
        return self._cookies.get(lambda: parse_cookie_header(self._headers.get("cookie")))

    def cookie(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.cookies().get(key, default)

    # =========================================================================
    # ROUTE PARAMETERS AND FILES
    # =========================================================================

    def params(self) -> Dict[str, Any]:
        """Route parameters bound by the router; {} when none."""
        return self._params.get(lambda: dict(self._params_store or {}))

    def param(self, key: str, default: Any = None) -> Any:
        return self.params().get(key, default)

    def _build_files(self) -> Dict[str, List[UploadedFile]]:
        views: Dict[str, List[UploadedFile]] = {}
        for field_name, value in (self._files_store or {}).items():
            if isinstance(value, (FileDescriptor, Mapping)):
                items = [value]
            else:
                items = list(value)

            views[field_name] = [
                UploadedFile(
                    _coerce_descriptor(field_name, item),
                    size_limit=self.config.upload_size_limit,
                    allowed_extensions=self.config.upload_extensions,
                )
                for item in items
            ]
        return views

    def files(self) -> List[UploadedFile]:
        """Every uploaded file, in field order."""
        return [view for views in self._files.get(self._build_files).values() for view in views]

    def file(self, name: str, options: Optional[FileValidationOptions] = None) -> UploadedFile:
        """
        The uploaded file for a field, never None.

        Args:
            name: Form field name.
            options: Size/extension limits to attach where the view has
                     none yet. Nothing is validated until validate().

        Returns:
            The first file uploaded under `name`, or a view whose
            exists() is False.
        """
        views = self._files.get(self._build_files).get(name)
        if views:
            view = views[0]
        else:
            view = UploadedFile(
                field_name=name,
                size_limit=self.config.upload_size_limit,
                allowed_extensions=self.config.upload_extensions,
            )
        return view.apply_options(options)

    # =========================================================================
    # REQUEST LINE AND TRANSPORT
    # =========================================================================

    def method(self) -> str:
        return (self.raw.method or "GET").upper()

    def url(self) -> str:
        """Path without the query string."""
        return self._target.path or "/"

    def original_url(self) -> str:
        """Target exactly as received, query string included."""
        return self.raw.url

    def secure(self) -> bool:
        """True when the connection itself is TLS-encrypted."""
        return bool(self.raw.connection and self.raw.connection.encrypted)

    def protocol(self) -> str:
        """
        "https" or "http".

        X-Forwarded-Proto is honored only when the socket peer is a
        trusted proxy.
        """
        if self._trusted():
            forwarded = _first(self.header("x-forwarded-proto"))
            if forwarded:
                return forwarded.lower()
        return "https" if self.secure() else "http"

    def ajax(self) -> bool:
        return (self.header("x-requested-with") or "").lower() == "xmlhttprequest"

    def pjax(self) -> bool:
        return bool(self.header("x-pjax"))

    def _remote_address(self) -> Optional[str]:
        return self.raw.connection.remote_address if self.raw.connection else None

    def _trusted(self) -> bool:
        return self._resolver.enabled and self._resolver.is_trusted(self._remote_address())

    # =========================================================================
    # HOST
    # =========================================================================

    def hostname(self) -> Optional[str]:
        """
        Host name without port.

        Order of sources:
            1. X-Forwarded-Host (trusted proxies only)
            2. the host of an absolute request target
            3. the Host header
        """
        if self._trusted():
            forwarded = _split_host(_first(self.header("x-forwarded-host")))
            if forwarded:
                return forwarded

        if self._target.netloc:
            return self._target.hostname

        return _split_host(self.header("host"))

    def subdomains(self) -> List[str]:
        return parse_subdomains(self.hostname(), self.config.subdomain_offset)

    # =========================================================================
    # CLIENT ADDRESS
    # =========================================================================

    def ips(self) -> List[str]:
        """Client address chain, client first (see forwarded.AddressResolver)."""
        return self._resolver.ips(self._remote_address(), self.header("x-forwarded-for"))

    def ip(self) -> Optional[str]:
        return self._resolver.ip(self._remote_address(), self.header("x-forwarded-for"))

    # =========================================================================
    # CONTENT NEGOTIATION
    # =========================================================================

    def is_(self, *types: str) -> bool:
        """
        Does the request Content-Type match one of `types`?

            Content-Type: text/html; charset=utf-8
            request.is_("html")             → True
            request.is_("json", "text/*")   → True
        """
        return type_matches(self.header("content-type"), types)

    is_type = is_

    def accepts(self, *types: str) -> Union[Optional[str], List[str]]:
        """
        Best of `types` according to the Accept header.

        Returns the winning type as passed in, or None when none is
        acceptable. Without an Accept header the first type wins.
        Called with no arguments, returns the accepted media types,
        most preferred first.
        """
        if not types:
            return preferred_media_types(self.header("accept"))
        return best_media_type(self.header("accept"), types)

    def accepts_encodings(self, *encodings: str) -> Union[Optional[str], List[str]]:
        if not encodings:
            return preferred_tokens(self.header("accept-encoding"))
        return best_token(self.header("accept-encoding"), encodings)

    def accepts_charsets(self, *charsets: str) -> Union[Optional[str], List[str]]:
        if not charsets:
            return preferred_tokens(self.header("accept-charset"))
        return best_token(self.header("accept-charset"), charsets)

    def accepts_languages(self, *languages: str) -> Union[Optional[str], List[str]]:
        if not languages:
            return preferred_tokens(self.header("accept-language"))
        return best_token(self.header("accept-language"), languages, prefix_match=True)

    # =========================================================================
    # FRESHNESS
    # =========================================================================

    def fresh(
        self,
        etag: Optional[str] = None,
        last_modified: Optional[LastModified] = None,
        status: Optional[int] = None,
    ) -> bool:
        """
        Is the client's cached copy still current?

        Args:
            etag: ETag of the response about to be sent.
            last_modified: Last-Modified of that response.
            status: Its status code; only 2xx and 304 can be fresh.
        """
        return is_fresh(self.method(), self._joined, etag, last_modified, status)

    def stale(
        self,
        etag: Optional[str] = None,
        last_modified: Optional[LastModified] = None,
        status: Optional[int] = None,
    ) -> bool:
        return not self.fresh(etag, last_modified, status)
