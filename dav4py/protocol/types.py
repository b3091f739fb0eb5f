"""
Core protocol types.

These represent HTTP requests and responses at the protocol level, and
the typed tree a multistatus document is parsed into.
"""

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Any, Callable, ClassVar

from requests.models import REDIRECT_STATI
from requests.structures import CaseInsensitiveDict

from dav4py.lib.python_utilities import to_wire
from dav4py.lib.url import URL, HrefRelation, classify_relation

log = logging.getLogger("dav4py")


class DAVMethod(Enum):
    """WebDAV/CalDAV/CardDAV HTTP methods."""

    GET = "GET"
    HEAD = "HEAD"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    PROPFIND = "PROPFIND"
    PROPPATCH = "PROPPATCH"
    REPORT = "REPORT"
    SEARCH = "SEARCH"
    MKCOL = "MKCOL"
    MKCALENDAR = "MKCALENDAR"
    MOVE = "MOVE"
    COPY = "COPY"


@dataclass(frozen=True)
class DAVRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.

    Attributes:
        method: HTTP method (GET, PUT, PROPFIND, etc.)
        url: Full URL for the request
        headers: HTTP headers (case-insensitive)
        body: Request body as bytes (optional)
    """

    method: DAVMethod
    url: str
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CaseInsensitiveDict):
            object.__setattr__(self, "headers", CaseInsensitiveDict(self.headers))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", to_wire(self.body))

    @property
    def is_https(self) -> bool:
        return URL.objectify(self.url).is_https

    def with_header(self, name: str, value: str) -> "DAVRequest":
        """Return new request with additional (or replaced) header."""
        new_headers = CaseInsensitiveDict(self.headers)
        new_headers[name] = value
        return DAVRequest(
            method=self.method,
            url=self.url,
            headers=new_headers,
            body=self.body,
        )

    def with_url(self, url: str) -> "DAVRequest":
        """Return new request for another URL, i.e. after a redirect."""
        return DAVRequest(
            method=self.method,
            url=str(url),
            headers=self.headers,
            body=self.body,
        )


class DAVResponse:
    """
    Represents an HTTP response received.

    The body is streamed: it's given either as bytes or as an iterable
    of byte chunks, and read at most once.  ``peek`` looks at the
    beginning without consuming it.  A response must be closed after
    use, which is done automatically when it's used as a context
    manager.

    Attributes:
        status: HTTP status code
        reason: HTTP reason phrase
        headers: HTTP headers (case-insensitive)
        request: The DAVRequest this is the response to
    """

    def __init__(
        self,
        status: int,
        headers: Any = None,
        body: bytes | str | Iterable[bytes] | None = None,
        reason: str | None = None,
        request: DAVRequest | None = None,
        close: Callable[[], None] | None = None,
    ) -> None:
        self.status = status
        self.headers = CaseInsensitiveDict(headers or {})
        if reason is None:
            try:
                reason = HTTPStatus(status).phrase
            except ValueError:
                reason = "Unknown"
        self.reason = reason
        self.request = request
        if body is None:
            body = b""
        if isinstance(body, (bytes, str)):
            body = [to_wire(body)]
        self._chunks: Iterator[bytes] = iter(body)
        self._buffer = b""
        self._content: bytes | None = None
        self._close = close
        self.closed = False

    def __repr__(self) -> str:
        return "DAVResponse(%s %s)" % (self.status, self.reason)

    @property
    def ok(self) -> bool:
        """True if status indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def is_multistatus(self) -> bool:
        """True if this is a 207 Multi-Status response."""
        return self.status == 207

    @property
    def is_redirect(self) -> bool:
        return self.status in REDIRECT_STATI

    def peek(self, size: int) -> bytes:
        """Returns up to ``size`` bytes from the start of the body without consuming them."""
        if self._content is not None:
            return self._content[:size]
        while len(self._buffer) < size:
            try:
                chunk = next(self._chunks)
            except StopIteration:
                break
            self._buffer += chunk
        return self._buffer[:size]

    def iter_content(self) -> Iterator[bytes]:
        """Yields the body in chunks as they arrive from the transport."""
        if self._content is not None:
            yield self._content
            return
        if self._buffer:
            buffered, self._buffer = self._buffer, b""
            yield buffered
        for chunk in self._chunks:
            if chunk:
                yield chunk

    @property
    def content(self) -> bytes:
        """The complete body.  Reads the rest of the stream on first access."""
        if self._content is None:
            self._content = b"".join(self.iter_content())
        return self._content

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._close is not None:
            self._close()

    def __enter__(self) -> "DAVResponse":
        return self

    def __exit__(self, *args) -> None:
        self.close()


_STATUS_LINE = re.compile(r"^\s*(HTTP/\d+(?:\.\d+)?)\s+(\d{3})(?:\s+(.*?))?\s*$")


@dataclass(frozen=True)
class StatusLine:
    """
    A parsed HTTP status line, as found in <status> elements
    ("HTTP/1.1 404 Not Found").
    """

    protocol: str
    code: int
    message: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.code < 300

    def __str__(self) -> str:
        return ("%s %s %s" % (self.protocol, self.code, self.message)).strip()

    @classmethod
    def parse(cls, line: str) -> "StatusLine":
        """
        Parses a status line.  Unparsable lines don't abort parsing of the
        document, they're taken as "500 Invalid status line".
        """
        m = _STATUS_LINE.match(line or "")
        if not m:
            log.warning("Invalid status line: %r", line)
            return INVALID_STATUS
        return cls(m.group(1), int(m.group(2)), m.group(3) or "")


## used for <propstat> without <status>
ASSUMING_OK = StatusLine("HTTP/1.1", 200, "Assuming OK")
INVALID_STATUS = StatusLine("HTTP/1.1", 500, "Invalid status line")


@dataclass(frozen=True)
class PropertyName:
    """A namespaced XML element name like DAV:/getetag"""

    namespace: str
    name: str

    @property
    def tag(self) -> str:
        """Clark notation, as used by lxml: {DAV:}getetag"""
        return "{%s}%s" % (self.namespace, self.name)

    def __str__(self) -> str:
        return self.tag

    @classmethod
    def from_tag(cls, tag: str) -> "PropertyName":
        if tag.startswith("{"):
            namespace, name = tag[1:].split("}", 1)
            return cls(namespace, name)
        return cls("", tag)


class Property:
    """
    Base class of decoded WebDAV properties.  Subclasses set ``name``
    and are usually dataclasses, so that properties compare by value.
    """

    name: ClassVar[PropertyName]


@dataclass(frozen=True)
class PropStat:
    """
    A <propstat> element: properties sharing one status.

    Attributes:
        properties: Decoded properties, in document order
        status: Status of the properties (ASSUMING_OK if missing)
        errors: Names of the children of an <error> element
    """

    properties: list[Property]
    status: StatusLine = ASSUMING_OK
    errors: list[PropertyName] = field(default_factory=list)

    def is_success(self) -> bool:
        return self.status.is_success


@dataclass(frozen=True)
class ResponseEntry:
    """
    A <response> element of a multistatus document.

    Attributes:
        requested_url: The URL which was queried
        href: Resolved URL of the reported resource
        status: Status of the whole resource, if given
        propstat: All <propstat> elements, including failed ones
        errors: Names of the children of an <error> element
        new_location: Resolved <location> href, if given
    """

    requested_url: URL
    href: URL
    status: StatusLine | None = None
    propstat: list[PropStat] = field(default_factory=list)
    errors: list[PropertyName] = field(default_factory=list)
    new_location: URL | None = None

    def is_success(self) -> bool:
        return self.status is None or self.status.is_success

    @property
    def properties(self) -> list[Property]:
        """Properties from successful <propstat> elements only."""
        ret = []
        for propstat in self.propstat:
            if propstat.is_success():
                ret.extend(propstat.properties)
        return ret

    @property
    def relation(self) -> HrefRelation:
        return classify_relation(self.requested_url, self.href)

    def get(self, cls: type) -> Property | None:
        """Returns the last successful property of the given type."""
        ret = None
        for prop in self.properties:
            if isinstance(prop, cls):
                ret = prop
        return ret


@dataclass
class MultistatusResult:
    """
    A buffered multistatus document.

    Attributes:
        responses: (ResponseEntry, HrefRelation) pairs in document order
        properties: Properties outside of <response>, currently only sync-token
    """

    responses: list[tuple[ResponseEntry, HrefRelation]] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)

    @property
    def sync_token(self) -> str | None:
        for prop in self.properties:
            if prop.name.tag == "{DAV:}sync-token":
                return prop.token
        return None
