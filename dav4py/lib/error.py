#!/usr/bin/env python
import logging
import os
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from enum import Enum
from typing import List
from typing import Optional

from dav4py import __version__

## Environmental variables prepended with "PYTHON_DAV4PY" are used for debug purposes,
## environmental variables prepended with "DAV4PY_" are for connection parameters
debug_dump_communication = bool(os.environ.get("PYTHON_DAV4PY_COMMDUMP", False))
## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_DAV4PY_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("dav4py")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)

## don't dump more than 10 kB of request and response bodies into exceptions
MAX_EXCERPT_SIZE = 10 * 1024


def weirdness(*reasons):
    from dav4py.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = str(url)
        if reason:
            self.reason = reason
        super().__init__(self.reason)

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class RedirectError(DAVError):
    """
    Redirects couldn't be followed: the Location header was missing,
    there were too many of them, or the redirect would downgrade from
    https to http.  Never retried.
    """

    pass


class ProtocolError(DAVError):
    """
    The server response violated the WebDAV protocol, i.e. no 207 or
    no XML where a multistatus was expected, or a missing <multistatus>
    root element.
    """

    pass


class MalformedXMLError(ProtocolError):
    pass


class IncompleteXMLError(ProtocolError):
    """The XML document ended before all elements were closed"""

    pass


class AuthError(DAVError):
    """
    Authentication is not possible: the challenge lacks required
    parameters, or the credentials were rejected again.
    """

    pass


class HttpErrorKind(Enum):
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    GONE = 410
    PRECONDITION_FAILED = 412
    SERVICE_UNAVAILABLE = 503
    GENERIC = 0

    @classmethod
    def from_status(cls, status: int) -> "HttpErrorKind":
        try:
            return cls(status)
        except ValueError:
            return cls.GENERIC


def _is_plain_text(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    mimetype = content_type.split(";")[0].strip().lower()
    return (
        mimetype.startswith("text/")
        or mimetype == "application/xml"
        or mimetype.endswith("+xml")
    )


def _is_xml(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    mimetype = content_type.split(";")[0].strip().lower()
    return mimetype in ("application/xml", "text/xml")


def _excerpt(body: Optional[bytes]) -> Optional[str]:
    if not body:
        return None
    return body[:MAX_EXCERPT_SIZE].decode("utf-8", errors="replace")


class HttpError(DAVError):
    """
    The server sent a final non-2xx response (or a 207 on a verb where
    it signals partial failure).

    ``kind`` tells which of the well-known statuses it was, ``errors``
    holds the names of precondition/postcondition elements found in a
    DAV:error body, and the excerpts carry (up to 10 kB of) the textual
    request and response bodies for diagnostics.
    """

    ## default values for delay_until
    DELAY_UNTIL_DEFAULT = timedelta(minutes=15)
    DELAY_UNTIL_MIN = timedelta(minutes=1)
    DELAY_UNTIL_MAX = timedelta(hours=2)

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: int = 500,
        errors: Optional[List] = None,
        request_excerpt: Optional[str] = None,
        response_excerpt: Optional[str] = None,
        retry_after: Optional[datetime] = None,
    ) -> None:
        super().__init__(url, reason)
        self.status = status
        self.kind = HttpErrorKind.from_status(status)
        self.errors = errors or []
        self.request_excerpt = request_excerpt
        self.response_excerpt = response_excerpt
        self.retry_after = retry_after

    def __str__(self) -> str:
        return "%s at '%s', reason %s %s" % (
            self.__class__.__name__,
            self.url,
            self.status,
            self.reason,
        )

    def delay_until(self, start: Optional[datetime] = None) -> datetime:
        """
        Until when to wait before retrying, considering the server's
        Retry-After suggestion but restricted to between one minute
        and two hours from ``start``.
        """
        if start is None:
            start = datetime.now(timezone.utc)
        if self.retry_after is None:
            return start + self.DELAY_UNTIL_DEFAULT
        return min(
            max(self.retry_after, start + self.DELAY_UNTIL_MIN),
            start + self.DELAY_UNTIL_MAX,
        )

    @classmethod
    def from_response(cls, response) -> "HttpError":
        """
        Builds the error from a DAVResponse.  At most MAX_EXCERPT_SIZE
        bytes of the body are read, then the response is closed.
        """
        from dav4py.lib.headers import parse_http_date
        from dav4py.protocol.xml_parsers import parse_error_document

        request = response.request
        url = request.url if request is not None else None
        request_excerpt = None
        if request is not None:
            request_excerpt = "%s %s" % (request.method.value, request.url)
            if request.body and _is_plain_text(request.headers.get("Content-Type")):
                request_excerpt += "\n\n" + _excerpt(request.body)

        errors = []
        response_excerpt = None
        content_type = response.headers.get("Content-Type")
        ## only the start of the body is read, error pages may be large
        with response:
            body = response.peek(MAX_EXCERPT_SIZE)
        if _is_plain_text(content_type):
            response_excerpt = _excerpt(body)
        if body and _is_xml(content_type):
            errors = parse_error_document(body)

        retry_after = None
        if response.status == 503:
            ## Retry-After = HTTP-date / delta-seconds
            header = (response.headers.get("Retry-After") or "").strip()
            if header.isdigit():
                retry_after = datetime.now(timezone.utc) + timedelta(
                    seconds=int(header)
                )
            elif header:
                retry_after = parse_http_date(header)
                if retry_after is None:
                    log.warning(
                        "Received Retry-After which was neither HTTP-date nor delta-seconds: %s",
                        header,
                    )

        return cls(
            url=url,
            reason=response.reason,
            status=response.status,
            errors=errors,
            request_excerpt=request_excerpt,
            response_excerpt=response_excerpt,
            retry_after=retry_after,
        )
