import logging
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Callable
from typing import List
from typing import Optional
from typing import Set
from typing import Tuple
from typing import TYPE_CHECKING
from typing import Union

from dav4py.lib import error
from dav4py.lib.headers import as_quoted_string
from dav4py.lib.headers import list_header
from dav4py.lib.url import URL
from dav4py.protocol.types import DAVMethod
from dav4py.protocol.types import DAVResponse
from dav4py.protocol.types import MultistatusResult
from dav4py.protocol.types import PropertyName
from dav4py.protocol.xml_builders import build_propfind_body
from dav4py.protocol.xml_builders import build_proppatch_body
from dav4py.protocol.xml_parsers import parse_multistatus
from dav4py.protocol.xml_parsers import ResponseCallback

if TYPE_CHECKING:
    from dav4py.davclient import DAVClient

log = logging.getLogger("dav4py")

## maximum number of requests sent while following redirects
MAX_REDIRECTS = 5

XML_SIGNATURE = b"<?xml"


class DAVResource:
    """
    A remote resource, identified by its location.

    The methods of this class are the WebDAV verbs.  Requests are sent
    through the client (which signs them and handles 401), redirects are
    followed here.  ``location`` always is the URL the last request was
    actually answered from, so it changes when a redirect is followed or
    the resource is moved.

    Responses returned by get and get_range are open, the caller has to
    close them (i.e. by using them as context managers).  All other
    responses are consumed and closed before the methods return.
    """

    def __init__(self, client: "DAVClient", url: Union[URL, str]) -> None:
        self.client = client
        self.location = client.url.join(url) if client.url else URL.objectify(url)

    def __str__(self) -> str:
        return str(self.location)

    def __repr__(self) -> str:
        return "%s(%s)" % (self.__class__.__name__, self.location)

    @property
    def file_name(self) -> str:
        """The last segment of the path, decoded"""
        return self.location.omit_trailing_slash().path_segments[-1]

    def _follow_redirects(self, send: Callable[[], DAVResponse]) -> DAVResponse:
        """
        Sends the request built by ``send`` (which is called again for
        every hop) and follows redirects.  Redirects from https to http
        are refused.
        """
        for _ in range(MAX_REDIRECTS):
            response = send()
            if not response.is_redirect:
                return response
            with response:
                target = response.headers.get("Location")
                if not target:
                    raise error.RedirectError(
                        str(self.location), "Redirected without new Location"
                    )
                try:
                    target = self.location.resolve(target)
                except ValueError:
                    raise error.RedirectError(
                        str(self.location), "Invalid Location %r" % target
                    )
                if self.location.is_https and not target.is_https:
                    raise error.RedirectError(
                        str(self.location), "Received redirect from HTTPS to HTTP"
                    )
                log.debug("Redirected from %s to %s", self.location, target)
                self.location = target
        raise error.RedirectError(str(self.location), "Too many redirects")

    def _send(
        self,
        method: DAVMethod,
        body: Union[str, bytes, None] = None,
        headers: Optional[Mapping[str, str]] = None,
        trailing_slash: bool = False,
    ) -> DAVResponse:
        def send() -> DAVResponse:
            url = self.location
            if trailing_slash:
                url = url.with_trailing_slash()
            return self.client.execute(
                self.client.build_request(method, url, body, headers)
            )

        return self._follow_redirects(send)

    def check_status(
        self, response: DAVResponse, multistatus_is_error: bool = False
    ) -> None:
        """
        Raises HttpError (and closes the response) unless the status is
        2xx.  With ``multistatus_is_error``, 207 is taken as an error,
        too: MOVE, COPY and DELETE answer with 207 if they failed for
        some of the members.
        """
        if response.ok and not (multistatus_is_error and response.is_multistatus):
            return
        raise error.HttpError.from_response(response)

    def assert_multistatus(self, response: DAVResponse) -> None:
        """
        Makes sure the response is a 207 Multi-Status with an XML body.
        Raises ProtocolError (and closes the response) otherwise.
        """
        if response.status != 207:
            response.close()
            raise error.ProtocolError(
                str(self.location),
                "Expected 207 Multi-Status, got %s %s"
                % (response.status, response.reason),
            )

        content_type = response.headers.get("Content-Type")
        if content_type is None:
            error.weirdness(
                "Received 207 Multi-Status without Content-Type, assuming XML"
            )
            return
        mime_type = content_type.split(";")[0].strip().lower()
        if mime_type in ("application/xml", "text/xml"):
            return
        if response.peek(len(XML_SIGNATURE)) == XML_SIGNATURE:
            error.weirdness(
                "Received 207 Multi-Status with Content-Type %s, but body is XML"
                % content_type
            )
            return
        response.close()
        raise error.ProtocolError(
            str(self.location), "Received non-XML 207 Multi-Status"
        )

    def _consume(self, response: DAVResponse) -> DAVResponse:
        ## reads the body so it's still available after closing
        with response:
            response.content
        return response

    def _process_multistatus(
        self,
        response: DAVResponse,
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        result = MultistatusResult()
        if callback is None:
            callback = lambda entry, relation: result.responses.append(
                (entry, relation)
            )
        with response:
            self.check_status(response)
            self.assert_multistatus(response)
            result.properties = parse_multistatus(
                response.iter_content(),
                self.location,
                callback,
                registry=self.client.registry,
                huge_tree=self.client.huge_tree,
            )
        return result

    ## The verbs

    def options(self) -> Tuple[Set[str], DAVResponse]:
        """
        Sends OPTIONS.

        Returns:
            The capabilities from the DAV header (like "1", "2",
            "calendar-access") and the (closed) response
        """
        response = self._send(DAVMethod.OPTIONS)
        self.check_status(response)
        capabilities = set(list_header(response.headers.get("DAV")))
        return capabilities, self._consume(response)

    def get(
        self, accept: str = "*/*", headers: Optional[Mapping[str, str]] = None
    ) -> DAVResponse:
        """
        Sends GET.  The returned response has to be closed by the caller.
        """
        all_headers = {"Accept": accept}
        all_headers.update(headers or {})
        response = self._send(DAVMethod.GET, headers=all_headers)
        self.check_status(response)
        return response

    def get_range(
        self,
        offset: int,
        size: int,
        accept: str = "*/*",
        headers: Optional[Mapping[str, str]] = None,
    ) -> DAVResponse:
        """
        Sends a GET for ``size`` bytes beginning at ``offset``.  Servers
        which don't support ranges answer with 200 and the whole body
        instead of 206, so check the status.  The returned response has
        to be closed by the caller.
        """
        all_headers = {"Range": "bytes=%d-%d" % (offset, offset + size - 1)}
        all_headers.update(headers or {})
        return self.get(accept, all_headers)

    def head(self) -> DAVResponse:
        response = self._send(DAVMethod.HEAD)
        self.check_status(response)
        return self._consume(response)

    def put(
        self,
        body: Union[str, bytes],
        content_type: str,
        if_etag: Optional[str] = None,
        if_schedule_tag: Optional[str] = None,
        if_none_match: bool = False,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DAVResponse:
        """
        Sends PUT.

        Args:
            body: New content of the resource
            content_type: Its media type, like "text/calendar"
            if_etag: Only overwrite if the resource has this ETag
            if_schedule_tag: Only overwrite if it has this Schedule-Tag
            if_none_match: Only create, don't overwrite an existing resource
        """
        all_headers = _conditional_headers(if_etag, if_schedule_tag)
        all_headers["Content-Type"] = content_type
        if if_none_match:
            all_headers["If-None-Match"] = "*"
        all_headers.update(headers or {})
        response = self._send(DAVMethod.PUT, body, all_headers)
        self.check_status(response)
        return self._consume(response)

    def post(
        self,
        body: Union[str, bytes],
        content_type: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DAVResponse:
        all_headers = {"Content-Type": content_type}
        all_headers.update(headers or {})
        response = self._send(DAVMethod.POST, body, all_headers)
        self.check_status(response)
        return self._consume(response)

    def delete(
        self,
        if_etag: Optional[str] = None,
        if_schedule_tag: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DAVResponse:
        """
        Sends DELETE.  A 207 Multi-Status means that some members
        couldn't be deleted, and raises HttpError.
        """
        all_headers = _conditional_headers(if_etag, if_schedule_tag)
        all_headers.update(headers or {})
        response = self._send(DAVMethod.DELETE, headers=all_headers)
        self.check_status(response, multistatus_is_error=True)
        return self._consume(response)

    def mkcol(
        self,
        body: Union[str, bytes, None] = None,
        method: DAVMethod = DAVMethod.MKCOL,
    ) -> DAVResponse:
        """
        Creates a collection at the location (with trailing slash).

        Args:
            body: Extended MKCOL body, see build_mkcol_body, or an MKCALENDAR
                body, see build_mkcalendar_body
            method: MKCOL, or MKCALENDAR for calendars
        """
        response = self._send(method, body, trailing_slash=True)
        self.check_status(response)
        return self._consume(response)

    def _move_or_copy(
        self,
        method: DAVMethod,
        destination: Union[URL, str],
        force_overwrite: bool,
    ) -> DAVResponse:
        destination = self.location.resolve(destination)
        all_headers = {"Destination": str(destination)}
        if not force_overwrite:
            all_headers["Overwrite"] = "F"
        response = self._send(method, headers=all_headers)
        self.check_status(response, multistatus_is_error=True)
        return self._consume(response)

    def move(
        self, destination: Union[URL, str], force_overwrite: bool = False
    ) -> DAVResponse:
        """
        Moves the resource.  Unless ``force_overwrite`` is set, an
        existing resource at the destination is not overwritten.
        Afterwards, ``location`` is the new location.
        """
        response = self._move_or_copy(DAVMethod.MOVE, destination, force_overwrite)
        self.location = self.location.resolve(
            response.headers.get("Location") or destination
        )
        return response

    def copy(
        self, destination: Union[URL, str], force_overwrite: bool = False
    ) -> DAVResponse:
        return self._move_or_copy(DAVMethod.COPY, destination, force_overwrite)

    def propfind(
        self,
        depth: int,
        props: Iterable[PropertyName] = (),
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        """
        Sends PROPFIND.

        Args:
            depth: 0, 1, or -1 for infinity
            props: Names of the properties to retrieve
            callback: Called with (ResponseEntry, HrefRelation) for every
                response as it is parsed.  If not given, the responses
                are collected in the result.

        Returns:
            MultistatusResult
        """
        body = build_propfind_body(props)
        headers = {"Depth": "infinity" if depth < 0 else str(depth)}
        response = self._send(DAVMethod.PROPFIND, body, headers)
        return self._process_multistatus(response, callback)

    def proppatch(
        self,
        set_props: Optional[Mapping[PropertyName, Optional[str]]] = None,
        remove_props: Optional[Iterable[PropertyName]] = None,
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        body = build_proppatch_body(set_props, remove_props)
        response = self._send(DAVMethod.PROPPATCH, body)
        return self._process_multistatus(response, callback)

    def search(
        self,
        body: Union[str, bytes],
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        """Sends SEARCH (RFC 5323) with the given query"""
        response = self._send(DAVMethod.SEARCH, body)
        return self._process_multistatus(response, callback)

    def report(
        self,
        body: Union[str, bytes],
        depth: int = 0,
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        headers = {"Depth": "infinity" if depth < 0 else str(depth)}
        response = self._send(DAVMethod.REPORT, body, headers)
        return self._process_multistatus(response, callback)


def _conditional_headers(
    if_etag: Optional[str], if_schedule_tag: Optional[str]
) -> dict:
    headers = {}
    if if_etag is not None:
        headers["If-Match"] = as_quoted_string(if_etag)
    if if_schedule_tag is not None:
        headers["If-Schedule-Tag-Match"] = as_quoted_string(if_schedule_tag)
    return headers


def hrefs_of(urls: Iterable[Union[URL, str]]) -> List[str]:
    """Paths of the given URLs, as used in <href> of multiget reports"""
    ret = []
    for url in urls:
        url = URL.objectify(url)
        path = url.path
        if url.query:
            path += "?" + url.query
        ret.append(path)
    return ret
