"""
Streaming parser for WebDAV multistatus documents (RFC 4918 section 13).

The body is fed chunk by chunk into an lxml pull parser.  An XmlCursor
keeps track of the element depth, so that the recursive-descent
functions below only look at the children they know and skip anything
else, including whole subtrees in unknown namespaces.  Each <response>
is handed to a callback as soon as its end tag has been read and is then
discarded, so arbitrarily large collections can be processed.
"""

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from typing import Callable

from lxml import etree
from lxml.etree import _Element

from dav4py.lib import error
from dav4py.lib.namespace import ns
from dav4py.lib.url import URL, HrefRelation, classify_relation, resolve_href

from .properties import ResourceType, SyncToken
from .registry import PropertyRegistry, default_registry
from .types import (
    ASSUMING_OK,
    MultistatusResult,
    Property,
    PropertyName,
    PropStat,
    ResponseEntry,
    StatusLine,
)

log = logging.getLogger(__name__)

MULTISTATUS = ns("D", "multistatus")
RESPONSE = ns("D", "response")
HREF = ns("D", "href")
STATUS = ns("D", "status")
PROPSTAT = ns("D", "propstat")
PROP = ns("D", "prop")
ERROR = ns("D", "error")
LOCATION = ns("D", "location")
SYNC_TOKEN = ns("D", "sync-token")

ResponseCallback = Callable[[ResponseEntry, HrefRelation], None]


class XmlCursor:
    """
    Position in a streamed XML document.

    ``depth`` is the number of currently open elements: after the start
    tag of the root element it's 1, after its end tag it's 0 again.
    """

    def __init__(
        self,
        source: Iterable[bytes],
        url: str | None = None,
        huge_tree: bool = False,
    ) -> None:
        self.url = url
        self.depth = 0
        self._chunks = iter(source)
        self._parser = etree.XMLPullParser(
            events=("start", "end"),
            resolve_entities=False,
            no_network=True,
            remove_comments=True,
            remove_pis=True,
            huge_tree=huge_tree,
        )
        self._events: deque = deque()
        self._eof = False
        self._seen_data = False

    def _fill(self) -> bool:
        while not self._events:
            if self._eof:
                return False
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._eof = True
                self._close_parser()
            else:
                if not chunk:
                    continue
                if chunk.strip():
                    self._seen_data = True
                try:
                    self._parser.feed(chunk)
                except etree.XMLSyntaxError as e:
                    raise error.MalformedXMLError(self.url, str(e)) from e
            self._events.extend(self._parser.read_events())
        return True

    def _close_parser(self) -> None:
        try:
            self._parser.close()
        except etree.XMLSyntaxError as e:
            if self.depth > 0 and e.code != etree.ErrorTypes.ERR_TAG_NAME_MISMATCH:
                raise error.IncompleteXMLError(
                    self.url, "Document ended before all elements were closed"
                ) from e
            if self._seen_data:
                raise error.MalformedXMLError(self.url, str(e)) from e
            ## empty document, the caller will complain about the missing root

    def next_event(self) -> tuple[str, _Element] | None:
        """
        Returns the next ("start"|"end", element) event, or None at the
        end of the document.
        """
        if not self._fill():
            if self.depth > 0:
                raise error.IncompleteXMLError(
                    self.url, "Document ended before all elements were closed"
                )
            return None
        event, element = self._events.popleft()
        if event == "start":
            self.depth += 1
        else:
            self.depth -= 1
        return event, element

    def root(self) -> _Element | None:
        """Advances to the start of the root element."""
        while True:
            ev = self.next_event()
            if ev is None:
                return None
            if ev[0] == "start":
                return ev[1]

    def skip_to(self, depth: int) -> None:
        while self.depth > depth:
            self.next_event()

    def children(self) -> Iterator[_Element]:
        """
        Yields the direct children of the current element, each one at
        its start tag.  Whatever the caller doesn't consume of a child is
        skipped before the next one is looked for.  Returns after the end
        tag of the current element.
        """
        depth = self.depth
        while True:
            event, element = self.next_event()
            if self.depth < depth:
                return
            if event == "start" and self.depth == depth + 1:
                yield element
                self.skip_to(depth)

    def finish(self, element: _Element) -> _Element:
        """
        Reads to the end tag of the current element, which is returned
        complete with all its children and text.
        """
        self.skip_to(self.depth - 1)
        return element

    def read_text(self, element: _Element) -> str:
        return "".join(self.finish(element).itertext()).strip()

    def close(self) -> None:
        """Reads the rest of the document, so trailing garbage is detected."""
        while self.next_event() is not None:
            pass


def _discard(element: _Element) -> None:
    ## frees memory of processed elements
    element.clear()
    parent = element.getparent()
    if parent is not None:
        while element.getprevious() is not None:
            del parent[0]


def parse_error(cursor: XmlCursor) -> list[PropertyName]:
    """Names of the precondition/postcondition elements in <error>"""
    return [PropertyName.from_tag(child.tag) for child in cursor.children()]


def parse_prop(cursor: XmlCursor, registry: PropertyRegistry) -> list[Property]:
    properties = []
    for child in cursor.children():
        if PropertyName.from_tag(child.tag) not in registry:
            continue
        prop = registry.decode(cursor.finish(child))
        if prop is not None:
            properties.append(prop)
    return properties


def parse_propstat(cursor: XmlCursor, registry: PropertyRegistry) -> PropStat:
    properties: list[Property] = []
    status = None
    errors: list[PropertyName] = []
    for child in cursor.children():
        if child.tag == PROP:
            properties.extend(parse_prop(cursor, registry))
        elif child.tag == STATUS:
            status = StatusLine.parse(cursor.read_text(child))
        elif child.tag == ERROR:
            errors.extend(parse_error(cursor))
    return PropStat(properties, status or ASSUMING_OK, errors)


def _is_collection(prop: Property) -> bool:
    return prop.name == ResourceType.name and getattr(prop, "is_collection", False)


def parse_response(
    cursor: XmlCursor, location: URL, registry: PropertyRegistry
) -> ResponseEntry | None:
    """
    Parses a <response> element.  Returns None if it has no usable
    <href>.
    """
    href = None
    status = None
    propstat: list[PropStat] = []
    errors: list[PropertyName] = []
    new_location = None

    for child in cursor.children():
        if child.tag == HREF:
            text = cursor.read_text(child)
            if href is None:
                href = resolve_href(location, text)
        elif child.tag == STATUS:
            status = StatusLine.parse(cursor.read_text(child))
        elif child.tag == PROPSTAT:
            propstat.append(parse_propstat(cursor, registry))
        elif child.tag == ERROR:
            errors.extend(parse_error(cursor))
        elif child.tag == LOCATION:
            for grandchild in cursor.children():
                if grandchild.tag == HREF:
                    new_location = resolve_href(location, cursor.read_text(grandchild))

    if href is None:
        log.warning("Ignoring <response> without valid <href>")
        return None

    ## collections always get a trailing slash, but only
    ## resourcetypes from successful propstats are considered
    for ps in propstat:
        if ps.is_success() and any(_is_collection(p) for p in ps.properties):
            href = href.with_trailing_slash()

    return ResponseEntry(
        requested_url=location,
        href=href,
        status=status,
        propstat=propstat,
        errors=errors,
        new_location=new_location,
    )


def _parse_multistatus_children(
    cursor: XmlCursor,
    location: URL,
    callback: ResponseCallback,
    registry: PropertyRegistry,
) -> list[Property]:
    properties: list[Property] = []
    for child in cursor.children():
        if child.tag == RESPONSE:
            entry = parse_response(cursor, location, registry)
            if entry is not None:
                callback(entry, classify_relation(location, entry.href))
        elif child.tag == SYNC_TOKEN:
            properties.append(SyncToken(cursor.read_text(child)))
        else:
            cursor.finish(child)
        _discard(child)
    return properties


def parse_multistatus(
    source: Iterable[bytes] | bytes,
    location: URL | str,
    callback: ResponseCallback,
    registry: PropertyRegistry | None = None,
    huge_tree: bool = False,
) -> list[Property]:
    """
    Parses a multistatus document.

    Args:
        source: The body, as bytes or as an iterable of byte chunks
        location: The requested URL, base for resolving hrefs
        callback: Called with (ResponseEntry, HrefRelation) for every
            <response>, in document order
        registry: Property decoders (default_registry() if not given)
        huge_tree: Allow parsing very large XML documents

    Returns:
        Top-level properties outside of <response> (sync-token)

    Raises:
        MalformedXMLError: The body is not well-formed XML
        IncompleteXMLError: The body ended prematurely
        ProtocolError: There's no <multistatus> element
    """
    location = URL.objectify(location)
    if registry is None:
        registry = default_registry()
    if isinstance(source, bytes):
        source = [source]
    cursor = XmlCursor(source, url=str(location), huge_tree=huge_tree)

    properties: list[Property] = []
    found = False
    root = cursor.root()
    if root is not None and root.tag == MULTISTATUS:
        found = True
        properties = _parse_multistatus_children(cursor, location, callback, registry)
    elif root is not None and etree.QName(root).localname == "xml":
        ## some servers wrap the multistatus into a bogus <xml> element
        for child in cursor.children():
            if child.tag == MULTISTATUS and not found:
                found = True
                properties = _parse_multistatus_children(
                    cursor, location, callback, registry
                )
    cursor.close()

    if not found:
        raise error.ProtocolError(
            str(location), "Multi-Status response didn't contain <multistatus> element"
        )
    return properties


def collect_multistatus(
    source: Iterable[bytes] | bytes,
    location: URL | str,
    registry: PropertyRegistry | None = None,
    huge_tree: bool = False,
) -> MultistatusResult:
    """Parses a multistatus document into one MultistatusResult."""
    result = MultistatusResult()
    result.properties = parse_multistatus(
        source,
        location,
        lambda entry, relation: result.responses.append((entry, relation)),
        registry=registry,
        huge_tree=huge_tree,
    )
    return result


def parse_error_document(body: bytes) -> list[PropertyName]:
    """
    Names of the precondition/postcondition elements of a DAV:error
    body, like in a 403 or 409 response (RFC 4918 section 16).
    """
    cursor = XmlCursor([body])
    try:
        root = cursor.root()
        if root is None or root.tag != ERROR:
            return []
        return parse_error(cursor)
    except error.ProtocolError:
        log.warning("Couldn't parse XML error body", exc_info=True)
        return []
