"""
I'm trying to be consistent with the terminology in the RFCs:

A collection is a resource containing other resources (RFC 4918).
A calendar is a collection of calendar object resources (RFC 4791),
an address book is a collection of vCards (RFC 6352).

The collection classes add the REPORT requests which only make sense
on collections.  Like PROPFIND, they return a MultistatusResult unless
a callback is given, in which case every response is passed to the
callback as soon as it's parsed.
"""
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Optional
from typing import Union

from .davobject import DAVResource
from .davobject import hrefs_of
from .lib.url import URL
from .protocol.types import DAVMethod
from .protocol.types import MultistatusResult
from .protocol.types import PropertyName
from .protocol.xml_builders import build_addressbook_multiget_body
from .protocol.xml_builders import build_addressbook_query_body
from .protocol.xml_builders import build_calendar_multiget_body
from .protocol.xml_builders import build_calendar_query_body
from .protocol.xml_builders import build_mkcalendar_body
from .protocol.xml_builders import build_sync_collection_body
from .protocol.xml_parsers import ResponseCallback

log = logging.getLogger("dav4py")


class DAVCollection(DAVResource):
    def sync_collection(
        self,
        sync_token: Optional[str] = None,
        infinite: bool = False,
        limit: Optional[int] = None,
        properties: Iterable[PropertyName] = (),
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        """
        Sends a sync-collection REPORT (RFC 6578).

        Args:
            sync_token: Token of the last sync, None for the initial sync
            infinite: Report changes of members of child collections, too
            limit: Maximum number of responses the server should send
            properties: Names of the properties to retrieve of changed members
            callback: Called with (ResponseEntry, HrefRelation) per response

        Returns:
            MultistatusResult, with the new token in ``sync_token``
        """
        body = build_sync_collection_body(sync_token, infinite, limit, properties)
        return self.report(body, depth=0, callback=callback)


class DAVCalendar(DAVCollection):
    """A CalDAV calendar collection"""

    def mkcalendar(
        self,
        displayname: Optional[str] = None,
        description: Optional[str] = None,
        supported_components: Optional[Iterable[str]] = None,
    ):
        """Creates the calendar on the server (RFC 4791 section 5.3.1)"""
        body = build_mkcalendar_body(
            displayname,
            description,
            list(supported_components) if supported_components else None,
        )
        return self.mkcol(body, method=DAVMethod.MKCALENDAR)

    def calendar_query(
        self,
        component: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        properties: Iterable[PropertyName] = (),
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        """
        Sends a calendar-query REPORT (RFC 4791 section 7.8) for the
        components of a type (like "VEVENT"), optionally restricted to a
        time range.  Only the ETags are retrieved unless other
        properties are asked for.
        """
        body = build_calendar_query_body(component, start, end, properties or None)
        return self.report(body, depth=1, callback=callback)

    def calendar_multiget(
        self,
        urls: Iterable[Union[URL, str]],
        content_type: Optional[str] = None,
        version: Optional[str] = None,
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        """
        Sends a calendar-multiget REPORT (RFC 4791 section 7.9) to get
        ETag and calendar data of the given members.
        """
        body = build_calendar_multiget_body(hrefs_of(urls), content_type, version)
        return self.report(body, depth=0, callback=callback)


class DAVAddressBook(DAVCollection):
    """A CardDAV address book collection"""

    def addressbook_query(
        self,
        properties: Iterable[PropertyName] = (),
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        body = build_addressbook_query_body(properties or None)
        return self.report(body, depth=1, callback=callback)

    def addressbook_multiget(
        self,
        urls: Iterable[Union[URL, str]],
        content_type: Optional[str] = None,
        version: Optional[str] = None,
        callback: Optional[ResponseCallback] = None,
    ) -> MultistatusResult:
        """
        Sends an addressbook-multiget REPORT (RFC 6352 section 8.7).
        Servers may not support content_type "application/vcard+json"
        or version "4.0", check the result.
        """
        body = build_addressbook_multiget_body(hrefs_of(urls), content_type, version)
        return self.report(body, depth=0, callback=callback)
