"""
WebDAV protocol layer.

This module provides protocol-level pieces without any I/O: request and
response types, the request body builders and the streaming multistatus
parser.

The protocol layer is organized into:
- types: Core data structures (DAVRequest, DAVResponse, ResponseEntry, ...)
- properties: Decoders for common WebDAV/CalDAV/CardDAV properties
- registry: PropertyRegistry mapping property names to decoders
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Streaming parser for multistatus response bodies

Example usage:

    from dav4py.protocol import build_propfind_body, collect_multistatus

    body = build_propfind_body([ResourceType.name, DisplayName.name])
    # ... send it with your preferred transport ...
    result = collect_multistatus(response.iter_content(), "https://dav.example.com/files/")
    for entry, relation in result.responses:
        print(entry.href, relation, entry.get(DisplayName))
"""

from .properties import (
    AddressbookDescription,
    AddressbookHomeSet,
    AddressData,
    CalendarData,
    CalendarDescription,
    CalendarHomeSet,
    CurrentUserPrincipal,
    DisplayName,
    GetContentLength,
    GetContentType,
    GetCTag,
    GetETag,
    GetLastModified,
    Owner,
    ResourceType,
    ScheduleTag,
    SupportedCalendarComponentSet,
    SyncToken,
)
from .registry import PropertyRegistry, default_registry
from .types import (
    DAVMethod,
    DAVRequest,
    DAVResponse,
    MultistatusResult,
    Property,
    PropertyName,
    PropStat,
    ResponseEntry,
    StatusLine,
)
from .xml_builders import (
    build_addressbook_multiget_body,
    build_addressbook_query_body,
    build_calendar_multiget_body,
    build_calendar_query_body,
    build_mkcalendar_body,
    build_mkcol_body,
    build_propfind_body,
    build_proppatch_body,
    build_sync_collection_body,
)
from .xml_parsers import collect_multistatus, parse_multistatus

__all__ = [
    # Types
    "DAVMethod",
    "DAVRequest",
    "DAVResponse",
    "MultistatusResult",
    "Property",
    "PropertyName",
    "PropStat",
    "ResponseEntry",
    "StatusLine",
    # Properties
    "AddressbookDescription",
    "AddressbookHomeSet",
    "AddressData",
    "CalendarData",
    "CalendarDescription",
    "CalendarHomeSet",
    "CurrentUserPrincipal",
    "DisplayName",
    "GetContentLength",
    "GetContentType",
    "GetCTag",
    "GetETag",
    "GetLastModified",
    "Owner",
    "ResourceType",
    "ScheduleTag",
    "SupportedCalendarComponentSet",
    "SyncToken",
    "PropertyRegistry",
    "default_registry",
    # Builders
    "build_addressbook_multiget_body",
    "build_addressbook_query_body",
    "build_calendar_multiget_body",
    "build_calendar_query_body",
    "build_mkcalendar_body",
    "build_mkcol_body",
    "build_propfind_body",
    "build_proppatch_body",
    "build_sync_collection_body",
    # Parsers
    "collect_multistatus",
    "parse_multistatus",
]
