"""
Pure functions for building WebDAV, CalDAV and CardDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.  Property names are given as PropertyName
objects.
"""
from collections.abc import Iterable
from collections.abc import Mapping
from datetime import datetime
from typing import List
from typing import Optional

from .types import PropertyName
from dav4py.elements import carddav
from dav4py.elements import cdav
from dav4py.elements import dav
from dav4py.elements.base import BaseElement
from dav4py.elements.base import PropertyElement
from dav4py.lib.namespace import NS_WEBDAV

GETETAG = PropertyName(NS_WEBDAV, "getetag")


def _prop(props: Iterable[PropertyName]) -> BaseElement:
    return dav.Prop() + [PropertyElement(name.tag) for name in props]


def build_propfind_body(
    props: Optional[Iterable[PropertyName]] = None,
    allprop: bool = False,
) -> bytes:
    """
    Build PROPFIND request body XML.

    Args:
        props: Names of the properties to retrieve
        allprop: If True, request all properties

    Returns:
        UTF-8 encoded XML bytes
    """
    if allprop:
        propfind = dav.Propfind() + dav.Allprop()
    else:
        propfind = dav.Propfind() + _prop(props or [])
    return propfind.tostring()


def build_proppatch_body(
    set_props: Optional[Mapping[PropertyName, Optional[str]]] = None,
    remove_props: Optional[Iterable[PropertyName]] = None,
) -> bytes:
    """
    Build PROPPATCH request body.

    Args:
        set_props: Properties to set (name -> text value)
        remove_props: Properties to remove

    Returns:
        UTF-8 encoded XML bytes
    """
    propertyupdate = dav.PropertyUpdate()

    if set_props:
        prop = dav.Prop() + [
            PropertyElement(name.tag, value) for name, value in set_props.items()
        ]
        propertyupdate += dav.Set() + prop

    if remove_props:
        propertyupdate += dav.Remove() + _prop(remove_props)

    return propertyupdate.tostring()


def build_sync_collection_body(
    sync_token: Optional[str] = None,
    infinite: bool = False,
    limit: Optional[int] = None,
    props: Optional[Iterable[PropertyName]] = None,
) -> bytes:
    """
    Build sync-collection REPORT request body (RFC 6578).

    Args:
        sync_token: Previous sync token (None or empty for initial sync)
        infinite: Sync-level "infinite" instead of "1"
        limit: Maximum number of results (nresults)
        props: Property names to include in response

    Returns:
        UTF-8 encoded XML bytes
    """
    elements: List[BaseElement] = [
        dav.SyncToken(sync_token or ""),
        dav.SyncLevel("infinite" if infinite else "1"),
    ]
    if limit is not None:
        elements.append(dav.Limit() + dav.NResults(str(limit)))
    elements.append(_prop(props or []))

    return (dav.SyncCollection() + elements).tostring()


def build_calendar_query_body(
    component: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    props: Optional[Iterable[PropertyName]] = None,
) -> bytes:
    """
    Build calendar-query REPORT request body (RFC 4791 section 7.8).

    Args:
        component: Component type filter name (VEVENT, VTODO, VJOURNAL)
        start: Start of time range filter
        end: End of time range filter
        props: Property names to retrieve (default: getetag)

    Returns:
        UTF-8 encoded XML bytes
    """
    vcalendar = cdav.CompFilter(name="VCALENDAR")
    if component:
        comp_filter = cdav.CompFilter(name=component)
        if start or end:
            comp_filter += cdav.TimeRange(start, end)
        vcalendar += comp_filter
    elif start or end:
        vcalendar += cdav.TimeRange(start, end)

    root = cdav.CalendarQuery() + [
        _prop(props or [GETETAG]),
        cdav.Filter() + vcalendar,
    ]
    return root.tostring()


def build_calendar_multiget_body(
    hrefs: Iterable[str],
    content_type: Optional[str] = None,
    version: Optional[str] = None,
) -> bytes:
    """
    Build calendar-multiget REPORT request body (RFC 4791 section 7.9).

    Args:
        hrefs: URLs (paths) of the calendar objects to retrieve
        content_type: Requested media type of the calendar data
        version: Requested version of the media type

    Returns:
        UTF-8 encoded XML bytes
    """
    prop = _prop([GETETAG]) + cdav.CalendarData(
        content_type=content_type, version=version
    )
    multiget = cdav.CalendarMultiGet() + prop
    multiget += [dav.Href(href) for href in hrefs]
    return multiget.tostring()


def build_addressbook_query_body(
    props: Optional[Iterable[PropertyName]] = None,
) -> bytes:
    """
    Build addressbook-query REPORT request body (RFC 6352 section 8.6),
    without filter conditions.

    Args:
        props: Property names to retrieve (default: getetag)

    Returns:
        UTF-8 encoded XML bytes
    """
    root = carddav.AddressbookQuery() + [
        _prop(props or [GETETAG]),
        carddav.Filter(),
    ]
    return root.tostring()


def build_addressbook_multiget_body(
    hrefs: Iterable[str],
    content_type: Optional[str] = None,
    version: Optional[str] = None,
) -> bytes:
    """
    Build addressbook-multiget REPORT request body (RFC 6352 section 8.7).

    Args:
        hrefs: URLs (paths) of the vCards to retrieve
        content_type: Requested media type of the address data
        version: Requested vCard version, i.e. "4.0"

    Returns:
        UTF-8 encoded XML bytes
    """
    prop = _prop([GETETAG]) + carddav.AddressData(
        content_type=content_type, version=version
    )
    multiget = carddav.AddressbookMultiget() + prop
    multiget += [dav.Href(href) for href in hrefs]
    return multiget.tostring()


def build_mkcol_body(
    displayname: Optional[str] = None,
    resource_types: Optional[Iterable[PropertyName]] = None,
) -> bytes:
    """
    Build MKCOL (extended, RFC 5689) request body.

    Args:
        displayname: Collection display name
        resource_types: Resource types besides DAV:collection

    Returns:
        UTF-8 encoded XML bytes
    """
    prop = dav.Prop()

    if displayname:
        prop += dav.DisplayName(displayname)

    rt = dav.ResourceType() + dav.Collection()
    for name in resource_types or []:
        rt += PropertyElement(name.tag)
    prop += rt

    mkcol = dav.Mkcol() + (dav.Set() + prop)
    return mkcol.tostring()


def build_mkcalendar_body(
    displayname: Optional[str] = None,
    description: Optional[str] = None,
    supported_components: Optional[List[str]] = None,
) -> bytes:
    """
    Build MKCALENDAR request body (RFC 4791 section 5.3.1).

    Args:
        displayname: Calendar display name
        description: Calendar description
        supported_components: Component types like VEVENT or VTODO

    Returns:
        UTF-8 encoded XML bytes
    """
    prop = dav.Prop()

    if displayname:
        prop += dav.DisplayName(displayname)

    if description:
        prop += cdav.CalendarDescription(description)

    if supported_components:
        prop += cdav.SupportedCalendarComponentSet() + [
            cdav.Comp(name=comp) for comp in supported_components
        ]

    prop += dav.ResourceType() + [dav.Collection(), cdav.Calendar()]

    mkcalendar = cdav.Mkcalendar() + (dav.Set() + prop)
    return mkcalendar.tostring()
