"""
Decoders for commonly used WebDAV, CalDAV and CardDAV properties.

Each property class knows its name and how to build itself from the
complete lxml element of the property (``from_xml``).  They're made
available to the multistatus parser by registering them in a
PropertyRegistry, see ``dav4py.protocol.registry.default_registry``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from lxml.etree import _Element

from dav4py.lib.headers import decode_quoted_string, parse_http_date
from dav4py.lib.namespace import NS_CALDAV, NS_CALENDARSERVER, NS_CARDDAV, NS_WEBDAV

from .types import Property, PropertyName

HREF = "{%s}href" % NS_WEBDAV


def _text(element: _Element) -> str | None:
    """Text content of an element, None for an empty element."""
    text = "".join(element.itertext())
    return text or None


def _hrefs(element: _Element) -> tuple[str, ...]:
    return tuple(
        (href.text or "").strip() for href in element.iterchildren(HREF) if href.text
    )


@dataclass(frozen=True)
class ResourceType(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "resourcetype")

    COLLECTION: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "collection")
    PRINCIPAL: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "principal")
    CALENDAR: ClassVar[PropertyName] = PropertyName(NS_CALDAV, "calendar")
    ADDRESSBOOK: ClassVar[PropertyName] = PropertyName(NS_CARDDAV, "addressbook")

    types: frozenset = frozenset()

    @property
    def is_collection(self) -> bool:
        return self.COLLECTION in self.types

    @classmethod
    def from_xml(cls, element: _Element) -> "ResourceType":
        return cls(
            frozenset(
                PropertyName.from_tag(child.tag)
                for child in element
                if isinstance(child.tag, str)
            )
        )


@dataclass(frozen=True)
class DisplayName(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "displayname")

    displayname: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "DisplayName":
        return cls(_text(element))


@dataclass(frozen=True)
class GetETag(Property):
    """
    An ETag.  Weak ETags (W/"...") are flagged, and the quotes are
    removed.  Some servers send ETags without quotes, those are taken
    as they are.
    """

    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "getetag")

    etag: str | None = None
    weak: bool = False

    @classmethod
    def from_xml(cls, element: _Element) -> "GetETag":
        raw = (_text(element) or "").strip()
        weak = raw.startswith("W/")
        if weak:
            raw = raw[2:]
        return cls(decode_quoted_string(raw), weak)


@dataclass(frozen=True)
class GetContentType(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "getcontenttype")

    type: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "GetContentType":
        text = _text(element)
        return cls(text.strip() if text else None)


@dataclass(frozen=True)
class GetContentLength(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "getcontentlength")

    length: int | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "GetContentLength":
        text = _text(element)
        return cls(int(text.strip()) if text else None)


@dataclass(frozen=True)
class GetLastModified(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "getlastmodified")

    last_modified: datetime | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "GetLastModified":
        return cls(parse_http_date(_text(element)))


@dataclass(frozen=True)
class SyncToken(Property):
    """
    sync-token, RFC 6578.  Used both as a collection property and as
    the top-level element of a sync-collection response.
    """

    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "sync-token")

    token: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "SyncToken":
        text = _text(element)
        return cls(text.strip() if text else None)


@dataclass(frozen=True)
class CurrentUserPrincipal(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "current-user-principal")

    href: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "CurrentUserPrincipal":
        ## <unauthenticated/> gives no href
        hrefs = _hrefs(element)
        return cls(hrefs[0] if hrefs else None)


@dataclass(frozen=True)
class Owner(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_WEBDAV, "owner")

    href: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "Owner":
        hrefs = _hrefs(element)
        return cls(hrefs[0] if hrefs else None)


@dataclass(frozen=True)
class GetCTag(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CALENDARSERVER, "getctag")

    ctag: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "GetCTag":
        text = _text(element)
        return cls(text.strip() if text else None)


@dataclass(frozen=True)
class CalendarHomeSet(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CALDAV, "calendar-home-set")

    hrefs: tuple[str, ...] = ()

    @classmethod
    def from_xml(cls, element: _Element) -> "CalendarHomeSet":
        return cls(_hrefs(element))


@dataclass(frozen=True)
class AddressbookHomeSet(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CARDDAV, "addressbook-home-set")

    hrefs: tuple[str, ...] = ()

    @classmethod
    def from_xml(cls, element: _Element) -> "AddressbookHomeSet":
        return cls(_hrefs(element))


@dataclass(frozen=True)
class CalendarDescription(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CALDAV, "calendar-description")

    description: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "CalendarDescription":
        return cls(_text(element))


@dataclass(frozen=True)
class AddressbookDescription(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CARDDAV, "addressbook-description")

    description: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "AddressbookDescription":
        return cls(_text(element))


@dataclass(frozen=True)
class SupportedCalendarComponentSet(Property):
    name: ClassVar[PropertyName] = PropertyName(
        NS_CALDAV, "supported-calendar-component-set"
    )

    components: frozenset = frozenset()

    @classmethod
    def from_xml(cls, element: _Element) -> "SupportedCalendarComponentSet":
        return cls(
            frozenset(
                comp.get("name").upper()
                for comp in element.iterchildren("{%s}comp" % NS_CALDAV)
                if comp.get("name")
            )
        )


@dataclass(frozen=True)
class CalendarData(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CALDAV, "calendar-data")

    data: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "CalendarData":
        return cls(_text(element))


@dataclass(frozen=True)
class AddressData(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CARDDAV, "address-data")

    data: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "AddressData":
        return cls(_text(element))


@dataclass(frozen=True)
class ScheduleTag(Property):
    name: ClassVar[PropertyName] = PropertyName(NS_CALDAV, "schedule-tag")

    tag: str | None = None

    @classmethod
    def from_xml(cls, element: _Element) -> "ScheduleTag":
        text = _text(element)
        return cls(decode_quoted_string(text.strip()) if text else None)


ALL_PROPERTIES = (
    ResourceType,
    DisplayName,
    GetETag,
    GetContentType,
    GetContentLength,
    GetLastModified,
    SyncToken,
    CurrentUserPrincipal,
    Owner,
    GetCTag,
    CalendarHomeSet,
    AddressbookHomeSet,
    CalendarDescription,
    AddressbookDescription,
    SupportedCalendarComponentSet,
    CalendarData,
    AddressData,
    ScheduleTag,
)
