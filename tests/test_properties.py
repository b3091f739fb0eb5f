from datetime import datetime
from datetime import timezone

from lxml import etree

from dav4py.protocol.properties import AddressbookHomeSet
from dav4py.protocol.properties import CalendarDescription
from dav4py.protocol.properties import CalendarHomeSet
from dav4py.protocol.properties import CurrentUserPrincipal
from dav4py.protocol.properties import GetContentLength
from dav4py.protocol.properties import GetContentType
from dav4py.protocol.properties import GetCTag
from dav4py.protocol.properties import GetETag
from dav4py.protocol.properties import GetLastModified
from dav4py.protocol.properties import Owner
from dav4py.protocol.properties import ResourceType
from dav4py.protocol.properties import ScheduleTag
from dav4py.protocol.properties import SupportedCalendarComponentSet
from dav4py.protocol.registry import default_registry
from dav4py.protocol.registry import PropertyRegistry
from dav4py.protocol.types import PropertyName


def parse(xml):
    return default_registry().decode(etree.fromstring(xml))


class TestGetETag:
    def test_strong(self):
        etag = parse('<getetag xmlns="DAV:">"Correct strong ETag"</getetag>')
        assert etag == GetETag("Correct strong ETag", weak=False)

    def test_strong_without_quotes(self):
        etag = parse('<getetag xmlns="DAV:">Strong ETag without quotes</getetag>')
        assert etag == GetETag("Strong ETag without quotes", weak=False)

    def test_weak(self):
        etag = parse('<getetag xmlns="DAV:">W/"Correct weak ETag"</getetag>')
        assert etag == GetETag("Correct weak ETag", weak=True)

    def test_weak_empty(self):
        etag = parse('<getetag xmlns="DAV:">W/</getetag>')
        assert etag == GetETag("", weak=True)

    def test_weak_without_quotes(self):
        etag = parse('<getetag xmlns="DAV:">W/Weak ETag without quotes</getetag>')
        assert etag == GetETag("Weak ETag without quotes", weak=True)


class TestOwner:
    def test_plain_text(self):
        assert parse('<owner xmlns="DAV:">https://example.com</owner>').href is None

    def test_plain_text_and_href(self):
        owner = parse(
            '<owner xmlns="DAV:">Principal Name. <href>mailto:owner@example.com</href> (test)</owner>'
        )
        assert owner.href == "mailto:owner@example.com"

    def test_href(self):
        owner = parse('<owner xmlns="DAV:"><href>https://example.com</href></owner>')
        assert owner == Owner("https://example.com")


class TestProperties:
    def test_calendar_description(self):
        prop = parse(
            '<calendar-description xmlns="urn:ietf:params:xml:ns:caldav">My Calendar</calendar-description>'
        )
        assert prop == CalendarDescription("My Calendar")

    def test_resourcetype(self):
        prop = parse(
            '<resourcetype xmlns="DAV:" xmlns:CR="urn:ietf:params:xml:ns:carddav">'
            "<collection/><CR:addressbook/></resourcetype>"
        )
        assert prop.is_collection
        assert ResourceType.ADDRESSBOOK in prop.types
        assert ResourceType.CALENDAR not in prop.types

    def test_empty_resourcetype(self):
        prop = parse('<resourcetype xmlns="DAV:"/>')
        assert prop == ResourceType(frozenset())
        assert not prop.is_collection

    def test_content_type_and_length(self):
        assert parse(
            '<getcontenttype xmlns="DAV:"> text/calendar; charset=utf-8 </getcontenttype>'
        ) == GetContentType("text/calendar; charset=utf-8")
        assert parse(
            '<getcontentlength xmlns="DAV:">1234</getcontentlength>'
        ) == GetContentLength(1234)

    def test_invalid_content_length(self):
        assert parse('<getcontentlength xmlns="DAV:">lots</getcontentlength>') is None

    def test_last_modified(self):
        prop = parse(
            '<getlastmodified xmlns="DAV:">Sun, 06 Nov 1994 08:49:37 GMT</getlastmodified>'
        )
        assert prop.last_modified == datetime(1994, 11, 6, 8, 49, 37, tzinfo=timezone.utc)

    def test_current_user_principal(self):
        prop = parse(
            '<current-user-principal xmlns="DAV:"><href>/principals/alice/</href></current-user-principal>'
        )
        assert prop == CurrentUserPrincipal("/principals/alice/")
        prop = parse(
            '<current-user-principal xmlns="DAV:"><unauthenticated/></current-user-principal>'
        )
        assert prop.href is None

    def test_home_sets(self):
        prop = parse(
            '<calendar-home-set xmlns="urn:ietf:params:xml:ns:caldav" xmlns:d="DAV:">'
            "<d:href>/cal/alice/</d:href><d:href>/cal/shared/</d:href></calendar-home-set>"
        )
        assert prop == CalendarHomeSet(("/cal/alice/", "/cal/shared/"))
        prop = parse(
            '<addressbook-home-set xmlns="urn:ietf:params:xml:ns:carddav" xmlns:d="DAV:">'
            "<d:href>/card/alice/</d:href></addressbook-home-set>"
        )
        assert prop == AddressbookHomeSet(("/card/alice/",))

    def test_ctag(self):
        prop = parse('<getctag xmlns="http://calendarserver.org/ns/">42</getctag>')
        assert prop == GetCTag("42")

    def test_supported_calendar_component_set(self):
        prop = parse(
            '<supported-calendar-component-set xmlns="urn:ietf:params:xml:ns:caldav">'
            '<comp name="VEVENT"/><comp name="vtodo"/></supported-calendar-component-set>'
        )
        assert prop.components == {"VEVENT", "VTODO"}

    def test_schedule_tag(self):
        prop = parse(
            '<schedule-tag xmlns="urn:ietf:params:xml:ns:caldav">"tag-1"</schedule-tag>'
        )
        assert prop == ScheduleTag("tag-1")


class TestPropertyRegistry:
    def test_unknown_property(self):
        assert parse('<whatever xmlns="urn:example:x">1</whatever>') is None

    def test_default_registry(self):
        registry = default_registry()
        assert GetETag.name in registry
        assert PropertyName("urn:example:x", "whatever") not in registry
        assert len(registry) == 18

    def test_register(self):
        registry = PropertyRegistry()
        assert len(registry) == 0
        name = PropertyName("urn:example:x", "color")
        registry.register(name, lambda element: GetCTag(element.text))
        assert registry.decode(
            etree.fromstring('<color xmlns="urn:example:x">red</color>')
        ) == GetCTag("red")

    def test_register_property_as_decorator(self):
        registry = PropertyRegistry()

        @registry.register_property
        class Custom(GetCTag):
            name = PropertyName("urn:example:x", "custom")

        assert Custom.name in registry
        prop = registry.decode(etree.fromstring('<custom xmlns="urn:example:x">x</custom>'))
        assert isinstance(prop, Custom)
        assert prop.ctag == "x"
