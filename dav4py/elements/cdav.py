#!/usr/bin/env python
"""Elements in the CalDAV namespace (RFC 4791)"""
from datetime import date
from datetime import datetime
from datetime import timezone
from typing import Union

from .base import BaseElement
from dav4py.lib.namespace import ns


def _to_utc_date_string(ts: Union[date, datetime]) -> str:
    """Formats a time-range boundary as "date with UTC time" (RFC 4791 section 9.9)"""
    if isinstance(ts, datetime):
        ## naive timestamps are taken as local time
        return ts.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return ts.strftime("%Y%m%dT000000Z")


class Mkcalendar(BaseElement):
    tag = ns("C", "mkcalendar")


## reports
class CalendarQuery(BaseElement):
    tag = ns("C", "calendar-query")


class CalendarMultiGet(BaseElement):
    tag = ns("C", "calendar-multiget")


## calendar-query filters
class Filter(BaseElement):
    tag = ns("C", "filter")


class CompFilter(BaseElement):
    """comp-filter for the component type given as ``name``, like "VEVENT" """

    tag = ns("C", "comp-filter")


class TimeRange(BaseElement):
    tag = ns("C", "time-range")

    def __init__(
        self,
        start: Union[date, datetime, None] = None,
        end: Union[date, datetime, None] = None,
    ) -> None:
        super().__init__(
            start=_to_utc_date_string(start) if start is not None else None,
            end=_to_utc_date_string(end) if end is not None else None,
        )


## requested data, attributes content_type and version
class CalendarData(BaseElement):
    tag = ns("C", "calendar-data")


## calendar collection properties
class Calendar(BaseElement):
    tag = ns("C", "calendar")


class CalendarDescription(BaseElement):
    tag = ns("C", "calendar-description")


class SupportedCalendarComponentSet(BaseElement):
    tag = ns("C", "supported-calendar-component-set")


class Comp(BaseElement):
    """Component type given as ``name``, like "VTODO" """

    tag = ns("C", "comp")
