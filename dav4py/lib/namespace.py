#!/usr/bin/env python
from typing import Dict
from typing import Optional

NS_WEBDAV = "DAV:"
NS_CALDAV = "urn:ietf:params:xml:ns:caldav"
NS_CARDDAV = "urn:ietf:params:xml:ns:carddav"
NS_CALENDARSERVER = "http://calendarserver.org/ns/"

nsmap: Dict[str, str] = {
    "D": NS_WEBDAV,
    "C": NS_CALDAV,
    "CR": NS_CARDDAV,
}


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name
