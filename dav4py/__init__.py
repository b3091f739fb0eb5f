#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .davclient import DAVClient
from .davclient import get_davclient
from .collection import DAVAddressBook
from .collection import DAVCalendar
from .collection import DAVCollection
from .davobject import DAVResource

# Silence notification of no default logging handler
log = logging.getLogger("dav4py")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "DAVClient",
    "get_davclient",
    "DAVResource",
    "DAVCollection",
    "DAVCalendar",
    "DAVAddressBook",
]
