#!/usr/bin/env python
"""Elements in the CardDAV namespace (RFC 6352)"""
from .base import BaseElement
from dav4py.lib.namespace import ns


## reports
class AddressbookQuery(BaseElement):
    tag = ns("CR", "addressbook-query")


class AddressbookMultiget(BaseElement):
    tag = ns("CR", "addressbook-multiget")


## addressbook-query without filter conditions matches all vCards
class Filter(BaseElement):
    tag = ns("CR", "filter")


## requested data, attributes content_type and version
class AddressData(BaseElement):
    tag = ns("CR", "address-data")
