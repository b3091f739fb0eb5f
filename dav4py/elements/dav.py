#!/usr/bin/env python
"""Elements in the DAV: namespace (RFC 4918, RFC 5689, RFC 6578)"""
from .base import BaseElement
from dav4py.lib.namespace import ns


## request bodies
class Propfind(BaseElement):
    tag = ns("D", "propfind")


class PropertyUpdate(BaseElement):
    tag = ns("D", "propertyupdate")


class Mkcol(BaseElement):
    tag = ns("D", "mkcol")


class SyncCollection(BaseElement):
    tag = ns("D", "sync-collection")


## propfind and proppatch
class Prop(BaseElement):
    tag = ns("D", "prop")


class Allprop(BaseElement):
    tag = ns("D", "allprop")


class Set(BaseElement):
    tag = ns("D", "set")


class Remove(BaseElement):
    tag = ns("D", "remove")


class Href(BaseElement):
    tag = ns("D", "href")


## sync-collection
class SyncToken(BaseElement):
    tag = ns("D", "sync-token")


class SyncLevel(BaseElement):
    tag = ns("D", "sync-level")


class Limit(BaseElement):
    tag = ns("D", "limit")


class NResults(BaseElement):
    tag = ns("D", "nresults")


## properties set by extended MKCOL
class DisplayName(BaseElement):
    tag = ns("D", "displayname")


class ResourceType(BaseElement):
    tag = ns("D", "resourcetype")


class Collection(BaseElement):
    tag = ns("D", "collection")
