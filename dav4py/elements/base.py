#!/usr/bin/env python
"""
Building blocks for XML request bodies.

An element class only knows its tag.  Text and attributes are given
when an element is created, children are added with ``+``::

    dav.Propfind() + (dav.Prop() + dav.DisplayName())

Attribute names are given as keyword arguments, underscores become
dashes (``content_type="text/vcard"`` gives ``content-type="text/vcard"``),
and attributes set to None are left out.
"""
import sys
from collections.abc import Iterable
from typing import ClassVar
from typing import List
from typing import Optional
from typing import Union

from lxml import etree
from lxml.etree import _Element

from dav4py.lib.namespace import nsmap
from dav4py.lib.python_utilities import to_unicode

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self


class BaseElement:
    tag: ClassVar[Optional[str]] = None

    def __init__(self, value: Union[str, bytes, None] = None, **attributes) -> None:
        self.value: Optional[str] = to_unicode(value)
        self.attributes = {
            name.replace("_", "-"): str(attr)
            for name, attr in attributes.items()
            if attr is not None
        }
        self.children: List[BaseElement] = []

    def __add__(self, other: Union["BaseElement", Iterable["BaseElement"]]) -> Self:
        return self.append(other)

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self.tag)

    def append(self, element: Union["BaseElement", Iterable["BaseElement"]]) -> Self:
        if isinstance(element, BaseElement):
            self.children.append(element)
        else:
            self.children.extend(element)
        return self

    def xmlelement(self) -> _Element:
        """
        The lxml tree of this element.  Namespace prefixes are declared
        on the root element only.
        """
        root = etree.Element(self._checked_tag(), self.attributes, nsmap=nsmap)
        self._fill(root)
        return root

    def _checked_tag(self) -> str:
        if self.tag is None:
            raise ValueError("%s has no tag" % self.__class__.__name__)
        return self.tag

    def _fill(self, element: _Element) -> None:
        element.text = self.value
        for child in self.children:
            child._fill(
                etree.SubElement(element, child._checked_tag(), child.attributes)
            )

    def tostring(self, pretty_print: bool = False) -> bytes:
        """UTF-8 encoded document, with XML declaration"""
        return etree.tostring(
            self.xmlelement(),
            encoding="utf-8",
            xml_declaration=True,
            pretty_print=pretty_print,
        )

    def __str__(self) -> str:
        return self.tostring(pretty_print=True).decode("utf-8")


class PropertyElement(BaseElement):
    """
    Element with a tag given at runtime (in Clark notation), used for
    property names that don't have a class of their own.
    """

    def __init__(self, tag: str, value: Union[str, bytes, None] = None) -> None:
        super().__init__(value)
        self.tag = tag
