"""
Registry of property decoders.

The multistatus parser doesn't know any properties itself.  For every
element inside <prop> it asks the registry for a decoder registered
under the element name; elements without a decoder are skipped.  The
registry is populated explicitly by whoever builds it.
"""

import logging
from typing import Callable

from lxml.etree import _Element

from .properties import ALL_PROPERTIES
from .types import Property, PropertyName

log = logging.getLogger("dav4py")

Decoder = Callable[[_Element], Property | None]


class PropertyRegistry:
    def __init__(self) -> None:
        self._decoders: dict[PropertyName, Decoder] = {}

    def __contains__(self, name: PropertyName) -> bool:
        return name in self._decoders

    def __len__(self) -> int:
        return len(self._decoders)

    def register(self, name: PropertyName, decoder: Decoder) -> None:
        """Registers (or replaces) the decoder for a property name."""
        self._decoders[name] = decoder

    def register_property(self, cls: type) -> type:
        """
        Registers a Property class with a ``from_xml`` classmethod.  May
        be used as a class decorator.
        """
        self.register(cls.name, cls.from_xml)
        return cls

    def decode(self, element: _Element) -> Property | None:
        """
        Decodes a property element.  Returns None for unknown properties
        and for properties the decoder couldn't make sense of.
        """
        name = PropertyName.from_tag(element.tag)
        decoder = self._decoders.get(name)
        if decoder is None:
            log.debug("No decoder registered for %s, ignoring", name)
            return None
        try:
            return decoder(element)
        except (ValueError, TypeError):
            log.warning("Couldn't decode property %s", name, exc_info=True)
            return None


def default_registry() -> PropertyRegistry:
    """A registry knowing the properties from dav4py.protocol.properties"""
    registry = PropertyRegistry()
    for cls in ALL_PROPERTIES:
        registry.register_property(cls)
    return registry
