"""
I/O layer for the DAV protocol.

The I/O layer is intentionally thin - it only handles HTTP transport.
All protocol logic (XML building/parsing, redirects, authentication) is
elsewhere.  Any object with ``send(request) -> DAVResponse`` and
``close()`` may be used as transport.
"""

from .base import TransportProtocol
from .sync import SyncIO

__all__ = [
    "TransportProtocol",
    "SyncIO",
]
