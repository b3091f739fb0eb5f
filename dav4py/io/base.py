"""
Abstract I/O protocol definition.

This module defines the interface that transports must follow.
"""

from typing import Protocol, runtime_checkable

from dav4py.protocol.types import DAVRequest, DAVResponse


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Protocol defining the synchronous transport interface.

    Implementations send a DAVRequest and return the DAVResponse with a
    streamed body.  They must not follow redirects on their own, this is
    done by the caller.
    """

    def send(self, request: DAVRequest) -> DAVResponse:
        """
        Send a request and return the response.

        Args:
            request: The DAVRequest to send

        Returns:
            DAVResponse with status, headers, and a streamed body
        """
        ...

    def close(self) -> None:
        """Close any resources (e.g., HTTP session)."""
        ...
