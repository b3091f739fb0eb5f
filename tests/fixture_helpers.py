"""
Shared test helpers: a transport answering requests from a prepared
list of responses, so the client can be tested without a server.
"""

from typing import Any

from dav4py.davclient import DAVClient
from dav4py.protocol.types import DAVResponse

MULTISTATUS_HEADERS = {"Content-Type": 'application/xml; charset="utf-8"'}


class MockedTransport:
    """
    Answers each request with the next prepared response.  A prepared
    response may also be a callable taking the request.  All requests
    are recorded.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def send(self, request):
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(
                "unexpected request %s %s" % (request.method.value, request.url)
            )
        response = self.responses.pop(0)
        if callable(response):
            response = response(request)
        response.request = request
        return response

    def close(self) -> None:
        self.closed = True


def MockedResponse(status, body=b"", headers=None):
    return DAVResponse(status=status, headers=headers or {}, body=body)


def MockedMultistatus(body):
    return DAVResponse(status=207, headers=MULTISTATUS_HEADERS, body=body)


def Redirect(location, status=302):
    headers = {}
    if location is not None:
        headers["Location"] = location
    return DAVResponse(status=status, headers=headers)


def MockedDAVClient(*responses, url="https://example.com/dav/", **kwargs):
    """
    For unit testing - a DAVClient answering requests with the given
    responses, in order
    """
    return DAVClient(url=url, transport=MockedTransport(*responses), **kwargs)
