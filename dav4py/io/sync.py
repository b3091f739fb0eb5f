"""
Synchronous transport using the requests library.
"""

from typing import Optional

import requests

from dav4py.protocol.types import DAVRequest, DAVResponse

CHUNK_SIZE = 8192


class SyncIO:
    """
    Synchronous I/O shell using the requests library.

    This is a thin wrapper that sends DAVRequest objects via HTTP and
    returns DAVResponse objects.  Redirects are never followed here, and
    response bodies are streamed.

    Example:
        io = SyncIO()
        response = io.send(DAVRequest(DAVMethod.GET, "https://dav.example.com/"))
        with response:
            print(response.content)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        verify: bool | str = True,
        cert: Optional[str | tuple[str, str]] = None,
        proxy: Optional[str] = None,
    ):
        """
        Initialize the sync I/O handler.

        Args:
            session: Existing requests Session to use (creates new if None)
            timeout: Request timeout in seconds
            verify: Verify SSL certificates, or path to a CA bundle
            cert: Client side certificate
            proxy: Proxy URL for both http and https
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout
        self.verify = verify
        self.cert = cert
        self.proxies = None
        if proxy is not None:
            if "://" not in proxy:
                proxy = "http://" + proxy
            self.proxies = {"http": proxy, "https": proxy}

    def send(self, request: DAVRequest) -> DAVResponse:
        """
        Send a DAVRequest and return DAVResponse.

        Args:
            request: The request to send

        Returns:
            DAVResponse with status, headers, and streamed body
        """
        response = self.session.request(
            method=request.method.value,
            url=request.url,
            headers=dict(request.headers),
            data=request.body,
            timeout=self.timeout,
            verify=self.verify,
            cert=self.cert,
            proxies=self.proxies,
            allow_redirects=False,
            stream=True,
        )

        return DAVResponse(
            status=response.status_code,
            headers=response.headers,
            body=response.iter_content(CHUNK_SIZE),
            reason=response.reason,
            request=request,
            close=response.close,
        )

    def close(self) -> None:
        """Close the session if we created it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self) -> "SyncIO":
        """Context manager entry."""
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit."""
        self.close()
