"""
Basic and Digest authentication (RFC 7617, RFC 2617/7616).

The handler is used as a request-signing filter by the DAVClient: every
outgoing request is passed through ``sign``, and a 401 response is passed
to ``authenticate_request`` together with the request that caused it, to
get a request to retry with.  Challenges found to be working are cached,
so following requests are signed right away without being challenged
again.
"""

import base64
import hashlib
import logging
import threading
import uuid
from enum import Enum
from typing import Optional

from dav4py.lib.auth import Challenge
from dav4py.lib.auth import parse_challenges
from dav4py.lib.headers import as_quoted_string
from dav4py.lib.url import host_to_domain
from dav4py.lib.url import URL
from dav4py.protocol.types import DAVRequest
from dav4py.protocol.types import DAVResponse

log = logging.getLogger("dav4py")

HEADER_AUTHORIZATION = "Authorization"


def h(data) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()


def kd(secret: str, data: str) -> str:
    return h("%s:%s" % (secret, data))


def basic_credentials(username: str, password: str) -> str:
    ## RFC 2617 didn't define an encoding for credentials, RFC 7617 made it
    ## UTF-8.  UTF-8 works with all RFC 7617 servers and most older ones.
    token = base64.b64encode(("%s:%s" % (username, password)).encode("utf-8"))
    return "Basic " + token.decode("ascii")


class Algorithm(Enum):
    MD5 = "MD5"
    MD5_SESS = "MD5-sess"

    @classmethod
    def determine(cls, param: Optional[str]) -> Optional["Algorithm"]:
        if param is None or param.lower() == "md5":
            return cls.MD5
        if param.lower() == "md5-sess":
            return cls.MD5_SESS
        log.warning("Ignoring unknown hash algorithm: %s", param)
        return None


class Protection(Enum):
    """quality of protection"""

    AUTH = "auth"
    AUTH_INT = "auth-int"

    @classmethod
    def select_from(cls, param: Optional[str]) -> Optional["Protection"]:
        if param is None:
            return None
        offered = {x.strip().lower() for x in param.split(",")}
        ## auth-int provides more protection
        if "auth-int" in offered:
            return cls.AUTH_INT
        if "auth" in offered:
            return cls.AUTH
        return None


class NonceCounter:
    """
    Monotonically increasing nonce count ("nc") for Digest auth.  Safe to
    share between threads and between handlers.
    """

    def __init__(self, start: int = 1) -> None:
        self._value = start
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def next(self) -> int:
        with self._lock:
            value = self._value
            self._value += 1
            return value


class BasicDigestAuthHandler:
    """
    Authenticates requests with Basic or Digest auth, optionally only
    against hosts of one domain.

    Digest is always preferred over Basic if a server offers both (RFC
    2617 section 4.6).  On https, Basic credentials are sent without
    waiting for a challenge, unless a challenge has been cached already.

    Args:
        username, password: credentials
        domain: authenticate only against hosts of this domain, see
            dav4py.lib.url.host_to_domain
        insecure_preemptive: send Basic credentials preemptively over
            plain http, too
        client_nonce: cnonce to use, random if not given
        nonce_counter: shared NonceCounter, a new one if not given
    """

    def __init__(
        self,
        username: str,
        password: str,
        domain: Optional[str] = None,
        insecure_preemptive: bool = False,
        client_nonce: Optional[str] = None,
        nonce_counter: Optional[NonceCounter] = None,
    ) -> None:
        self.username = username
        self.password = password
        self.domain = domain
        self.insecure_preemptive = insecure_preemptive
        self.client_nonce = client_nonce or h(str(uuid.uuid4()))
        self.nonce_counter = nonce_counter or NonceCounter()

        ## cached authentication schemes
        self.basic_auth: Optional[Challenge] = None
        self.digest_auth: Optional[Challenge] = None

    def sign(self, request: DAVRequest) -> DAVRequest:
        """
        Adds an Authorization header if a scheme is known (or Basic may be
        tried preemptively).  Requests which already carry an
        Authorization header are left alone.
        """
        if HEADER_AUTHORIZATION in request.headers:
            return request
        return self.authenticate_request(request) or request

    def authenticate_request(
        self, request: DAVRequest, response: Optional[DAVResponse] = None
    ) -> Optional[DAVRequest]:
        """
        Returns the request with an Authorization header, or None if it
        can't be authenticated.

        With a 401 ``response``, the challenges of the response are
        evaluated first.  If the cached scheme is challenged again, the
        credentials didn't work, and None is returned (unless the server
        said that a Digest nonce was stale).
        """
        if self.domain is not None:
            host = URL.objectify(request.url).hostname
            if (host_to_domain(host) or "").lower() != self.domain.lower():
                log.warning(
                    "Not authenticating against %s because it doesn't belong to %s",
                    host,
                    self.domain,
                )
                return None

        if response is None:
            ## not processing a 401 response
            if (
                self.basic_auth is None
                and self.digest_auth is None
                and (request.is_https or self.insecure_preemptive)
            ):
                log.debug("Trying Basic auth preemptively")
                self.basic_auth = Challenge("Basic", {})

        else:
            new_basic_auth = None
            new_digest_auth = None
            for challenge in parse_challenges(response.headers.get("WWW-Authenticate")):
                if challenge.is_scheme("Basic"):
                    if self.basic_auth is not None:
                        log.warning("Basic credentials didn't work last time -> aborting")
                        self.basic_auth = None
                        return None
                    new_basic_auth = challenge
                elif challenge.is_scheme("Digest"):
                    if (
                        self.digest_auth is not None
                        and (challenge.param("stale") or "").lower() != "true"
                    ):
                        log.warning(
                            "Digest credentials didn't work last time and server nonce has not expired -> aborting"
                        )
                        self.digest_auth = None
                        return None
                    new_digest_auth = challenge
            self.basic_auth = new_basic_auth
            self.digest_auth = new_digest_auth

        if self.digest_auth is not None:
            log.debug("Adding Digest authorization request for %s", request.url)
            return self.digest_request(request, self.digest_auth)

        if self.basic_auth is not None:
            log.debug("Adding Basic authorization header for %s", request.url)
            return request.with_header(
                HEADER_AUTHORIZATION, basic_credentials(self.username, self.password)
            )

        if response is not None:
            log.warning("No supported authentication scheme")
        return None

    def digest_request(
        self, request: DAVRequest, digest: Optional[Challenge]
    ) -> Optional[DAVRequest]:
        """
        Signs a request for a Digest challenge.  Returns None if the
        challenge lacks realm or nonce, or the response can't be
        calculated.
        """
        if digest is None:
            return None

        realm = digest.param("realm")
        nonce = digest.param("nonce")
        opaque = digest.param("opaque")
        algorithm = Algorithm.determine(digest.param("algorithm"))
        qop = Protection.select_from(digest.param("qop"))

        params = ["username=%s" % as_quoted_string(self.username)]
        if realm is None:
            log.warning("No realm provided, aborting Digest auth")
            return None
        params.append("realm=%s" % as_quoted_string(realm))
        if nonce is None:
            log.warning("No nonce provided, aborting Digest auth")
            return None
        params.append("nonce=%s" % as_quoted_string(nonce))
        if opaque is not None:
            params.append("opaque=%s" % as_quoted_string(opaque))
        ## some servers require the algorithm
        if algorithm is not None:
            params.append("algorithm=%s" % as_quoted_string(algorithm.value))

        method = request.method.value
        url = URL.objectify(request.url)
        digest_uri = url.path or "/"
        if url.query:
            digest_uri += "?" + url.query
        params.append("uri=%s" % as_quoted_string(digest_uri))

        response = None
        if qop is not None:
            nc = "%08x" % self.nonce_counter.next()
            params.append("qop=%s" % qop.value)
            params.append("cnonce=%s" % as_quoted_string(self.client_nonce))
            params.append("nc=%s" % nc)

            a1 = None
            if algorithm == Algorithm.MD5:
                a1 = "%s:%s:%s" % (self.username, realm, self.password)
            elif algorithm == Algorithm.MD5_SESS:
                a1 = "%s:%s:%s" % (
                    h("%s:%s:%s" % (self.username, realm, self.password)),
                    nonce,
                    self.client_nonce,
                )

            a2 = None
            if qop == Protection.AUTH:
                a2 = "%s:%s" % (method, digest_uri)
            else:
                body = request.body if request.body is not None else b""
                if isinstance(body, bytes):
                    a2 = "%s:%s:%s" % (method, digest_uri, h(body))
                else:
                    log.warning("Couldn't get entity-body for hash calculation")

            if a1 is not None and a2 is not None:
                response = kd(
                    h(a1),
                    "%s:%s:%s:%s:%s" % (nonce, nc, self.client_nonce, qop.value, h(a2)),
                )

        elif algorithm == Algorithm.MD5:
            ## legacy (backwards compatibility with RFC 2069)
            log.debug("Using legacy Digest auth")
            a1 = "%s:%s:%s" % (self.username, realm, self.password)
            a2 = "%s:%s" % (method, digest_uri)
            response = kd(h(a1), "%s:%s" % (nonce, h(a2)))

        if response is None:
            return None
        params.append("response=%s" % as_quoted_string(response))
        return request.with_header(HEADER_AUTHORIZATION, "Digest " + ", ".join(params))
