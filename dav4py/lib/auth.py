"""
Authentication utilities for DAV clients.

Parsing of ``WWW-Authenticate`` headers into challenges, see RFC 7235
section 4.1.  A single header may carry several challenges, and quoted
auth-param values may themselves contain commas, so the header is
tokenized instead of naively split.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from dataclasses import field

log = logging.getLogger("dav4py")

_TOKEN = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")
_UNQUOTED_VALUE = re.compile(r"[^,\s]*")


@dataclass(frozen=True)
class Challenge:
    """
    One authentication challenge.

    Attributes:
        scheme: Authentication scheme as sent by the server ("Basic", "digest", ...)
        params: Auth-params, with lower case names and unquoted values
    """

    scheme: str
    params: dict[str, str] = field(default_factory=dict, hash=False)

    def is_scheme(self, scheme: str) -> bool:
        return self.scheme.lower() == scheme.lower()

    def param(self, name: str) -> str | None:
        return self.params.get(name.lower())


def _skip(header: str, pos: int, chars: str) -> int:
    while pos < len(header) and header[pos] in chars:
        pos += 1
    return pos


def _read_quoted(header: str, pos: int) -> tuple[str, int]:
    """
    Reads a quoted-string starting at the opening quote at ``pos``.
    Returns the unescaped value and the position after the closing
    quote.  An unterminated string runs to the end of the header.
    """
    value = []
    pos += 1
    while pos < len(header):
        c = header[pos]
        if c == "\\" and pos + 1 < len(header):
            value.append(header[pos + 1])
            pos += 2
            continue
        if c == '"':
            return "".join(value), pos + 1
        value.append(c)
        pos += 1
    log.warning("Unterminated quoted-string in WWW-Authenticate header")
    return "".join(value), pos


def _parse_header(header: str) -> list[Challenge]:
    challenges: list[Challenge] = []
    current: Challenge | None = None
    pos = 0
    while True:
        pos = _skip(header, pos, " \t,")
        if pos >= len(header):
            break
        m = _TOKEN.match(header, pos)
        if not m:
            log.warning(
                "Couldn't parse WWW-Authenticate header %r at position %i", header, pos
            )
            break
        token = m.group()
        pos = _skip(header, m.end(), " \t")

        if pos < len(header) and header[pos] == "=" and current is not None:
            ## auth-param belonging to the current challenge
            pos = _skip(header, pos + 1, " \t")
            if pos < len(header) and header[pos] == '"':
                value, pos = _read_quoted(header, pos)
            else:
                m = _UNQUOTED_VALUE.match(header, pos)
                value = m.group()
                pos = m.end()
            current.params[token.lower()] = value
        elif pos < len(header) and header[pos] == "=":
            log.warning("Ignoring auth-param %s without preceding scheme", token)
            pos = _skip(header, pos + 1, " \t")
            if pos < len(header) and header[pos] == '"':
                pos = _read_quoted(header, pos)[1]
            else:
                pos = _UNQUOTED_VALUE.match(header, pos).end()
        else:
            current = Challenge(token, {})
            challenges.append(current)
    return challenges


def parse_challenges(*headers: str | None) -> list[Challenge]:
    """
    Parses one or more ``WWW-Authenticate`` header values.

    Example:
        >>> parse_challenges('Basic realm="a, b", Digest realm="x", nonce="1"')
        [Challenge(scheme='Basic', params={'realm': 'a, b'}),
         Challenge(scheme='Digest', params={'realm': 'x', 'nonce': '1'})]
    """
    ret = []
    for header in headers:
        if header:
            ret.extend(_parse_header(header))
    return ret
