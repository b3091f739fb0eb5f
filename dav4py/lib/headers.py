"""
Helpers for the HTTP header grammar: quoted strings (RFC 7230 section
3.2.6), HTTP dates and comma separated list headers.
"""

from __future__ import annotations

import logging
from datetime import datetime
from datetime import timezone
from email.utils import parsedate_to_datetime

from requests.utils import parse_list_header

log = logging.getLogger("dav4py")


def as_quoted_string(raw: str) -> str:
    """Wraps a value in double quotes, escaping backslashes and quotes."""
    escaped = raw.replace("\\", "\\\\").replace('"', '\\"')
    return '"%s"' % escaped


def decode_quoted_string(quoted: str) -> str:
    """
    Unquotes a quoted-string.  Values which aren't enclosed in double
    quotes are returned as they are.
    """
    length = len(quoted)
    if length < 2 or quoted[0] != '"' or quoted[-1] != '"':
        return quoted
    result = []
    pos = 1
    while pos < length - 1:
        c = quoted[pos]
        ## a backslash right before the closing quote is taken literally
        if c == "\\" and pos != length - 2:
            pos += 1
            c = quoted[pos]
        result.append(c)
        pos += 1
    return "".join(result)


def parse_http_date(value: str | None) -> datetime | None:
    """
    Parses an HTTP date in any of the formats from RFC 7231 section
    7.1.1.1 (IMF-fixdate, RFC 850, asctime).  Returns None for
    anything unparsable.
    """
    if not value:
        return None
    try:
        ret = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError):
        log.warning("Couldn't parse HTTP date %r", value)
        return None
    if ret.tzinfo is None:
        ret = ret.replace(tzinfo=timezone.utc)
    return ret


def list_header(*values: str | None) -> list[str]:
    """
    Splits one or more comma separated header values into a flat list
    of stripped, non-empty items.
    """
    ret = []
    for value in values:
        if not value:
            continue
        for item in parse_list_header(value):
            item = item.strip()
            if item:
                ret.append(item)
    return ret
