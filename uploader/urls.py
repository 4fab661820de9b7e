from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote, urlparse, urlsplit, urlunsplit

DEFAULT_FTP_PORT = 21
FTP_PREFIXES = ("ftp", "sftp")

_USERINFO_RE = re.compile(r"(?<=//)[^/?#]*@")


class UrlKind(str, Enum):
    """Which probe a URL is resolved with."""
    FTP = "ftp"
    HTTP = "http"


@dataclass(frozen=True)
class FtpLocation:
    host: str
    port: int
    user: str
    password: str
    path: str


def classify_url(url: str) -> UrlKind:
    # Plain prefix test on the raw string; callers supply absolute URLs.
    if url.startswith(FTP_PREFIXES):
        return UrlKind.FTP
    return UrlKind.HTTP


def parse_ftp_url(url: str) -> FtpLocation:
    """
    Split an ftp:// (or sftp://) URL into connection parameters.

    Missing port defaults to 21; missing credentials come back as empty
    strings, which the FTP probe treats as an anonymous login.
    """
    parsed = urlparse(url)
    return FtpLocation(
        host=parsed.hostname or "",
        port=parsed.port or DEFAULT_FTP_PORT,
        user=unquote(parsed.username or ""),
        password=unquote(parsed.password or ""),
        path=parsed.path or "/",
    )


parse_url = parse_ftp_url


def redact_url(url: str) -> str:
    """Return ``url`` without its ``user:password@`` part, for logs and error messages."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return _USERINFO_RE.sub("", url, count=1)
    if "@" not in parts.netloc:
        return url
    return urlunsplit(parts._replace(netloc=parts.netloc.rpartition("@")[2]))
