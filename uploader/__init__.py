"""Support library for the upload-handling service.

Exposes remote metadata resolution (HTTP HEAD / FTP SIZE), the URL-safe
token codec and a handful of small URL/string helpers.
"""
from .errors import (
    UploaderError,
    ProtocolError,
    HttpStatusError,
    BlockedAddressError,
    FormatError,
    CryptoError,
)
from .urls import UrlKind, FtpLocation, classify_url, parse_ftp_url, parse_url, redact_url
from .meta import ResourceMetadata, MetadataResolver, get_url_meta, lookup_content_type
from .policy import (
    RedirectPolicy,
    ConnectionProvisioner,
    ProtectedConnectionProvisioner,
    ProtectedTransport,
    get_redirect_evaluator,
    get_protected_transport,
)
from .crypto import encrypt, decrypt, create_secret
from .config import ServerOptions, ResolverSettings
from .utils import has_match, json_stringify, sanitize_html, get_url_builder

__all__ = [
    "UploaderError",
    "ProtocolError",
    "HttpStatusError",
    "BlockedAddressError",
    "FormatError",
    "CryptoError",
    "UrlKind",
    "FtpLocation",
    "classify_url",
    "parse_ftp_url",
    "parse_url",
    "redact_url",
    "ResourceMetadata",
    "MetadataResolver",
    "get_url_meta",
    "lookup_content_type",
    "RedirectPolicy",
    "ConnectionProvisioner",
    "ProtectedConnectionProvisioner",
    "ProtectedTransport",
    "get_redirect_evaluator",
    "get_protected_transport",
    "encrypt",
    "decrypt",
    "create_secret",
    "ServerOptions",
    "ResolverSettings",
    "has_match",
    "json_stringify",
    "sanitize_html",
    "get_url_builder",
]
