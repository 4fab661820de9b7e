"""
Exception classes raised by the uploader support library.

Metadata resolution raises ProtocolError, HttpStatusError or
BlockedAddressError. Token decryption raises FormatError or CryptoError.
Nothing here is retried internally; callers decide what to do with a failure.
URLs stored on these errors have their credentials stripped.
"""
from __future__ import annotations

from typing import Optional

from .urls import redact_url


class UploaderError(Exception):
    """Base exception for all uploader errors"""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ProtocolError(UploaderError):
    """Raised when a connection or protocol command fails"""

    def __init__(self, url: str, message: Optional[str] = None):
        url = redact_url(url)
        super().__init__(message or f"Failed to probe {url}", {"url": url})
        self.url = url


class HttpStatusError(UploaderError):
    """Raised when the server answers a HEAD probe with a status >= 300"""

    def __init__(self, url: str, status_code: int):
        url = redact_url(url)
        super().__init__(
            f"URL server responded with status: {status_code}",
            {"url": url, "status_code": status_code},
        )
        self.url = url
        self.status_code = status_code


class BlockedAddressError(UploaderError):
    """Raised when a connect or redirect target is a local/private address"""

    def __init__(self, host: str, address: Optional[str] = None, message: Optional[str] = None):
        if message is None:
            target = f"{host} ({address})" if address and address != host else host
            message = f"Blocked request to local/private address: {target}"
        super().__init__(message, {"host": host, "address": address})
        self.host = host
        self.address = address


class FormatError(UploaderError):
    """Raised when an encrypted token is structurally invalid"""


class CryptoError(UploaderError):
    """Raised when a token cannot be decrypted (wrong secret or corrupted data)"""
