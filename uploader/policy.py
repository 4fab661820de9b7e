"""Redirect and connection policies that keep HEAD probes off local networks.

Both checks only apply when the caller asks for local addresses to be
blocked. The redirect policy vets each Location target before it is
followed; the protected transport vets (and pins) the address actually
connected to, so a hostname that re-resolves between the two checks still
cannot reach a loopback/private/link-local address.
"""
from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import httpx

from .errors import BlockedAddressError
from .urls import redact_url

logger = logging.getLogger(__name__)

ALLOWED_REDIRECT_SCHEMES = ("http", "https")


def is_blocked_address(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.strip("[]"))
    except ValueError:
        return True
    mapped = getattr(ip, "ipv4_mapped", None)
    if mapped is not None:
        ip = mapped
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        return False


async def resolve_host(host: str, port: Optional[int] = None) -> List[str]:
    """Return the addresses ``host`` resolves to, in resolver order."""
    raw = host.strip("[]")
    if _is_ip_literal(raw):
        return [raw]
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(raw, port, type=socket.SOCK_STREAM)
    addresses: List[str] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        if sockaddr[0] not in addresses:
            addresses.append(sockaddr[0])
    return addresses


async def ensure_public_host(host: str, port: Optional[int] = None) -> List[str]:
    """
    Resolve ``host`` and raise BlockedAddressError if any address is local.

    Returns the vetted addresses so the caller can connect to one of them.
    """
    if host.lower() == "localhost" or host.lower().endswith(".localhost"):
        raise BlockedAddressError(host)
    addresses = await resolve_host(host, port)
    for address in addresses:
        if is_blocked_address(address):
            raise BlockedAddressError(host, address)
    return addresses


class RedirectPolicy(ABC):
    """Decides whether a HEAD probe may follow a redirect."""

    @abstractmethod
    async def should_follow(self, source: httpx.URL, target: httpx.URL) -> bool:
        """
        Return True to follow ``target``, False to stop and surface the
        redirect response as-is. Raise BlockedAddressError to refuse a
        target on a local network.
        """


class LocalAddressRedirectPolicy(RedirectPolicy):
    def __init__(self, url: str, block_local_ips: bool = False):
        self.url = url
        self.block_local_ips = block_local_ips

    async def should_follow(self, source: httpx.URL, target: httpx.URL) -> bool:
        if target.scheme not in ALLOWED_REDIRECT_SCHEMES:
            logger.info(f"not following redirect from {redact_url(self.url)} to non-http target {redact_url(str(target))}")
            return False
        if not self.block_local_ips:
            return True
        try:
            await ensure_public_host(target.host, target.port)
        except BlockedAddressError:
            logger.info(f"blocking redirect from {redact_url(self.url)} to {redact_url(str(target))}")
            raise
        except OSError as exc:
            # Unresolvable targets fail later at connect time.
            logger.debug(f"could not resolve redirect target {target.host}: {exc}")
        return True


def get_redirect_evaluator(url: str, block_local_ips: bool = False) -> RedirectPolicy:
    return LocalAddressRedirectPolicy(url, block_local_ips)


def _http2_available() -> bool:
    try:
        import h2  # type: ignore  # noqa: F401
        return True
    except ImportError:
        return False


class ProtectedTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that refuses to connect to local/private addresses.

    The hostname is resolved and vetted here, then the request is sent to
    the vetted IP with the original Host header and TLS server name kept,
    so the socket cannot land on a different address than the one checked.
    Pinned requests get one inner transport per hostname, so a pooled TLS
    connection verified for one name is never reused for another name that
    resolves to the same IP.
    """

    def __init__(
        self,
        block_local_ips: bool = False,
        transport_factory: Optional[Callable[[], httpx.AsyncBaseTransport]] = None,
    ):
        self.block_local_ips = block_local_ips
        self._transport_factory = transport_factory or httpx.AsyncHTTPTransport
        self._transport = self._transport_factory()
        self._pinned: Dict[str, httpx.AsyncBaseTransport] = {}

    def _transport_for(self, host: str) -> httpx.AsyncBaseTransport:
        key = host.lower()
        if key not in self._pinned:
            self._pinned[key] = self._transport_factory()
        return self._pinned[key]

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if not self.block_local_ips:
            return await self._transport.handle_async_request(request)

        host = request.url.host
        try:
            addresses = await ensure_public_host(host, request.url.port)
        except OSError as exc:
            raise httpx.ConnectError(f"Could not resolve {host}: {exc}", request=request) from exc
        if _is_ip_literal(host):
            return await self._transport.handle_async_request(request)

        if request.url.scheme == "https":
            request.extensions = {**request.extensions, "sni_hostname": host}
        pinned = addresses[0]
        if ":" in pinned:
            pinned = f"[{pinned}]"
        request.url = request.url.copy_with(host=pinned)
        return await self._transport_for(host).handle_async_request(request)

    async def aclose(self) -> None:
        await self._transport.aclose()
        for transport in self._pinned.values():
            await transport.aclose()
        self._pinned.clear()


class ConnectionProvisioner(ABC):
    """Supplies the transport each HEAD probe connects through."""

    @abstractmethod
    def get_transport(self, scheme: str, block_local_ips: bool) -> httpx.AsyncBaseTransport:
        ...


class ProtectedConnectionProvisioner(ConnectionProvisioner):
    def get_transport(self, scheme: str, block_local_ips: bool) -> httpx.AsyncBaseTransport:
        # Prefer HTTP/2 for TLS origins when 'h2' is installed.
        http2 = scheme == "https" and _http2_available()
        return ProtectedTransport(block_local_ips, lambda: httpx.AsyncHTTPTransport(http2=http2))


def get_protected_transport(scheme: str, block_local_ips: bool = False) -> httpx.AsyncBaseTransport:
    return ProtectedConnectionProvisioner().get_transport(scheme, block_local_ips)
