from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import mimetypes

import aioftp
import httpx

from .config import ResolverSettings
from .errors import HttpStatusError, ProtocolError
from .policy import (
    ConnectionProvisioner,
    ProtectedConnectionProvisioner,
    RedirectPolicy,
    get_redirect_evaluator,
)
from .urls import UrlKind, classify_url, parse_ftp_url, redact_url

logger = logging.getLogger(__name__)

FTP_ANONYMOUS_USER = "anonymous"
FTP_ANONYMOUS_PASSWORD = "anon@"
FTP_SIZE_OK = "213"


@dataclass(frozen=True)
class ResourceMetadata:
    content_type: str
    size: Optional[int]


def lookup_content_type(path: str) -> str:
    content_type, _encoding = mimetypes.guess_type(path, strict=False)
    return content_type or ""


def parse_content_length(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        size = int(value.strip())
    except (TypeError, ValueError):
        return None
    return size if size >= 0 else None


def parse_size_reply(reply: str) -> int:
    # Accepts "213 102400" as well as the bare " 102400" aioftp hands back.
    parts = reply.split()
    if not parts:
        raise ValueError("empty SIZE reply")
    return int(parts[-1])


class MetadataResolver:
    """
    Resolves the content type and size of a remote resource without
    downloading its body.

    ftp:// and sftp:// URLs get a single FTP ``SIZE`` command; everything
    else gets a single HTTP ``HEAD`` request (plus whatever redirects the
    redirect policy agrees to follow). No retries and no internal timeout:
    wrap ``resolve`` in ``asyncio.wait_for`` if you need a deadline.
    """

    def __init__(
        self,
        settings: Optional[ResolverSettings] = None,
        redirect_policy_factory: Callable[[str, bool], RedirectPolicy] = get_redirect_evaluator,
        provisioner: Optional[ConnectionProvisioner] = None,
        ftp_client_factory: Callable[[], aioftp.Client] = aioftp.Client,
    ) -> None:
        self.settings = settings or ResolverSettings()
        self._redirect_policy_factory = redirect_policy_factory
        self._provisioner = provisioner or ProtectedConnectionProvisioner()
        self._ftp_client_factory = ftp_client_factory

    async def resolve(self, url: str, block_local_ips: bool = False) -> ResourceMetadata:
        kind = classify_url(url)
        logger.debug(f"Resolving {kind.value} metadata for {redact_url(url)}")
        if kind is UrlKind.FTP:
            return await self._probe_ftp(url)
        return await self._probe_http(url, block_local_ips)

    async def _probe_ftp(self, url: str) -> ResourceMetadata:
        try:
            location = parse_ftp_url(url)
        except ValueError as exc:
            raise ProtocolError(url, f"Invalid FTP URL: {exc}") from exc

        client = self._ftp_client_factory()
        try:
            await client.connect(location.host, location.port)
            await client.login(
                location.user or FTP_ANONYMOUS_USER,
                location.password or FTP_ANONYMOUS_PASSWORD,
            )
            code, info = await client.command(f"SIZE {location.path}", FTP_SIZE_OK)
        except (aioftp.AIOFTPException, OSError, EOFError) as exc:
            raise ProtocolError(url, f"FTP SIZE failed for {location.host}:{location.port}: {exc}") from exc
        finally:
            client.close()

        reply = " ".join(info)
        logger.debug(f"FTP SIZE reply for {location.path}: {code} {reply.strip()}")
        try:
            size = parse_size_reply(reply)
        except ValueError as exc:
            raise ProtocolError(url, f"Malformed SIZE reply: {reply.strip()!r}") from exc

        return ResourceMetadata(content_type=lookup_content_type(location.path), size=size)

    async def _probe_http(self, url: str, block_local_ips: bool) -> ResourceMetadata:
        try:
            current = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise ProtocolError(url, f"Invalid URL: {exc}") from exc

        policy = self._redirect_policy_factory(url, block_local_ips)
        transport = self._provisioner.get_transport(current.scheme, block_local_ips)
        headers = {"User-Agent": self.settings.user_agent}
        redirects = 0

        async with httpx.AsyncClient(
            transport=transport,
            headers=headers,
            follow_redirects=False,
            timeout=None,
        ) as client:
            while True:
                try:
                    response = await client.head(current)
                except httpx.HTTPError as exc:
                    raise ProtocolError(url, f"HEAD {redact_url(str(current))} failed: {exc}") from exc
                logger.debug(f"HEAD status={response.status_code} url={redact_url(str(current))}")

                if not response.is_redirect or redirects >= self.settings.max_redirects:
                    break
                try:
                    target = current.join(response.headers["Location"])
                except httpx.InvalidURL:
                    break
                if not await policy.should_follow(current, target):
                    break
                redirects += 1
                current = target

        if response.status_code >= 300:
            raise HttpStatusError(url, response.status_code)

        return ResourceMetadata(
            content_type=response.headers.get("Content-Type", ""),
            size=parse_content_length(response.headers.get("Content-Length")),
        )


async def get_url_meta(url: str, block_local_ips: bool = False) -> ResourceMetadata:
    """Resolve ``url`` with a default-configured resolver."""
    return await MetadataResolver().resolve(url, block_local_ips)
