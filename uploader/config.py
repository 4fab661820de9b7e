"""Pydantic option models for the resolver and the URL builder."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ServerOptions(BaseModel):
    """Where this service is reachable from the outside world."""
    host: str = Field(..., description="Host (and optional port) of the service")
    protocol: str = Field("http", description="Scheme used in absolute URLs")
    path: str = Field("", description="Path prefix the service is mounted under")
    implicit_path: str = Field("", description="Extra prefix added by a proxy in front of the service")


class ResolverSettings(BaseModel):
    """Tunables for metadata resolution."""
    max_redirects: int = Field(10, ge=0, description="Redirects followed before the 3xx is surfaced")
    user_agent: str = Field("uploader-companion", description="User-Agent sent with HEAD probes")
