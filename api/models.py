"""Pydantic models for API requests and responses."""
from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

from uploader.config import ServerOptions


class UrlMetaRequest(BaseModel):
    """Request to resolve a remote URL's metadata."""
    url: str = Field(..., description="HTTP(S) or FTP URL to probe")


class UrlMetaResponse(BaseModel):
    """Content type and size of a remote resource."""
    type: str = ""
    size: Optional[int] = Field(None, description="Size in bytes, null when unknown")


class SettingsUpdate(BaseModel):
    """Update application settings."""
    block_local_ips: Optional[bool] = None
    server: Optional[ServerOptions] = None


class Settings(BaseModel):
    """Application settings."""
    block_local_ips: bool = True
    server: ServerOptions = Field(default_factory=lambda: ServerOptions(host="localhost:8000"))
