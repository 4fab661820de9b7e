"""FastAPI application exposing the uploader helpers."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from platformdirs import user_config_dir

from uploader import MetadataResolver, UploaderError, get_url_builder, redact_url
from .models import Settings, SettingsUpdate, UrlMetaRequest, UrlMetaResponse

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# Settings file path
_settings_file = Path(user_config_dir("uploader-companion")) / "settings.json"


def load_settings() -> Settings:
    """Load settings from file or return defaults."""
    if _settings_file.exists():
        try:
            with open(_settings_file, "r", encoding="utf-8") as f:
                return Settings(**json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable settings file {_settings_file}: {e}")
    return Settings()


def save_settings(settings: Settings) -> None:
    """Save settings to file using atomic write to prevent corruption."""
    _settings_file.parent.mkdir(parents=True, exist_ok=True)

    # Atomic write: write to temp file, then rename
    fd, tmp_path_str = tempfile.mkstemp(prefix=_settings_file.name, dir=str(_settings_file.parent))
    tmp_path = Path(tmp_path_str)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(settings.model_dump(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, _settings_file)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


_settings = load_settings()
resolver: MetadataResolver | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global resolver
    resolver = MetadataResolver()
    yield
    resolver = None


app = FastAPI(
    title="Uploader Companion API",
    version=VERSION,
    lifespan=lifespan
)


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    build_url = get_url_builder(_settings.server)
    return {"status": "ok", "version": VERSION, "url": build_url("/api/health", True)}


@app.post("/api/url/meta", response_model=UrlMetaResponse)
async def url_meta(request: UrlMetaRequest):
    """Resolve the content type and size of a remote URL."""
    if not resolver:
        raise HTTPException(500, "Resolver not initialized")
    if not request.url:
        raise HTTPException(400, "url parameter required")

    try:
        meta = await resolver.resolve(request.url, _settings.block_local_ips)
    except UploaderError as e:
        logger.error(f"Failed to fetch URL metadata for {redact_url(request.url)}: {e}")
        return JSONResponse(status_code=400, content={"message": "Failed to fetch URL metadata"})

    return UrlMetaResponse(type=meta.content_type, size=meta.size)


@app.get("/api/settings", response_model=Settings)
async def get_settings():
    """Get application settings."""
    return _settings


@app.patch("/api/settings", response_model=Settings)
async def update_settings(update: SettingsUpdate):
    """Update application settings."""
    global _settings

    if update.block_local_ips is not None:
        _settings.block_local_ips = update.block_local_ips
    if update.server is not None:
        _settings.server = update.server

    # Persist settings to file
    save_settings(_settings)

    return _settings
