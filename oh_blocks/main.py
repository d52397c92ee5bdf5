"""Main application entry point for the opening hours blocks service.

This module defines the FastAPI application, configures logging, keeps an
in-memory cache of rendered tables and serves the weekly hours block both
as HTML and as JSON.

Endpoints:
  - ``/blocks/oh_blocks_sample_a/{entity_type}/{entity_id}``: the block as an HTML page.
  - ``/api/blocks/oh_blocks_sample_a/{entity_type}/{entity_id}``: the block's table as JSON.
  - ``/healthz``: simple health check endpoint.

Both block endpoints accept an optional ``tz`` query parameter naming the
viewer's time zone. Rendered tables are cached per entity and time zone
for as long as their max-age allows.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from .block import BLOCK_ID, Clock, Translate, WeeklyHoursBlock
from .config import settings
from .i18n import Translator
from .models import PERMANENT, Entity, TableViewModel
from .provider import EntityNotFound, JsonOpeningHoursProvider, ProviderError
from .render import cache_headers, render_page

logger = logging.getLogger("oh_blocks")
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

app = FastAPI(title="Opening Hours Blocks")

# CORS is disabled by default because blocks are normally embedded from the
# same origin. Set OH_ENABLE_CORS=yes to expose the JSON API to other hosts.
if settings.enable_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

_provider = JsonOpeningHoursProvider(settings.data_file)
_translator = Translator.from_directory(settings.language, settings.translations_dir)

_cache_lock = threading.Lock()
_cache: Dict[Tuple[str, str, str, str], Tuple[datetime, TableViewModel]] = {}


def _utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def _cache_fresh(ts: Optional[datetime], max_age_seconds: int) -> bool:
    """Return True if the timestamp ``ts`` is within ``max_age_seconds`` of now."""
    if ts is None:
        return False
    if max_age_seconds == PERMANENT:
        return True
    return (_utcnow() - ts).total_seconds() < max_age_seconds


def clear_cache() -> None:
    """Drop every cached table."""
    with _cache_lock:
        _cache.clear()


def get_provider() -> JsonOpeningHoursProvider:
    return _provider


def get_translator() -> Translate:
    return _translator


def get_clock() -> Clock:
    return _utcnow


def _resolve_timezone(tz: Optional[str]) -> Tuple[str, ZoneInfo]:
    name = tz or settings.timezone
    try:
        return name, ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise HTTPException(status_code=400, detail=f"Unknown time zone: {name}")


def _load_entity(provider: JsonOpeningHoursProvider, entity_type: str, entity_id: str) -> Entity:
    try:
        return provider.get_entity(entity_type, entity_id)
    except EntityNotFound:
        raise HTTPException(status_code=404, detail=f"Unknown entity {entity_type}:{entity_id}")
    except ProviderError as exc:
        logger.exception("Error loading entity %s:%s: %s", entity_type, entity_id, exc)
        raise HTTPException(status_code=502, detail=str(exc))


def _build_table(
    entity: Entity,
    tz: Optional[str],
    provider: JsonOpeningHoursProvider,
    translate: Translate,
    clock: Clock,
) -> TableViewModel:
    """Return the weekly table for ``entity``, from the cache when still fresh.

    The block varies by time zone only, so the cache key is the block,
    the entity and the resolved time zone name.
    """
    tz_name, zone = _resolve_timezone(tz)
    key = (BLOCK_ID, entity.entity_type, entity.id, tz_name)
    with _cache_lock:
        cached = _cache.get(key)
        if cached is not None and _cache_fresh(cached[0], cached[1].cache.max_age):
            return cached[1]

    block = WeeklyHoursBlock.create(settings, provider, clock=clock, translate=translate, tz=zone)
    block.set_context_value("entity", entity)
    try:
        table = block.build()
    except ProviderError as exc:
        logger.exception("Error building opening hours for %s:%s: %s", entity.entity_type, entity.id, exc)
        raise HTTPException(status_code=502, detail=str(exc))

    if table.cache.max_age != 0:
        with _cache_lock:
            _cache[key] = (_utcnow(), table)
    return table


@app.get(f"/blocks/{BLOCK_ID}/{{entity_type}}/{{entity_id}}", response_class=HTMLResponse)
def block_page(
    entity_type: str,
    entity_id: str,
    tz: Optional[str] = Query(default=None),
    provider: JsonOpeningHoursProvider = Depends(get_provider),
    translate: Translate = Depends(get_translator),
    clock: Clock = Depends(get_clock),
) -> HTMLResponse:
    """Serve the weekly opening hours of an entity as an HTML page."""
    entity = _load_entity(provider, entity_type, entity_id)
    table = _build_table(entity, tz, provider, translate, clock)
    return HTMLResponse(content=render_page(table, entity.label()), headers=cache_headers(table.cache))


@app.get(f"/api/blocks/{BLOCK_ID}/{{entity_type}}/{{entity_id}}")
def block_json(
    entity_type: str,
    entity_id: str,
    tz: Optional[str] = Query(default=None),
    provider: JsonOpeningHoursProvider = Depends(get_provider),
    translate: Translate = Depends(get_translator),
    clock: Clock = Depends(get_clock),
) -> JSONResponse:
    """Return the weekly opening hours table of an entity as JSON."""
    entity = _load_entity(provider, entity_type, entity_id)
    table = _build_table(entity, tz, provider, translate, clock)
    return JSONResponse(content=table.model_dump(mode="json"), headers=cache_headers(table.cache))


@app.get("/healthz")
def healthz() -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    return {"ok": True, "time": _utcnow().isoformat().replace("+00:00", "Z")}
