"""Router API consumed by the dashboard.

Every handler gets its collaborators from the RouterContext dependency, which
tests replace through ``app.dependency_overrides``.
"""

import logging
from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, StreamingResponse

from ccs_router.core.context import RouterContext
from ccs_router.core.exceptions import (
    ConfigPersistenceError,
    MissingModelError,
    ProviderNotFoundError,
    ProviderUnavailableError,
    UnknownAdapterError,
    UpstreamError,
)
from ccs_router.core.provider.descriptor import ProviderDescriptor

logger = logging.getLogger(__name__)

router = APIRouter()


def get_router_context() -> RouterContext:
    from ccs_router.core.config import config

    return config.context


def _require_provider(ctx: RouterContext, name: str) -> ProviderDescriptor:
    try:
        return ctx.resolver.require(name)
    except ProviderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Liveness of the router service itself"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@router.get("/api/router/providers")
async def list_providers(ctx: RouterContext = Depends(get_router_context)) -> Dict[str, Any]:
    providers = ctx.resolver.get_all_providers()
    records = await ctx.health_monitor.check_all(providers)
    return {
        "providers": [
            {**descriptor.to_dict(), **record.to_dict()}
            for descriptor, record in zip(providers, records)
        ],
        "sources": ctx.resolver.list_providers().to_dict(),
    }


@router.get("/api/router/providers/{name}")
async def get_provider(name: str, ctx: RouterContext = Depends(get_router_context)) -> Dict[str, Any]:
    return _require_provider(ctx, name).to_dict()


@router.get("/api/router/providers/{name}/health")
async def get_provider_health(
    name: str, ctx: RouterContext = Depends(get_router_context)
) -> Dict[str, Any]:
    descriptor = _require_provider(ctx, name)
    record = await ctx.health_monitor.check(descriptor)
    return record.to_dict()


@router.post("/api/router/health/invalidate")
async def invalidate_health(
    provider: Optional[str] = Query(None),
    ctx: RouterContext = Depends(get_router_context),
) -> Dict[str, Any]:
    ctx.health_monitor.invalidate(provider)
    return {"invalidated": provider or "all"}


@router.get("/api/router/health/cache")
async def health_cache_stats(ctx: RouterContext = Depends(get_router_context)) -> Dict[str, Any]:
    return ctx.health_monitor.cache_stats()


@router.get("/api/router/profiles")
def list_profiles(ctx: RouterContext = Depends(get_router_context)) -> Dict[str, Any]:
    try:
        return {"profiles": ctx.config_editor.list_profiles()}
    except ConfigPersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.put("/api/router/profiles/{name}")
def save_profile(
    name: str,
    profile: Dict[str, Any] = Body(...),
    ctx: RouterContext = Depends(get_router_context),
) -> Dict[str, Any]:
    try:
        ctx.config_editor.save_profile(name, profile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ConfigPersistenceError as e:
        logger.error(f"Failed to save router profile '{name}': {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"saved": name}


@router.delete("/api/router/profiles/{name}")
def delete_profile(name: str, ctx: RouterContext = Depends(get_router_context)) -> Dict[str, Any]:
    try:
        deleted = ctx.config_editor.delete_profile(name)
    except ConfigPersistenceError as e:
        logger.error(f"Failed to delete router profile '{name}': {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Router profile not found: {name!r}")
    return {"deleted": name}


@router.patch("/api/router/defaults")
def update_defaults(
    defaults: Dict[str, Any] = Body(...),
    ctx: RouterContext = Depends(get_router_context),
) -> Dict[str, Any]:
    try:
        ctx.config_editor.update_defaults(defaults)
    except ConfigPersistenceError as e:
        logger.error(f"Failed to update router defaults: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"updated": sorted(defaults)}


@router.post("/api/router/providers/{name}/messages", response_model=None)
async def create_message(
    name: str,
    request: Dict[str, Any] = Body(...),
    model: Optional[str] = Query(None, description="Target model; defaults to the request model"),
    ctx: RouterContext = Depends(get_router_context),
) -> JSONResponse | StreamingResponse:
    try:
        if request.get("stream"):
            stream = ctx.client.stream_message(name, request, model)
            # Pull the first chunk so resolution/health/upstream errors map to a status code
            first_chunk = await anext(stream, None)
            return StreamingResponse(
                _sse_body(first_chunk, stream),
                media_type="text/event-stream",
                headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            )
        response = await ctx.client.send_message(name, request, model)
        return JSONResponse(status_code=200, content=response)
    except ProviderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ProviderUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except MissingModelError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UnknownAdapterError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except UpstreamError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e


async def _sse_body(first_chunk: Any, stream: AsyncGenerator[Any, None]) -> AsyncGenerator[str, None]:
    if first_chunk is None:
        return
    yield _sse_line(first_chunk)
    try:
        async for chunk in stream:
            yield _sse_line(chunk)
    except UpstreamError as e:
        logger.error(f"Stream interrupted: {e}")


def _sse_line(chunk: Any) -> str:
    line = str(chunk)
    # Event blocks end after their data line
    return f"{line}\n\n" if line.startswith("data:") else f"{line}\n"
