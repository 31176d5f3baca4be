"""
FastAPI Endpoints for the Redirect & Attribution Service

This module defines the HTTP endpoints with minimal logic.
Endpoints only handle:
- Rate limiting
- Translating service results and exceptions into HTTP responses
- Delegating to the service layer

Routes:
- GET /tg: list active slugs (not in production)
- GET /tg/{slug}: redirect an ad click to Telegram
- GET /r/{code}: resolve an attribution code (consumes it)
- GET /r/{code}/status: inspect a code without consuming it
- GET /stats/{slug}: recent click summary (not in production)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from tg_redirect.api.dependencies import (
    get_redirect_service,
    get_resolve_service,
    get_settings,
    get_slug_registry,
    get_stats_service,
)
from tg_redirect.api.schemas import (
    CodeStatusResponse,
    ResolveResponse,
    SlugListResponse,
    SlugSummary,
    StatsResponse,
)
from tg_redirect.core.exceptions import (
    CodeFormatError,
    CodeNotFoundError,
    SlugNotFoundError,
    StorageError,
)
from tg_redirect.core.rate_limit import limiter, redirect_rate_limit, resolve_rate_limit
from tg_redirect.core.setting import Settings
from tg_redirect.core.utils import get_client_ip
from tg_redirect.services.redirect_service import RedirectService
from tg_redirect.services.resolve_service import ResolveService
from tg_redirect.services.shim import render_shim_page
from tg_redirect.services.slugs import SlugRegistry
from tg_redirect.services.stats_service import StatsService

logger = logging.getLogger(__name__)

router = APIRouter()

NO_CACHE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate"}


def _json(model, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.get(
    "/tg",
    response_model=SlugListResponse,
    summary="List redirect slugs",
    description="Lists active slugs. Disabled in production."
)
async def list_slugs(
    settings: Settings = Depends(get_settings),
    slugs: SlugRegistry = Depends(get_slug_registry),
):
    if settings.is_production:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    return SlugListResponse(
        slugs=[
            SlugSummary(
                slug=config.slug,
                type=config.type,
                mode=config.mode,
                destination=config.destination,
                description=config.description,
                url=f"/tg/{config.slug}",
            )
            for config in slugs.all_active()
        ]
    )


@router.get(
    "/tg/{slug}",
    summary="Redirect to Telegram",
    description="Redirects an ad click to Telegram, issuing an attribution code for bot destinations"
)
@limiter.limit(redirect_rate_limit)
async def redirect_to_telegram(
    slug: str,
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    service: RedirectService = Depends(get_redirect_service),
):
    """
    Handle an ad click.

    Returns:
        302 redirect, or the shim HTML page for slugs in shim mode

    Raises:
        HTTPException 404: If slug is unknown or inactive
        HTTPException 429: If rate limit exceeded
    """
    try:
        outcome = await service.handle_click(
            slug,
            dict(request.query_params),
            get_client_ip(request),
            request.headers.get("User-Agent"),
        )
    except SlugNotFoundError:
        logger.warning(f"Slug not found or inactive: {slug}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid or inactive redirect link"
        )

    headers = {"X-Request-ID": outcome.request_id}

    if not outcome.use_shim:
        return RedirectResponse(
            url=outcome.redirect_url,
            status_code=status.HTTP_302_FOUND,
            headers=headers,
        )

    config = outcome.slug_config
    html = render_shim_page(
        config.type,
        config.destination,
        start_param=outcome.start_param,
        title=config.description or "Opening Telegram...",
        fallback_delay=1000,
    )
    return HTMLResponse(content=html, headers={**headers, **NO_CACHE_HEADERS})


@router.get(
    "/r/{code}",
    response_model=ResolveResponse,
    summary="Resolve an attribution code",
    description="Returns the click attribution for a code and marks it resolved"
)
@limiter.limit(resolve_rate_limit)
async def resolve_code(
    code: str,
    request: Request,  # Required for rate limiting
    service: ResolveService = Depends(get_resolve_service),
):
    """
    Resolve a code for a Telegram bot.

    Returns:
        200 {success: true, data: attribution}

    Error responses:
        400: Malformed code
        404: Unknown, expired or forged code
        500: Storage failure
    """
    try:
        attribution = await service.resolve(code)
    except CodeFormatError:
        return _json(ResolveResponse(success=False, error="Invalid code format"), status.HTTP_400_BAD_REQUEST)
    except CodeNotFoundError:
        return _json(ResolveResponse(success=False, error="Code not found"), status.HTTP_404_NOT_FOUND)
    except StorageError:
        return _json(
            ResolveResponse(success=False, error="Internal server error"),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return _json(ResolveResponse(success=True, data=attribution))


@router.get(
    "/r/{code}/status",
    summary="Check an attribution code",
    description="Reports whether a code exists and has been resolved, without consuming it"
)
@limiter.limit(resolve_rate_limit)
async def code_status(
    code: str,
    request: Request,  # Required for rate limiting
    service: ResolveService = Depends(get_resolve_service),
):
    try:
        mapping = await service.status(code)
    except CodeFormatError:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"valid": False})
    except CodeNotFoundError:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"exists": False})
    except StorageError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"valid": False, "error": "Internal error"},
        )

    return _json(CodeStatusResponse.from_mapping(mapping))


@router.get(
    "/stats/{slug}",
    response_model=StatsResponse,
    summary="Get slug statistics",
    description="Summarizes recent clicks for a slug. Disabled in production."
)
async def get_slug_stats(
    slug: str,
    limit: int = Query(default=100, ge=1, le=1000),
    settings: Settings = Depends(get_settings),
    service: StatsService = Depends(get_stats_service),
):
    """
    Raises:
        HTTPException 404: If slug is unknown or the service runs in production
        HTTPException 500: If the click log cannot be read
    """
    if settings.is_production:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    try:
        stats = await service.get_stats(slug, limit)
    except Exception as e:
        logger.error(f"Failed to read click logs for {slug}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read click logs"
        )

    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Slug '{slug}' not found"
        )

    return StatsResponse(**stats)
