"""
FastAPI Dependencies

Services are built once at startup (see tg_redirect.main) and kept on
app.state. These functions hand them to endpoints through Depends(), so
tests can build an app around their own storage and slugs.
"""

from fastapi import Request

from tg_redirect.core.setting import Settings
from tg_redirect.services.redirect_service import RedirectService
from tg_redirect.services.resolve_service import ResolveService
from tg_redirect.services.slugs import SlugRegistry
from tg_redirect.services.stats_service import StatsService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_slug_registry(request: Request) -> SlugRegistry:
    return request.app.state.slugs


def get_redirect_service(request: Request) -> RedirectService:
    return request.app.state.redirect_service


def get_resolve_service(request: Request) -> ResolveService:
    return request.app.state.resolve_service


def get_stats_service(request: Request) -> StatsService:
    return request.app.state.stats_service
