"""
FastAPI dependencies for the shared per-application services.

The log store and origin proxy are created once at startup and kept on
app.state; tests override these dependencies to inject fakes.
"""

from fastapi import Request

from app.core.setting import settings
from app.services.dispatch import RoutingConfig
from app.services.log_store import VisitorLogStore
from app.services.origin_proxy import OriginProxy


def get_log_store(request: Request) -> VisitorLogStore:
    return request.app.state.log_store


def get_origin_proxy(request: Request) -> OriginProxy:
    return request.app.state.origin_proxy


def get_routing_config() -> RoutingConfig:
    return RoutingConfig.from_settings(settings)
