"""
Request Dispatch

Decides what to do with an inbound request from its hostname, path and method.
The decision is a pure function over an immutable RoutingConfig, so alternate
subdomain sets can be supplied without touching module state.

Evaluation order:
1. Active subdomain        -> PASS_THROUGH (no classification, no logging)
2. Admin logs path + read  -> ADMIN_QUERY
3. Admin dashboard path    -> ADMIN_DASHBOARD
4. Everything else         -> LOG_AND_PARK
"""

from dataclasses import dataclass
from enum import Enum

from app.core.setting import Settings


class Disposition(str, Enum):
    """How an inbound request is handled."""
    PASS_THROUGH = "pass_through"
    ADMIN_QUERY = "admin_query"
    ADMIN_DASHBOARD = "admin_dashboard"
    LOG_AND_PARK = "log_and_park"


@dataclass(frozen=True)
class RoutingConfig:
    active_subdomains: frozenset[str] = frozenset()
    admin_logs_path: str = "/admin/logs"
    admin_dashboard_paths: frozenset[str] = frozenset({"/admin", "/admin/"})
    read_methods: frozenset[str] = frozenset({"GET"})

    @classmethod
    def from_settings(cls, settings: Settings) -> "RoutingConfig":
        return cls(
            active_subdomains=frozenset(host.lower() for host in settings.ACTIVE_SUBDOMAINS),
            admin_logs_path=settings.ADMIN_LOGS_PATH,
        )


def decide_disposition(
    config: RoutingConfig,
    hostname: str,
    path: str,
    method: str
) -> Disposition:
    """
    Select the disposition for a request.

    Args:
        config: Routing configuration
        hostname: Request hostname (compared case-insensitively)
        path: Request path
        method: HTTP method

    Returns:
        Disposition for the request
    """
    if (hostname or "").lower() in config.active_subdomains:
        return Disposition.PASS_THROUGH

    if path == config.admin_logs_path and method.upper() in config.read_methods:
        return Disposition.ADMIN_QUERY

    if path in config.admin_dashboard_paths:
        return Disposition.ADMIN_DASHBOARD

    return Disposition.LOG_AND_PARK
