"""
FastAPI Endpoints for the Parked Domain Tracker

Every request lands on a single catch-all route. The route only:
- Asks the dispatcher which disposition applies
- Delegates to the origin proxy, the log store or the page renderer
- Turns service errors into HTTP responses

Dispositions:
- PASS_THROUGH: relay to origin, no classification, no logging
- ADMIN_QUERY: JSON page of visitor rows
- ADMIN_DASHBOARD: static dashboard page
- LOG_AND_PARK: classify, log (best-effort), serve the parked page
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, Response
from fastapi.routing import APIRoute
from starlette.routing import Match
from starlette.types import Receive, Scope, Send

from app.api.dependencies import get_log_store, get_origin_proxy, get_routing_config
from app.api.schemas import ErrorResponse, VisitorLogsResponse
from app.core.exceptions import DatabaseError, OriginUnavailableError
from app.core.setting import settings
from app.services.classifier import classify_request
from app.services.dispatch import Disposition, RoutingConfig, decide_disposition
from app.services.log_store import LogQuery, VisitorLogStore
from app.services.origin_proxy import OriginProxy
from app.services.pages import admin_dashboard_page, parked_page

logger = logging.getLogger(__name__)


class AnyMethodRoute(APIRoute):
    """
    APIRoute that accepts every HTTP method, including extension methods
    such as PROPFIND. `methods` only lists the common ones.
    """

    def matches(self, scope: Scope) -> tuple[Match, Scope]:
        match, child_scope = super().matches(scope)
        if match is Match.PARTIAL:
            match = Match.FULL
        return match, child_scope

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


router = APIRouter(route_class=AnyMethodRoute)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

JSON_MEDIA_TYPE = "application/json"


async def query_visitor_logs(request: Request, store: VisitorLogStore) -> Response:
    """
    Serve a page of visitor logs as JSON.

    Query parameters:
        domain: Exact domain filter (optional)
        limit: Page size (default 100, invalid values fall back to the default)
        offset: Rows to skip (default 0)

    Returns:
        200 with {success, count, logs} or 500 with {success, error, message}
    """
    query = LogQuery.from_query_params(
        request.query_params,
        default_limit=settings.DEFAULT_LOG_LIMIT,
        max_limit=settings.MAX_LOG_LIMIT,
    )

    try:
        result = await store.read(query)
    except DatabaseError as e:
        logger.error(f"Failed to fetch visitor logs: {str(e)}", exc_info=True)
        body = ErrorResponse(error="Failed to fetch logs", message=str(e))
        return Response(
            content=body.model_dump_json(),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            media_type=JSON_MEDIA_TYPE,
        )

    body = VisitorLogsResponse(count=result.count, logs=result.rows)
    return Response(content=body.model_dump_json(indent=2), media_type=JSON_MEDIA_TYPE)


@router.api_route(
    "/{full_path:path}",
    methods=ALL_METHODS,
    include_in_schema=False,
)
async def handle_request(
    request: Request,
    store: VisitorLogStore = Depends(get_log_store),
    proxy: OriginProxy = Depends(get_origin_proxy),
    routing: RoutingConfig = Depends(get_routing_config),
) -> Response:
    """
    Entry point for every request on every hostname.

    Returns:
        Origin response, JSON log page, dashboard, or the parked page
    """
    hostname = request.url.hostname or ""
    disposition = decide_disposition(routing, hostname, request.url.path, request.method)

    if disposition is Disposition.PASS_THROUGH:
        try:
            return await proxy.forward(request)
        except OriginUnavailableError as e:
            logger.error(f"{str(e)}: {str(e.original_error)}")
            return PlainTextResponse(
                "Origin unavailable",
                status_code=status.HTTP_502_BAD_GATEWAY,
            )

    if disposition is Disposition.ADMIN_QUERY:
        return await query_visitor_logs(request, store)

    if disposition is Disposition.ADMIN_DASHBOARD:
        return admin_dashboard_page(routing.admin_logs_path)

    record = classify_request(request.method, str(request.url), request.headers.items())
    await store.write(record)

    return parked_page(
        domain=hostname,
        operator_name=settings.OPERATOR_NAME,
        contact_email=settings.CONTACT_EMAIL,
        max_age=settings.PARKED_PAGE_MAX_AGE,
    )
