"""
Origin Proxy

Forwards requests for active subdomains to their origin and relays the
response unchanged. Active subdomains bypass classification and logging
entirely.

Design Decisions:
- One shared httpx.AsyncClient per application instance (connection reuse)
- The original Host header is kept so name-based virtual hosts at the origin
  see the hostname the client asked for
- Hop-by-hop headers are dropped in both directions; content-length and
  content-encoding are left to the transport because httpx decodes bodies
"""

import logging
from typing import Optional

import httpx
from fastapi import Request
from starlette.responses import Response

from app.core.exceptions import OriginUnavailableError

logger = logging.getLogger(__name__)

HOP_BY_HOP_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
})

# Recomputed by the transport on each side
TRANSPORT_MANAGED_HEADERS = frozenset({"content-length", "content-encoding"})


class OriginProxy:
    """Relays pass-through requests to their origin."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        origin_overrides: Optional[dict[str, str]] = None,
        origin_scheme: str = "https"
    ):
        """
        Args:
            client: Shared async HTTP client
            origin_overrides: Hostname -> origin base URL
            origin_scheme: Scheme used for hostnames without an override
        """
        self.client = client
        self.origin_overrides = {
            host.lower(): base.rstrip("/") for host, base in (origin_overrides or {}).items()
        }
        self.origin_scheme = origin_scheme

    def origin_url_for(self, hostname: str, path: str, query: str = "") -> str:
        """Build the origin URL for a request path on an active subdomain."""
        hostname = hostname.lower()
        base = self.origin_overrides.get(hostname, f"{self.origin_scheme}://{hostname}")
        url = f"{base}{path}"
        if query:
            url = f"{url}?{query}"
        return url

    async def forward(self, request: Request) -> Response:
        """
        Forward a request to its origin and relay the response.

        Args:
            request: The inbound request

        Returns:
            The origin's status, body and end-to-end headers

        Raises:
            OriginUnavailableError: If the origin cannot be reached
        """
        hostname = request.url.hostname or ""
        url = self.origin_url_for(hostname, request.url.path, request.url.query)

        outbound_headers = [
            (name, value)
            for name, value in request.headers.items()
            if name.lower() not in HOP_BY_HOP_HEADERS
            and name.lower() not in TRANSPORT_MANAGED_HEADERS
        ]
        body = await request.body()

        try:
            upstream = await self.client.request(
                request.method,
                url,
                headers=outbound_headers,
                content=body or None,
            )
        except httpx.HTTPError as e:
            raise OriginUnavailableError(hostname, original_error=e) from e

        response = Response(content=upstream.content, status_code=upstream.status_code)
        for name, value in upstream.headers.multi_items():
            lowered = name.lower()
            if lowered in HOP_BY_HOP_HEADERS or lowered in TRANSPORT_MANAGED_HEADERS:
                continue
            response.headers.append(name, value)
        return response

    async def aclose(self) -> None:
        await self.client.aclose()
