"""
Request Classifier

This module turns an inbound request into a VisitorRecord:
- Browser family/version, operating system and device class from the user agent
- Bot likelihood from the user agent
- Client IP, protocol and trace identifiers from edge headers
- Optional geolocation/TLS context supplied by the edge platform
- A verbatim capture of every header and query parameter

Design Decisions:
- Pure function: no I/O, no clock access unless `now` is omitted
- Ordered (predicate, result) rules evaluated first-match-wins; order matters
  because later markers also appear in earlier user agents
  (every Chrome UA also contains "Safari/")
- Missing signals leave fields unset; classification never raises
"""

import json
import re
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, ConfigDict, model_validator

MOBILE_PATTERN = re.compile(r"Mobile|Android|iPhone|iPad|iPod", re.IGNORECASE)
BOT_PATTERN = re.compile(r"bot|crawler|spider|scraper", re.IGNORECASE)

DEVICE_MOBILE = "Mobile"
DEVICE_DESKTOP = "Desktop"

CONNECTING_IP_HEADER = "cf-connecting-ip"
HTTP_PROTOCOL_HEADER = "cf-http-version"
TRACE_ID_HEADER = "cf-ray"

# Edge context field -> request header carrying it.
# asn and tls_version are attached by an edge transform rule.
EDGE_CONTEXT_HEADERS = {
    "country": "cf-ipcountry",
    "city": "cf-ipcity",
    "region": "cf-region",
    "timezone": "cf-timezone",
    "latitude": "cf-iplatitude",
    "longitude": "cf-iplongitude",
    "asn": "x-client-asn",
    "tls_version": "x-client-tls-version",
}


class EdgeContext(BaseModel):
    """Geolocation and TLS metadata supplied by the edge platform."""
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    timezone: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    asn: Optional[str] = None
    tls_version: Optional[str] = None


class VisitorRecord(BaseModel):
    """
    Immutable snapshot of one classified request.

    Field names match the columns of the `visitors` table.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: str
    domain: str
    path: str
    method: str
    ip: str
    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    timezone: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    asn: Optional[str] = None
    user_agent: str
    browser: Optional[str] = None
    browser_version: Optional[str] = None
    os: Optional[str] = None
    device_type: str
    is_mobile: bool
    is_bot: bool
    referer: Optional[str] = None
    accept_language: Optional[str] = None
    accept_encoding: Optional[str] = None
    headers: str
    query_params: Optional[str] = None
    tls_version: Optional[str] = None
    http_protocol: Optional[str] = None
    cloudflare_ray: Optional[str] = None

    @model_validator(mode="after")
    def _check_device_consistency(self) -> "VisitorRecord":
        if self.is_mobile != (self.device_type == DEVICE_MOBILE):
            raise ValueError("is_mobile must be true exactly when device_type is 'Mobile'")
        return self


def _version_after(marker: str) -> Callable[[str], Optional[str]]:
    pattern = re.compile(re.escape(marker) + r"([\d.]+)", re.ASCII)

    def extract(ua: str) -> Optional[str]:
        match = pattern.search(ua)
        return match.group(1) if match else None

    return extract


# (matches, browser name, version extractor)
BROWSER_RULES: list[tuple[Callable[[str], bool], str, Callable[[str], Optional[str]]]] = [
    (lambda ua: "Chrome/" in ua, "Chrome", _version_after("Chrome/")),
    (lambda ua: "Firefox/" in ua, "Firefox", _version_after("Firefox/")),
    (lambda ua: "Safari/" in ua and "Chrome" not in ua, "Safari", _version_after("Version/")),
    (lambda ua: "Edge/" in ua, "Edge", _version_after("Edge/")),
]

OS_RULES: list[tuple[Callable[[str], bool], str]] = [
    (lambda ua: "Windows NT" in ua, "Windows"),
    (lambda ua: "Mac OS X" in ua, "macOS"),
    (lambda ua: "Linux" in ua, "Linux"),
    (lambda ua: "Android" in ua, "Android"),
    (lambda ua: "iOS" in ua or "iPhone" in ua or "iPad" in ua, "iOS"),
]


def detect_browser(ua: str) -> tuple[Optional[str], Optional[str]]:
    """Return (browser, version) for the first matching rule, or (None, None)."""
    for matches, name, version_of in BROWSER_RULES:
        if matches(ua):
            return name, version_of(ua)
    return None, None


def detect_os(ua: str) -> Optional[str]:
    for matches, name in OS_RULES:
        if matches(ua):
            return name
    return None


def is_mobile_agent(ua: str) -> bool:
    return MOBILE_PATTERN.search(ua) is not None


def is_bot_agent(ua: str) -> bool:
    return BOT_PATTERN.search(ua) is not None


def collect_headers(headers: Iterable[tuple[str, str]]) -> dict[str, str]:
    """
    Capture headers in arrival order.

    Names are lowercased; repeated names are joined with ", ".
    """
    collected: dict[str, str] = {}
    for name, value in headers:
        key = name.lower()
        if key in collected:
            collected[key] = f"{collected[key]}, {value}"
        else:
            collected[key] = value
    return collected


def edge_context_from_headers(headers: dict[str, str]) -> Optional[EdgeContext]:
    """
    Build an EdgeContext from edge location headers.

    Args:
        headers: Lowercased header mapping (see collect_headers)

    Returns:
        EdgeContext, or None when the request carries no edge headers
    """
    values = {
        field: headers[header]
        for field, header in EDGE_CONTEXT_HEADERS.items()
        if headers.get(header)
    }
    if not values:
        return None
    return EdgeContext(**values)


def _utc_timestamp(now: Optional[datetime]) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def classify_request(
    method: str,
    url: str,
    headers: Iterable[tuple[str, str]],
    edge: Optional[EdgeContext] = None,
    now: Optional[datetime] = None
) -> VisitorRecord:
    """
    Classify a request into a VisitorRecord.

    Args:
        method: HTTP method
        url: Full request URL (scheme, host, path and query)
        headers: Header (name, value) pairs in arrival order
        edge: Platform-supplied geolocation/TLS context; read from edge
              headers when omitted
        now: Capture time (defaults to the current UTC time)

    Returns:
        VisitorRecord for the request
    """
    parts = urlsplit(url)
    header_map = collect_headers(headers)
    query_map = dict(parse_qsl(parts.query, keep_blank_values=True))

    if edge is None:
        edge = edge_context_from_headers(header_map) or EdgeContext()

    ua = header_map.get("user-agent", "")
    browser, browser_version = detect_browser(ua)
    mobile = is_mobile_agent(ua)

    return VisitorRecord(
        timestamp=_utc_timestamp(now),
        domain=parts.hostname or "",
        path=parts.path or "/",
        method=method.upper(),
        ip=header_map.get(CONNECTING_IP_HEADER, ""),
        country=edge.country or None,
        city=edge.city or None,
        region=edge.region or None,
        timezone=edge.timezone or None,
        latitude=edge.latitude or None,
        longitude=edge.longitude or None,
        asn=edge.asn or None,
        user_agent=ua,
        browser=browser,
        browser_version=browser_version,
        os=detect_os(ua),
        device_type=DEVICE_MOBILE if mobile else DEVICE_DESKTOP,
        is_mobile=mobile,
        is_bot=is_bot_agent(ua),
        referer=header_map.get("referer") or None,
        accept_language=header_map.get("accept-language") or None,
        accept_encoding=header_map.get("accept-encoding") or None,
        headers=json.dumps(header_map, ensure_ascii=False, separators=(",", ":")),
        query_params=(
            json.dumps(query_map, ensure_ascii=False, separators=(",", ":")) if query_map else None
        ),
        tls_version=edge.tls_version or None,
        http_protocol=header_map.get(HTTP_PROTOCOL_HEADER) or None,
        cloudflare_ray=header_map.get(TRACE_ID_HEADER) or None,
    )
