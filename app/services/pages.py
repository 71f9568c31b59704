"""
Static Pages

Renders the parked-domain page and the admin dashboard from Jinja2 templates
and wraps them in responses with the caching headers each page needs.
"""

from pathlib import Path
from typing import Optional

from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

HTML_MEDIA_TYPE = "text/html;charset=UTF-8"

# Hostnames come from the Host header, so every template is autoescaped
templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)


class _HTMLPage(HTMLResponse):
    media_type = HTML_MEDIA_TYPE


def parked_page(
    domain: str,
    operator_name: str,
    contact_email: Optional[str] = None,
    max_age: int = 3600
) -> HTMLResponse:
    """
    Render the parked-domain page for a hostname.

    Args:
        domain: Hostname shown on the page
        operator_name: Operator shown on the page and in X-Powered-By
        contact_email: Optional contact address
        max_age: Cache-Control max-age in seconds

    Returns:
        200 HTML response
    """
    html = templates.get_template("parked.html").render(
        domain=domain,
        operator_name=operator_name,
        contact_email=contact_email,
    )
    return _HTMLPage(
        content=html,
        headers={
            "Cache-Control": f"public, max-age={max_age}",
            "X-Powered-By": operator_name,
        },
    )


def admin_dashboard_page(logs_path: str = "/admin/logs") -> HTMLResponse:
    """Render the admin dashboard; all data is fetched client-side from logs_path."""
    html = templates.get_template("dashboard.html").render(logs_path=logs_path)
    return _HTMLPage(content=html, headers={"Cache-Control": "no-cache"})
