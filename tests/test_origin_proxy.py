"""Tests for the origin proxy."""

import httpx

from app.api.dependencies import get_origin_proxy
from app.main import app
from app.services.origin_proxy import OriginProxy


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


class TestOriginUrl:

    def test_default_scheme(self):
        proxy = OriginProxy(httpx.AsyncClient())
        assert proxy.origin_url_for("Mail.Bozza.AU", "/inbox", "a=1") == "https://mail.bozza.au/inbox?a=1"

    def test_override(self):
        proxy = OriginProxy(
            httpx.AsyncClient(),
            origin_overrides={"mail.bozza.au": "http://10.0.0.5:8080/"},
        )
        assert proxy.origin_url_for("mail.bozza.au", "/") == "http://10.0.0.5:8080/"
        assert proxy.origin_url_for("admin.bozza.au", "/x") == "https://admin.bozza.au/x"


class TestOriginFailure:

    def test_unreachable_origin_returns_bad_gateway(self, client, visitor_count):
        proxy = OriginProxy(httpx.AsyncClient(transport=httpx.MockTransport(unreachable)))
        app.dependency_overrides[get_origin_proxy] = lambda: proxy

        response = client.get("http://mail.bozza.au/")

        assert response.status_code == 502
        assert visitor_count() == 0

    def test_hop_by_hop_headers_are_dropped(self, client):
        def origin(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"ok", headers={"keep-alive": "timeout=5", "x-kept": "1"})

        proxy = OriginProxy(httpx.AsyncClient(transport=httpx.MockTransport(origin)))
        app.dependency_overrides[get_origin_proxy] = lambda: proxy

        response = client.get("http://mail.bozza.au/")

        assert response.status_code == 200
        assert response.headers["x-kept"] == "1"
        assert "keep-alive" not in response.headers
