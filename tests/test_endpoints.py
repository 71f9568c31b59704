"""
End-to-end tests for the catch-all request handler.

Requests are sent with absolute URLs so the TestClient sets the Host header
for each parked or active hostname.
"""

import json

import pytest

from app.api.dependencies import get_log_store, get_routing_config
from app.main import app
from app.services.dispatch import RoutingConfig
from app.services.log_store import VisitorLogStore

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def broken_session_maker():
    raise ConnectionError("store unavailable")


@pytest.fixture
def broken_store(client):
    store = VisitorLogStore(broken_session_maker)
    app.dependency_overrides[get_log_store] = lambda: store
    return store


class TestParkedPage:

    def test_parked_page_is_served_and_logged(self, client, visitor_count):
        response = client.get(
            "http://boz.dev/some/path?utm_source=test",
            headers={"User-Agent": CHROME_UA, "CF-Connecting-IP": "198.51.100.4"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/html;charset=UTF-8"
        assert response.headers["cache-control"] == "public, max-age=3600"
        assert response.headers["x-powered-by"] == "Bruteforce Group"
        assert "boz.dev" in response.text
        assert visitor_count("boz.dev") == 1

        logs = client.get("http://boz.dev/admin/logs").json()["logs"]
        row = logs[0]
        assert row["path"] == "/some/path"
        assert row["browser"] == "Chrome"
        assert row["browser_version"] == "120.0.0.0"
        assert row["os"] == "Windows"
        assert row["ip"] == "198.51.100.4"
        assert json.loads(row["query_params"]) == {"utm_source": "test"}
        assert json.loads(row["headers"])["user-agent"] == CHROME_UA

    def test_any_method_is_parked(self, client, visitor_count):
        response = client.post("http://e-flux.au/xmlrpc.php", content=b"payload")

        assert response.status_code == 200
        assert visitor_count("e-flux.au") == 1

    @pytest.mark.parametrize("method", ["PROPFIND", "TRACE", "MKCOL"])
    def test_extension_method_is_parked(self, client, visitor_count, method):
        response = client.request(method, "http://boz.dev/x")

        assert response.status_code == 200
        assert "boz.dev" in response.text
        assert visitor_count("boz.dev") == 1

    def test_write_failure_still_serves_page(self, client, broken_store, caplog):
        response = client.get("http://boz.dev/", headers={"User-Agent": CHROME_UA})

        assert response.status_code == 200
        assert "boz.dev" in response.text
        assert broken_store.write_failures == 1
        assert any("Failed to log visitor" in r.getMessage() for r in caplog.records)


class TestPassThrough:

    def test_active_subdomain_is_proxied_verbatim(self, client, origin_requests, visitor_count):
        response = client.get(
            "http://mail.bozza.au/inbox?folder=1",
            headers={"User-Agent": CHROME_UA, "X-Custom": "kept"},
        )

        assert response.status_code == 203
        assert response.content == b"origin says hi"
        assert response.headers["x-origin"] == "mail"
        assert "x-powered-by" not in response.headers
        assert visitor_count() == 0

        forwarded = origin_requests[0]
        assert forwarded.method == "GET"
        assert str(forwarded.url) == "https://mail.bozza.au/inbox?folder=1"
        assert forwarded.headers["x-custom"] == "kept"
        assert forwarded.headers["host"] == "mail.bozza.au"

    def test_no_headers_added_to_origin_response(self, client):
        response = client.get("http://mail.bozza.au/")

        assert set(response.headers.keys()) == {"content-type", "x-origin", "content-length"}

    @pytest.mark.parametrize("method", ["TRACE", "PROPFIND"])
    def test_any_method_is_proxied(self, client, origin_requests, visitor_count, method):
        response = client.request(method, "http://mail.bozza.au/x")

        assert response.status_code == 203
        assert origin_requests[0].method == method
        assert visitor_count() == 0

    def test_admin_path_on_active_subdomain_is_proxied(self, client, origin_requests, visitor_count):
        response = client.get("http://admin.bozza.au/admin/logs")

        assert response.status_code == 203
        assert len(origin_requests) == 1
        assert visitor_count() == 0

    def test_request_body_is_forwarded(self, client, origin_requests):
        client.post("http://mail.bozza.au/send", content=b"hello")

        assert origin_requests[0].method == "POST"
        assert origin_requests[0].content == b"hello"

    def test_alternate_routing_config(self, client, origin_requests, visitor_count):
        app.dependency_overrides[get_routing_config] = lambda: RoutingConfig(
            active_subdomains=frozenset({"boz.dev"})
        )

        client.get("http://boz.dev/")
        client.get("http://mail.bozza.au/")

        assert len(origin_requests) == 1
        assert visitor_count("boz.dev") == 0
        assert visitor_count("mail.bozza.au") == 1


class TestAdminLogs:

    def test_filter_limit_and_order(self, client, seed_visitors):
        seed_visitors(*[
            {"domain": "boz.dev", "timestamp": f"2026-01-{day:02d}T00:00:00.000Z"}
            for day in range(1, 13)
        ])
        seed_visitors({"domain": "bozza.ai", "timestamp": "2026-02-01T00:00:00.000Z"})

        response = client.get("http://boz.dev/admin/logs?domain=boz.dev&limit=10&offset=0")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 10
        assert len(body["logs"]) == 10
        assert {log["domain"] for log in body["logs"]} == {"boz.dev"}
        timestamps = [log["timestamp"] for log in body["logs"]]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_non_numeric_limit_falls_back_to_default(self, client, seed_visitors):
        seed_visitors(*[
            {"timestamp": f"2026-01-01T00:{minute:02d}:00.000Z"} for minute in range(0, 60)
        ], *[
            {"timestamp": f"2026-01-01T01:{minute:02d}:00.000Z"} for minute in range(0, 60)
        ])

        response = client.get("http://boz.dev/admin/logs?limit=abc&offset=xyz")

        assert response.status_code == 200
        assert response.json()["count"] == 100

    @pytest.mark.parametrize("query", [
        "limit=" + "9" * 5000,
        "offset=" + "9" * 5000,
        "offset=99999999999999999999",
        "limit=99999999999999999999",
    ])
    def test_oversized_pagination_falls_back_to_defaults(self, client, seed_visitors, query):
        seed_visitors(*[
            {"timestamp": f"2026-01-01T00:00:{second:02d}.000Z"} for second in range(0, 3)
        ])

        response = client.get(f"http://boz.dev/admin/logs?{query}")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 3

    def test_query_is_not_logged(self, client, visitor_count):
        client.get("http://boz.dev/admin/logs")
        assert visitor_count() == 0

    def test_read_failure_returns_json_error(self, client, broken_store):
        response = client.get("http://boz.dev/admin/logs")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Failed to fetch logs"
        assert "store unavailable" in body["message"]


class TestAdminDashboard:

    @pytest.mark.parametrize("path", ["/admin", "/admin/"])
    def test_dashboard(self, client, visitor_count, path):
        response = client.get(f"http://boz.dev{path}")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-cache"
        assert '"/admin/logs"' in response.text
        assert visitor_count() == 0
