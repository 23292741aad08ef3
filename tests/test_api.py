"""
Tests for the page cache middleware and admin API.
"""

import dataclasses

import pytest
from fastapi import Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.testclient import TestClient

from page_cache.api.app import create_app
from page_cache.api.dependencies import disable_page_cache
from tests.helpers import ADMIN_TOKEN, make_request

ADMIN = {"Authorization": f"Bearer {ADMIN_TOKEN}"}


def build_app(config, store):
    """Create an app with a handful of site pages behind the cache."""
    app = create_app(config=config, store=store)
    app.state.renders = 0

    @app.get("/about", response_class=HTMLResponse)
    async def about(request: Request):
        request.app.state.renders += 1
        return '<h1>About</h1><input type="hidden" name="SecurityID" value="abc123">'

    @app.post("/about", response_class=HTMLResponse)
    async def about_post(request: Request):
        request.app.state.renders += 1
        return "<p>Thanks</p>"

    @app.get("/broken")
    async def broken(request: Request):
        request.app.state.renders += 1
        return PlainTextResponse("Server error", status_code=500)

    @app.get("/old-about")
    async def old_about():
        return RedirectResponse("/about", status_code=301)

    @app.get("/account", response_class=HTMLResponse, dependencies=[Depends(disable_page_cache)])
    async def account(request: Request):
        request.app.state.renders += 1
        return "<p>Your account</p>"

    return app


@pytest.fixture
def app(config, store):
    return build_app(config, store)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def test_second_request_is_a_hit(client, app):
    first = client.get("/about")
    assert first.status_code == 200
    assert first.headers["X-DynamicCache"].startswith("miss at ")
    assert "abc123" in first.text

    second = client.get("/about")
    assert second.status_code == 200
    assert second.headers["X-DynamicCache"].startswith("hit at ")
    assert second.headers["content-type"].startswith("text/html")
    assert second.text.startswith("<h1>About</h1>")
    assert app.state.renders == 1


def test_hit_does_not_leak_cached_security_token(client):
    client.get("/about")
    hit = client.get("/about")
    assert "abc123" not in hit.text
    assert int(hit.headers["content-length"]) == len(hit.content)


def test_error_pages_are_not_cached(client, app, store):
    for _ in range(2):
        response = client.get("/broken")
        assert response.status_code == 500
        assert response.headers["X-DynamicCache"].startswith("miss at ")
    assert app.state.renders == 2
    assert len(store) == 0


def test_redirects_are_cached(client):
    client.get("/old-about", follow_redirects=False)
    hit = client.get("/old-about", follow_redirects=False)
    assert hit.status_code == 301
    assert hit.headers["location"] == "/about"
    assert hit.headers["X-DynamicCache"].startswith("hit at ")


def test_routes_can_opt_out(client, app, store):
    for _ in range(2):
        response = client.get("/account")
        assert response.headers["X-DynamicCache-OptOut"] == "true"
        assert response.headers["X-DynamicCache"].startswith("miss at ")
    assert app.state.renders == 2
    assert len(store) == 0


def test_opt_out_header_follows_app_config(config, store):
    custom = dataclasses.replace(config, opt_out_header=r"(?i)^X-No-Store", opt_out_header_string="X-No-Store: 1")
    app = build_app(custom, store)
    with TestClient(app) as client:
        response = client.get("/account")
    assert response.headers["X-No-Store"] == "1"
    assert "X-DynamicCache-OptOut" not in response.headers
    assert len(store) == 0


@pytest.mark.parametrize("url", ["/about?utm_source=newsletter", "/about?stage=Stage"])
def test_ineligible_requests_are_skipped(client, app, url):
    response = client.get(url)
    assert response.status_code == 200
    assert response.headers["X-DynamicCache"] == "skipped"
    assert app.state.renders == 1


def test_post_is_skipped(client):
    response = client.post("/about")
    assert response.headers["X-DynamicCache"] == "skipped"
    assert response.text == "<p>Thanks</p>"


def test_flush_parameter_bypasses_cache(client, app, store):
    response = client.get("/about?flush=1")
    assert "X-DynamicCache" not in response.headers
    assert len(store) == 0
    assert app.state.renders == 1


def test_admin_flush_parameter_clears_cache(client, app, store):
    client.get("/about")
    client.get("/about?flush=1")
    assert len(store) == 1

    response = client.get("/about?flush=1", headers=ADMIN)
    assert response.status_code == 200
    assert "X-DynamicCache" not in response.headers
    assert len(store) == 0


def test_head_request_does_not_poison_get(client, app, store):
    """A GET-only route answers HEAD with 405; that must never be replayed for GET."""
    head = client.head("/about")
    assert head.status_code == 405
    assert head.headers["X-DynamicCache"] == "skipped"
    assert len(store) == 0

    get = client.get("/about")
    assert get.status_code == 200
    assert get.headers["X-DynamicCache"].startswith("miss at ")
    assert get.text.startswith("<h1>About</h1>")

    assert client.get("/about").headers["X-DynamicCache"].startswith("hit at ")
    assert app.state.renders == 1


def test_cache_flush_parameter_requires_admin(client, store):
    client.get("/about")
    assert len(store) == 1

    client.get("/about?cache=flush")
    assert len(store) == 1

    response = client.get("/about?cache=flush", headers=ADMIN)
    assert response.status_code == 200
    assert len(store) == 0


def test_hosts_are_segmented(config, store):
    app = build_app(dataclasses.replace(config, segment_hostname=True), store)
    with TestClient(app) as client:
        assert client.get("/about", headers={"host": "a.example"}).headers["X-DynamicCache"].startswith("miss")
        assert client.get("/about", headers={"host": "b.example"}).headers["X-DynamicCache"].startswith("miss")
        assert client.get("/about", headers={"host": "a.example"}).headers["X-DynamicCache"].startswith("hit")
    assert app.state.renders == 2


def test_base_url_is_stripped(config, store):
    """A site hosted under /site caches /site/contact as /contact."""
    app = build_app(dataclasses.replace(config, base_url="/site"), store)
    with TestClient(app) as client:
        client.get("/site/contact")
    assert app.state.cache_service.cache_key(make_request("/contact")) in store


def test_disabled_cache_skips_everything(config, store):
    app = build_app(dataclasses.replace(config, enabled=False), store)
    with TestClient(app) as client:
        assert client.get("/about").headers["X-DynamicCache"] == "skipped"
        assert client.get("/about").headers["X-DynamicCache"] == "skipped"
    assert app.state.renders == 2


class TestAdminEndpoints:
    """Flush, content events, stats and health."""

    def test_flush_requires_admin(self, client):
        assert client.delete("/_cache").status_code == 403

    def test_flush(self, client, store):
        client.get("/about")
        response = client.delete("/_cache", headers=ADMIN)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Cache cleared successfully"}
        assert len(store) == 0

    def test_publish_event_invalidates(self, client, app):
        client.get("/about")
        response = client.post("/_cache/events", json={"event": "published"}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json() == {"event": "published", "cleared": True}

        assert client.get("/about").headers["X-DynamicCache"].startswith("miss at ")
        assert app.state.renders == 2

    def test_draft_save_event_keeps_cache(self, client, store):
        client.get("/about")
        response = client.post("/_cache/events", json={"event": "saved", "versioned": True}, headers=ADMIN)
        assert response.json()["cleared"] is False
        assert len(store) == 1

    def test_events_require_admin(self, client):
        assert client.post("/_cache/events", json={"event": "published"}).status_code == 403

    def test_unknown_event_is_rejected(self, client):
        assert client.post("/_cache/events", json={"event": "renamed"}, headers=ADMIN).status_code == 422

    def test_stats(self, client):
        client.get("/about")
        response = client.get("/_cache/stats", headers=ADMIN)
        assert response.status_code == 200
        data = response.json()
        assert data["backend"] == "memory"
        assert data["total_entries"] == 1
        assert response.headers["X-DynamicCache"] == "skipped"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "store_healthy": True}
