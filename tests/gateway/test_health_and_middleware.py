"""健康检查与中间件测试"""

from unittest.mock import AsyncMock

from ulid import ULID

from hezzl_goods.gateway.main import create_app
from hezzl_goods.gateway.middleware.logging_mw import resolve_request_id


class TestHealth:
    """/health 与 /ready 无需认证"""

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_ready_all_ok(self, client):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ready"
        assert data["checks"]["goods_db"] == "ok"
        assert data["checks"]["goods_logs_db"] == "ok"
        assert data["checks"]["cache"] == "ok"
        assert data["checks"]["bus"] == "ok"
        assert data["checks"]["audit_pending"] == 0

    async def test_ready_cache_down_503(self, client, app, monkeypatch):
        monkeypatch.setattr(
            app.state.cache, "ping", AsyncMock(side_effect=ConnectionError("down"))
        )
        resp = await client.get("/ready")
        assert resp.status_code == 503
        data = resp.json()
        assert data["status"] == "not_ready"
        assert data["checks"]["cache"].startswith("error")


class TestRequestId:
    """LoggingMiddleware"""

    async def test_response_has_ulid_request_id(self, client):
        resp = await client.get("/health")
        request_id = resp.headers["X-Request-ID"]
        assert len(request_id) == 26

    async def test_request_ids_unique(self, client):
        first = await client.get("/health")
        second = await client.get("/health")
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    async def test_error_responses_carry_request_id(self, client):
        resp = await client.get("/api/v1/goods/list")
        assert resp.status_code == 401
        assert "X-Request-ID" in resp.headers

    async def test_inbound_ulid_reused(self, client):
        """上游传入合法 ULID 时原样沿用"""
        inbound = str(ULID())
        resp = await client.get("/health", headers={"X-Request-ID": inbound})
        assert resp.headers["X-Request-ID"] == inbound

    async def test_invalid_inbound_id_replaced(self, client):
        resp = await client.get("/health", headers={"X-Request-ID": "not-a-ulid"})
        request_id = resp.headers["X-Request-ID"]
        assert request_id != "not-a-ulid"
        assert len(request_id) == 26

    def test_resolve_request_id(self):
        inbound = str(ULID())
        assert resolve_request_id(inbound) == inbound
        assert len(resolve_request_id(None)) == 26
        assert len(resolve_request_id("")) == 26
        assert resolve_request_id("req-123") != "req-123"


class TestCreateApp:
    def test_routes_registered(self, settings, rsa_public_key):
        app = create_app(settings, public_key=rsa_public_key)
        paths = {route.path for route in app.routes}
        assert {
            "/api/v1/good/create",
            "/api/v1/good/get",
            "/api/v1/good/update",
            "/api/v1/good/remove",
            "/api/v1/goods/list",
            "/api/v1/good/reprioritize",
            "/health",
            "/ready",
        } <= paths
