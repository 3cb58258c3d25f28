"""Tests for the HTTP endpoints of the relay."""
import anyio
import httpx
import pytest
from fastapi.testclient import TestClient

from llming_widgets.config import RelayConfig
from llming_widgets.errors import DuplicateNameError
from llming_widgets.session import SessionHandlerFactory
from llming_widgets.standalone import create_app

INITIALIZED = {"jsonrpc": "2.0", "method": "notifications/initialized"}


@pytest.fixture
def http(app) -> TestClient:
    return TestClient(app)


class TestPreflight:
    """Tests for CORS preflight requests."""

    @pytest.mark.parametrize("path", ["/mcp", "/mcp/messages"])
    def test_options_declares_methods_and_headers(self, http, relay, path):
        response = http.options(path)
        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "content-type"
        assert relay.table.active_count == 0


class TestPostMessage:
    """Tests for addressed message validation."""

    def test_missing_session_id(self, http):
        response = http.post("/mcp/messages", json=INITIALIZED)
        assert response.status_code == 400
        assert response.text == "Missing sessionId query parameter"
        assert response.headers["access-control-allow-origin"] == "*"

    def test_empty_session_id(self, http):
        response = http.post("/mcp/messages?sessionId=", json=INITIALIZED)
        assert response.status_code == 400

    def test_unknown_session(self, http):
        response = http.post("/mcp/messages?sessionId=unknown-id", json=INITIALIZED)
        assert response.status_code == 404
        assert response.text == "Unknown session"

    @pytest.mark.asyncio
    async def test_stale_session_after_disconnect(self, app, relay):
        session = await relay.open_session()
        assert relay.table.get(session.session_id) is session

        await relay.close_session(session, reason="client disconnected")

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
            response = await client.post(relay.endpoint_for(session.session_id), json=INITIALIZED)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_body(self, relay_client):
        response = await relay_client._http.post(relay_client.endpoint, content=b"{not json")
        assert response.status_code == 400
        assert response.text == "Could not parse message"

    @pytest.mark.asyncio
    async def test_handler_failure_is_500(self, relay_client, monkeypatch):
        async def explode(message):
            raise RuntimeError("boom")

        monkeypatch.setattr(relay_client.session, "deliver", explode)
        response = await relay_client.post(INITIALIZED)
        assert response.status_code == 500
        assert response.text == "Failed to process message"


class TestRouting:
    """Tests for paths and methods the relay does not serve."""

    def test_unknown_path(self, http):
        assert http.get("/nope").status_code == 404
        assert http.post("/mcp/other").status_code == 404

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_unsupported_method(self, http, method):
        assert http.request(method, "/mcp").status_code == 404
        assert http.request(method, "/mcp/messages").status_code == 404

    def test_crossed_verbs(self, http):
        assert http.get("/mcp/messages").status_code == 404
        assert http.post("/mcp").status_code == 404


class TestOpenStream:
    """Tests for stream-open failures (no stream is held open here)."""

    def test_factory_failure_answers_500(self, config, monkeypatch):
        app = create_app(config)

        def fail():
            raise DuplicateNameError("show-todo")

        monkeypatch.setattr(app.state.relay.factory, "create", fail)
        response = TestClient(app).get("/mcp")
        assert response.status_code == 500
        assert response.text == "Failed to establish SSE connection"
        assert app.state.relay.table.active_count == 0


class _HangingUpClient:
    """Raw ASGI peer holding GET /mcp open until told to disconnect."""

    def __init__(self):
        self.hang_up = anyio.Event()
        self.endpoint_seen = anyio.Event()
        self.start_message = None
        self.body = b""
        self._requested = False

    @staticmethod
    def scope(path: str = "/mcp") -> dict:
        return {
            "type": "http",
            # 2.3: disconnects arrive through receive()
            "asgi": {"version": "3.0", "spec_version": "2.3"},
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "path": path,
            "raw_path": path.encode(),
            "root_path": "",
            "query_string": b"",
            "headers": [(b"host", b"testserver"), (b"accept", b"text/event-stream")],
            "client": ("127.0.0.1", 50000),
            "server": ("testserver", 80),
        }

    async def receive(self) -> dict:
        if not self._requested:
            self._requested = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await self.hang_up.wait()
        return {"type": "http.disconnect"}

    async def send(self, message: dict) -> None:
        if message["type"] == "http.response.start":
            self.start_message = message
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")
            if b"event: endpoint" in self.body:
                self.endpoint_seen.set()

    @property
    def session_id(self) -> str:
        return self.body.decode().split("sessionId=", 1)[1].split("\n", 1)[0]


class TestStreamDisconnect:
    """Tests for a real GET stream ending by client disconnect."""

    @pytest.mark.asyncio
    async def test_disconnect_removes_session(self, app, relay):
        client = _HangingUpClient()
        async with anyio.create_task_group() as tg:
            tg.start_soon(app, client.scope(), client.receive, client.send)
            with anyio.fail_after(5):
                await client.endpoint_seen.wait()

            assert client.start_message["status"] == 200
            headers = dict(client.start_message["headers"])
            assert headers[b"content-type"].startswith(b"text/event-stream")
            assert headers[b"access-control-allow-origin"] == b"*"
            assert relay.table.active_count == 1
            session_id = client.session_id
            assert session_id in relay.table

            client.hang_up.set()

        assert relay.table.active_count == 0
        assert session_id not in relay.table

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as http:
            response = await http.post(relay.endpoint_for(session_id), json=INITIALIZED)
        assert response.status_code == 404
        assert response.text == "Unknown session"

    @pytest.mark.asyncio
    async def test_disconnect_leaves_other_streams_open(self, app, relay):
        leaving, staying = _HangingUpClient(), _HangingUpClient()
        async with anyio.create_task_group() as tg:
            tg.start_soon(app, leaving.scope(), leaving.receive, leaving.send)
            tg.start_soon(app, staying.scope(), staying.receive, staying.send)
            with anyio.fail_after(5):
                await leaving.endpoint_seen.wait()
                await staying.endpoint_seen.wait()
            assert relay.table.active_count == 2

            leaving.hang_up.set()
            with anyio.fail_after(5):
                while leaving.session_id in relay.table:
                    await anyio.sleep(0.01)
            assert staying.session_id in relay.table

            staying.hang_up.set()

        assert relay.table.active_count == 0


class TestCreateApp:
    """Tests for the application factory."""

    def test_custom_paths(self, assets_dir):
        config = RelayConfig(assets_dir=assets_dir, stream_path="/sse", message_path="/sse/post")
        app = create_app(config)
        http = TestClient(app)
        assert http.options("/sse").status_code == 204
        assert http.post("/sse/post").status_code == 400
        assert app.state.relay.endpoint_for("abc") == "/sse/post?sessionId=abc"

    def test_missing_assets_do_not_block_startup(self, tmp_path):
        app = create_app(RelayConfig(assets_dir=tmp_path / "missing"))
        assert isinstance(app.state.relay.factory, SessionHandlerFactory)

    def test_linked_assets_are_served(self, assets_dir):
        app = create_app(RelayConfig(assets_dir=assets_dir, inline_assets=False))
        response = TestClient(app).get("/assets/todo.js")
        assert response.status_code == 200
        assert "todo-root" in response.text
