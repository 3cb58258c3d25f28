"""Test configuration and fixtures."""
import pytest
import pytest_asyncio

from llming_widgets.api import StreamRelay
from llming_widgets.config import RelayConfig
from llming_widgets.session import SessionHandlerFactory
from llming_widgets.standalone import create_app
from llming_widgets.testing import RelayTestClient

TODO_JS = "document.getElementById('todo-root').textContent = 'todo';"
TODO_CSS = "#todo-root { color: red; }"


@pytest.fixture
def assets_dir(tmp_path):
    """Artifact directory with a prebuilt todo widget."""
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "todo.js").write_text(TODO_JS, encoding="utf-8")
    (dist / "todo.css").write_text(TODO_CSS, encoding="utf-8")
    return dist


@pytest.fixture
def config(assets_dir) -> RelayConfig:
    return RelayConfig(port=8123, assets_dir=assets_dir)


@pytest.fixture
def factory(config) -> SessionHandlerFactory:
    return SessionHandlerFactory(config)


@pytest.fixture
def app(config):
    return create_app(config)


@pytest.fixture
def relay(app) -> StreamRelay:
    return app.state.relay


@pytest_asyncio.fixture
async def relay_client(app, relay) -> RelayTestClient:
    """Started, initialized client on a fresh relay session."""
    client = RelayTestClient(app, relay)
    await client.start()
    try:
        yield client
    finally:
        await client.stop()
