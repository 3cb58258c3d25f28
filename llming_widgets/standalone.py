"""Standalone MCP widget server.

Usage::

    cd samples/todo
    poetry run python app.py

    # Or via script entry point from anywhere:
    poetry run llming-widgets

    # Custom port:
    PORT=9000 poetry run llming-widgets

Environment variables:
    PORT                   — Server port (default: 8000, also used when not numeric)
    HOST                   — Bind address (default: 0.0.0.0)
    BASE_URL               — Base URL for generated asset links (default: http://localhost:<PORT>)
    WIDGET_ASSETS_DIR      — Prebuilt widget bundles (default: ./web/dist)
    WIDGET_INLINE_ASSETS   — Set to 0 to link bundles under BASE_URL/assets instead of inlining
    SSE_KEEPALIVE_SECONDS  — Interval of SSE keepalive comments (default: off)

Loads .env from the current working directory or any parent directory.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from llming_widgets.config import RelayConfig

logger = logging.getLogger(__name__)


def create_app(config: Optional[RelayConfig] = None):
    """Create the FastAPI application.

    Also called by uvicorn via the factory=True flag. Registration
    conflicts between widgets abort here, before the server accepts
    connections.
    """
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))

    from fastapi import FastAPI
    from fastapi.staticfiles import StaticFiles

    from llming_widgets.api import StreamRelay
    from llming_widgets.resources import check_assets_dir
    from llming_widgets.server import build_relay_router
    from llming_widgets.session import SessionHandlerFactory

    config = config or RelayConfig.from_env()

    factory = SessionHandlerFactory(config)
    factory.validate()

    problem = check_assets_dir(config.assets_dir)
    if problem:
        logger.warning(f"[RELAY] {problem}")

    relay = StreamRelay(
        factory,
        message_path=config.message_path,
        keepalive_interval=config.keepalive_interval,
    )

    @asynccontextmanager
    async def lifespan(_a):
        yield
        closed = await relay.close_all()
        if closed:
            logger.info(f"[RELAY] Closed {closed} open session(s) on shutdown")

    _app = FastAPI(title="llming-widgets", docs_url=None, redoc_url=None, lifespan=lifespan)
    _app.state.relay = relay
    _app.state.config = config
    _app.include_router(build_relay_router(relay, stream_path=config.stream_path))

    if not config.inline_assets and problem is None:
        _app.mount("/assets", StaticFiles(directory=str(config.assets_dir)), name="widget-assets")

    return _app


def main():
    """Load .env, configure logging and start the server."""
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))

    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )

    config = RelayConfig.from_env()
    print(f"\n  MCP widget server listening on http://localhost:{config.port}")
    print(f"  SSE stream: GET http://localhost:{config.port}{config.stream_path}")
    print(f"  Message post endpoint: POST http://localhost:{config.port}{config.message_path}?sessionId=...\n")
    uvicorn.run(
        "llming_widgets.standalone:create_app",
        factory=True,
        host=config.host,
        port=config.port,
    )


if __name__ == "__main__":
    main()
