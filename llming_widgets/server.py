"""HTTP endpoints of the relay (framework glue around StreamRelay).

    GET     <stream path>                    open an SSE stream, mint a session
    POST    <message path>?sessionId=<id>    deliver one JSON-RPC message
    OPTIONS <either path>                    CORS preflight
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response

from llming_widgets.api import SessionEventStreamResponse, StreamRelay
from llming_widgets.config import DEFAULT_STREAM_PATH
from llming_widgets.errors import RelayError

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = "content-type"
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Allow-Headers": ALLOWED_HEADERS,
}
SSE_HEADERS = {
    **CORS_HEADERS,
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
UNSUPPORTED_METHODS = ["HEAD", "PUT", "PATCH", "DELETE"]


def _error_response(error: RelayError, headers: dict) -> PlainTextResponse:
    return PlainTextResponse(str(error), status_code=error.status_code, headers=headers)


def build_relay_router(relay: StreamRelay, stream_path: str = DEFAULT_STREAM_PATH) -> APIRouter:
    """Build the FastAPI APIRouter exposing ``relay`` over HTTP.

    The message path is taken from the relay so the advertised endpoint and
    the route always agree.
    """
    router = APIRouter(tags=["mcp-relay"])
    message_path = relay.message_path

    # ---- Stream ----

    @router.get(stream_path, response_model=None)
    async def open_stream(request: Request) -> Response:
        try:
            session = await relay.open_session()
        except Exception as e:
            logger.error(f"[SSE] Failed to start SSE session: {type(e).__name__}: {e}")
            return PlainTextResponse(
                "Failed to establish SSE connection", status_code=500, headers=CORS_HEADERS,
            )

        async def on_close():
            await relay.close_session(session, reason="stream closed")

        client = request.client.host if request.client else "unknown"
        logger.info(f"[SSE] Stream opened by {client} for session {session.session_id}")
        return SessionEventStreamResponse(session.stream.events(), on_close=on_close, headers=SSE_HEADERS)

    # ---- Addressed messages ----

    @router.post(message_path, response_model=None)
    async def post_message(request: Request) -> Response:
        headers = {**CORS_HEADERS, "Access-Control-Allow-Headers": ALLOWED_HEADERS}
        session_id = request.query_params.get("sessionId")
        try:
            await relay.post_message(session_id, await request.body())
        except RelayError as e:
            return _error_response(e, headers)
        except Exception as e:
            logger.error(f"[RELAY] Failed to process message for {session_id}: {type(e).__name__}: {e}")
            return PlainTextResponse("Failed to process message", status_code=500, headers=headers)
        return PlainTextResponse("Accepted", status_code=202, headers=headers)

    # ---- CORS preflight ----

    async def preflight() -> Response:
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)

    async def not_found() -> Response:
        return PlainTextResponse("Not Found", status_code=404)

    # Each path serves one verb; the other one is a 404 like any unknown route
    for path, other in ((stream_path, "POST"), (message_path, "GET")):
        router.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)
        router.add_api_route(path, not_found, methods=UNSUPPORTED_METHODS + [other], include_in_schema=False)

    return router
