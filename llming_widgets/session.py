"""Per-stream MCP handlers.

Each client stream gets its own ``SessionHandler``: a private operation and
resource registry pair bound to a low-level MCP ``Server``. Handlers are
built by ``SessionHandlerFactory`` and never shared between sessions.
"""
import asyncio
import logging
from typing import Callable, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError

from llming_widgets.config import RelayConfig
from llming_widgets.errors import (
    AssetNotFoundError,
    InvalidInputError,
    UnknownOperationError,
    UnknownResourceError,
)
from llming_widgets.resources import ResourceRegistry
from llming_widgets.tools import OperationRegistry
from llming_widgets.widgets import register_builtin_widgets

logger = logging.getLogger(__name__)

# JSON-RPC error code MCP uses for unknown resources
RESOURCE_NOT_FOUND = -32002

Populator = Callable[[OperationRegistry, ResourceRegistry, RelayConfig], None]


class SessionHandler:
    """Serves one session's operations and resources over MCP.

    Calls into the registries are serialized with a per-session lock, so
    requests of one session run one at a time in arrival order.
    """

    def __init__(
        self,
        operations: OperationRegistry,
        resources: ResourceRegistry,
        *,
        name: str,
        version: str,
        instructions: Optional[str] = None,
    ):
        self.operations = operations
        self.resources = resources
        self._lock = asyncio.Lock()
        self.server = Server(name, version=version, instructions=instructions)
        self._bind()

    def _bind(self) -> None:
        server = self.server

        @server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return [op.to_mcp_tool() for op in self.operations.get_all()]

        @server.list_resources()
        async def list_resources() -> list[types.Resource]:
            return [res.to_mcp_resource() for res in self.resources.get_all()]

        # Registered directly so results keep their _meta and structured payloads
        server.request_handlers[types.CallToolRequest] = self._handle_call_tool
        server.request_handlers[types.ReadResourceRequest] = self._handle_read_resource

    async def call_operation(self, name: str, arguments: Optional[dict]) -> types.CallToolResult:
        """Invoke an operation; client-side failures become an error result."""
        async with self._lock:
            try:
                result = await self.operations.invoke(name, arguments)
            except (UnknownOperationError, InvalidInputError) as e:
                logger.info(f"[OPS] Rejected call to {name}: {e}")
                return types.CallToolResult(
                    content=[types.TextContent(type="text", text=str(e))],
                    isError=True,
                )
        return result.to_call_tool_result()

    async def read_resource(self, uri: str) -> types.ReadResourceResult:
        async with self._lock:
            try:
                payload = self.resources.resolve(uri)
            except UnknownResourceError as e:
                raise McpError(types.ErrorData(code=RESOURCE_NOT_FOUND, message=str(e), data={"uri": uri}))
            except AssetNotFoundError as e:
                logger.error(f"[RESOURCES] {e}")
                raise McpError(types.ErrorData(
                    code=types.INTERNAL_ERROR,
                    message=str(e),
                    data={"path": e.path, "remediation": e.remediation},
                ))
        contents = types.TextResourceContents.model_validate({
            "uri": uri,
            "mimeType": payload.mime_type,
            "text": payload.text,
            "_meta": payload.meta,
        })
        return types.ReadResourceResult(contents=[contents])

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        return types.ServerResult(await self.call_operation(req.params.name, req.params.arguments))

    async def _handle_read_resource(self, req: types.ReadResourceRequest) -> types.ServerResult:
        return types.ServerResult(await self.read_resource(str(req.params.uri)))

    async def run(self, read_stream, write_stream) -> None:
        """Run the MCP protocol loop until the read stream closes."""
        await self.server.run(read_stream, write_stream, self.server.create_initialization_options())


class SessionHandlerFactory:
    """Builds one fully populated ``SessionHandler`` per stream."""

    def __init__(self, config: RelayConfig, populate: Populator = register_builtin_widgets):
        self.config = config
        self._populate = populate

    def create(self) -> SessionHandler:
        operations = OperationRegistry()
        resources = ResourceRegistry()
        self._populate(operations, resources, self.config)
        return SessionHandler(
            operations,
            resources,
            name=self.config.server_name,
            version=self.config.server_version,
        )

    def validate(self) -> None:
        """Build one throwaway handler so registration conflicts surface at startup."""
        handler = self.create()
        logger.info(
            f"[SESSIONS] Handlers expose {len(handler.operations.get_names())} operation(s) "
            f"and {len(handler.resources.get_all())} resource(s)"
        )
