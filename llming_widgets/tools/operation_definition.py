"""MCP-compatible operation definitions.

An operation is what the chat client sees as a tool: a unique name, an input
shape published as JSON schema, and a handler producing an ``OperationResult``.
"""
from typing import Any, Callable, Dict, List, Optional, Type

from mcp import types
from pydantic import BaseModel, ConfigDict, Field


class OperationUIMetadata(BaseModel):
    """Widget-related metadata published in the tool's ``_meta``."""
    output_template: Optional[str] = Field(None, description="Resource uri of the widget that renders the result")
    invoking: Optional[str] = Field(None, description="Status text shown while the operation runs")
    invoked: Optional[str] = Field(None, description="Status text shown once the operation finished")

    def to_meta(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {}
        if self.output_template:
            meta["openai/outputTemplate"] = self.output_template
        if self.invoking:
            meta["openai/toolInvocation/invoking"] = self.invoking
        if self.invoked:
            meta["openai/toolInvocation/invoked"] = self.invoked
        return meta


class OperationResult(BaseModel):
    """Result of an operation call.

    - ``content``: narrative blocks the model receives verbatim
    - ``structured``: data that hydrates the widget; the model may read it
    - ``meta``: data passed only to the widget, never shown to the model
    """
    content: List[Dict[str, Any]] = Field(default_factory=list)
    structured: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None

    @classmethod
    def text(
        cls,
        text: str,
        structured: Optional[Dict[str, Any]] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> "OperationResult":
        return cls(content=[{"type": "text", "text": text}], structured=structured, meta=meta)

    def to_call_tool_result(self) -> types.CallToolResult:
        return types.CallToolResult.model_validate({
            "content": self.content,
            "structuredContent": self.structured,
            "_meta": self.meta,
            "isError": False,
        })


class OperationDefinition(BaseModel):
    """A named, schema-validated server-side action."""
    name: str = Field(..., description="Unique operation identifier")
    description: str = Field(..., description="What the operation does, shown to the model")
    title: Optional[str] = Field(None, description="Human-readable title")
    input_model: Type[BaseModel] = Field(..., exclude=True, description="Pydantic model describing the input shape")
    handler: Callable[..., Any] = Field(..., exclude=True, description="Callable receiving the validated input model")
    ui: Optional[OperationUIMetadata] = Field(None, description="Widget metadata")

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.input_model.model_json_schema()

    def get_meta(self) -> Optional[Dict[str, Any]]:
        if not self.ui:
            return None
        return self.ui.to_meta() or None

    def to_mcp_tool(self) -> types.Tool:
        """Convert to the MCP tool descriptor returned by ``tools/list``."""
        return types.Tool.model_validate({
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.input_schema,
            "_meta": self.get_meta(),
        })
