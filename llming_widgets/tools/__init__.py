"""Operations exposed to the chat client as MCP tools."""

from .operation_definition import (
    OperationDefinition,
    OperationResult,
    OperationUIMetadata,
)
from .operation_registry import OperationRegistry

__all__ = [
    'OperationDefinition',
    'OperationResult',
    'OperationUIMetadata',
    'OperationRegistry',
]
