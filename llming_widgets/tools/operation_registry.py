"""Registry of the operations a session exposes as MCP tools."""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from llming_widgets.errors import DuplicateNameError, InvalidInputError, UnknownOperationError
from .operation_definition import OperationDefinition, OperationResult, OperationUIMetadata

logger = logging.getLogger(__name__)


def _violations(error: ValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


class OperationRegistry:
    """Maps operation names to their definitions.

    Registration happens once while a session handler is built; the registry
    is read-only afterwards.
    """

    def __init__(self):
        self._operations: Dict[str, OperationDefinition] = {}

    def register(self, operation: OperationDefinition) -> None:
        """Register an operation definition.

        Args:
            operation: The definition to register

        Raises:
            DuplicateNameError: If the name is already taken. The existing
                binding is left untouched.
        """
        if operation.name in self._operations:
            raise DuplicateNameError(operation.name)
        self._operations[operation.name] = operation
        logger.debug(f"[OPS] Registered operation: {operation.name}")

    def register_operation(
        self,
        name: str,
        description: str,
        handler: Callable[..., Any],
        input_model: Type[BaseModel],
        title: Optional[str] = None,
        ui: Optional[OperationUIMetadata] = None,
    ) -> OperationDefinition:
        """Build and register an operation in one step.

        Returns:
            The registered OperationDefinition
        """
        operation = OperationDefinition(
            name=name,
            description=description,
            title=title,
            handler=handler,
            input_model=input_model,
            ui=ui,
        )
        self.register(operation)
        return operation

    def get(self, name: str) -> Optional[OperationDefinition]:
        return self._operations.get(name)

    def get_all(self) -> List[OperationDefinition]:
        return list(self._operations.values())

    def get_names(self) -> List[str]:
        return list(self._operations.keys())

    def has(self, name: str) -> bool:
        return name in self._operations

    def validate(self, name: str, raw_input: Optional[Dict[str, Any]]) -> BaseModel:
        """Validate raw input against the operation's input shape.

        Raises:
            UnknownOperationError: If no operation has this name
            InvalidInputError: If the input does not conform
        """
        operation = self._operations.get(name)
        if operation is None:
            raise UnknownOperationError(name)
        try:
            return operation.input_model.model_validate(raw_input if raw_input is not None else {})
        except ValidationError as e:
            raise InvalidInputError(name, _violations(e)) from e

    async def invoke(self, name: str, raw_input: Optional[Dict[str, Any]]) -> OperationResult:
        """Validate the input and run the operation's handler.

        Handlers may be sync or async and receive the validated input model.
        """
        arguments = self.validate(name, raw_input)
        handler = self._operations[name].handler
        if asyncio.iscoroutinefunction(handler):
            result = await handler(arguments)
        else:
            result = handler(arguments)
        if not isinstance(result, OperationResult):
            result = OperationResult.model_validate(result)
        return result
