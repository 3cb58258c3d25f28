"""Statically known widgets served by the relay."""
from llming_widgets.config import RelayConfig
from llming_widgets.resources import ResourceRegistry
from llming_widgets.tools import OperationRegistry

from .todo import TODO_WIDGET_URI, ShowTodoInput, TodoItem, register_todo_widget, show_todo


def register_builtin_widgets(operations: OperationRegistry, resources: ResourceRegistry, config: RelayConfig) -> None:
    """Populate a registry pair with every built-in widget."""
    register_todo_widget(operations, resources, config)


__all__ = [
    "register_builtin_widgets",
    "register_todo_widget",
    "show_todo",
    "ShowTodoInput",
    "TodoItem",
    "TODO_WIDGET_URI",
]
