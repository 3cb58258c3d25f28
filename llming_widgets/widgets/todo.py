"""Todo list widget: the ``show-todo`` operation and the markup it renders into."""
from typing import List, Optional

from pydantic import BaseModel, Field

from llming_widgets.config import RelayConfig
from llming_widgets.resources import (
    ResourcePayload,
    ResourceRegistry,
    WIDGET_MIME_TYPE,
    link_widget_assets,
    load_widget_assets,
)
from llming_widgets.tools import OperationRegistry, OperationResult, OperationUIMetadata

TODO_COMPONENT = "todo"
TODO_WIDGET_URI = "ui://widget/todo.html"
CHATGPT_ORIGIN = "https://chatgpt.com"


class TodoItem(BaseModel):
    id: str = Field(..., description="Stable item identifier")
    title: str = Field(..., description="What needs to be done")
    done: bool = Field(False, description="Whether the item is completed")
    due: Optional[str] = Field(None, description="Optional due date (ISO 8601)")


class ShowTodoInput(BaseModel):
    message: str = Field(..., description="A message to display with the widget.")
    todos: List[TodoItem] = Field(default_factory=list, description="Items to prefill the list with.")


def show_todo(arguments: ShowTodoInput) -> OperationResult:
    return OperationResult.text(
        "Rendered a todo list!",
        structured={
            "message": arguments.message,
            "todos": [item.model_dump(exclude_none=True) for item in arguments.todos],
        },
        meta={"messageLen": len(arguments.message)},
    )


def todo_widget_meta(config: RelayConfig) -> dict:
    resource_domains = ["https://*.oaistatic.com"]
    if not config.inline_assets:
        resource_domains.append(config.base_url)
    return {
        "openai/widgetDescription": "A todo list widget",
        "openai/widgetPrefersBorder": True,
        "openai/widgetDomain": CHATGPT_ORIGIN,
        "openai/widgetCSP": {
            "connect_domains": [CHATGPT_ORIGIN],
            "resource_domains": resource_domains,
        },
    }


def register_todo_widget(operations: OperationRegistry, resources: ResourceRegistry, config: RelayConfig) -> None:
    """Register the todo widget resource and the operation that renders it."""
    meta = todo_widget_meta(config)

    def fetch() -> ResourcePayload:
        if config.inline_assets:
            assets = load_widget_assets(TODO_COMPONENT, config.assets_dir)
        else:
            assets = link_widget_assets(TODO_COMPONENT, config.assets_dir, config.assets_url)
        return ResourcePayload(text=assets.html, mime_type=WIDGET_MIME_TYPE, meta=meta)

    resources.register(
        TODO_WIDGET_URI,
        fetch,
        name="todo-widget",
        description="A todo list widget",
        meta=meta,
    )
    operations.register_operation(
        name="show-todo",
        title="Show Todo List",
        description="Display a todo list widget",
        handler=show_todo,
        input_model=ShowTodoInput,
        ui=OperationUIMetadata(
            output_template=TODO_WIDGET_URI,
            invoking="Creating a todo list",
            invoked="Todo list displayed",
        ),
    )
