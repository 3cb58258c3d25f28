from .resource_registry import (
    ResourceDefinition,
    ResourcePayload,
    ResourceRegistry,
    WIDGET_MIME_TYPE,
)
from .widget_assets import WidgetAssets, load_widget_assets, link_widget_assets, check_assets_dir

__all__ = [
    "ResourceDefinition",
    "ResourcePayload",
    "ResourceRegistry",
    "WIDGET_MIME_TYPE",
    "WidgetAssets",
    "load_widget_assets",
    "link_widget_assets",
    "check_assets_dir",
]
