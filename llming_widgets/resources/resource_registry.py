"""Registry of fetchable resources (widget markup) served by uri."""
import logging
from typing import Any, Callable, Dict, List, Optional

from mcp import types
from pydantic import BaseModel, ConfigDict, Field

from llming_widgets.errors import DuplicateUriError, UnknownResourceError

logger = logging.getLogger(__name__)

WIDGET_MIME_TYPE = "text/html+skybridge"


class ResourcePayload(BaseModel):
    """Content returned by a resource's fetch function."""
    text: str
    mime_type: str = WIDGET_MIME_TYPE
    meta: Optional[Dict[str, Any]] = None


class ResourceDefinition(BaseModel):
    """A named resource with a lazily evaluated fetch function."""
    uri: str = Field(..., description="Unique resource identifier, e.g. ui://widget/todo.html")
    name: str = Field(..., description="Short resource name")
    description: Optional[str] = None
    mime_type: str = WIDGET_MIME_TYPE
    meta: Optional[Dict[str, Any]] = Field(None, description="Display metadata (framing, CSP, domain)")
    fetch: Callable[[], ResourcePayload] = Field(..., exclude=True)

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    def to_mcp_resource(self) -> types.Resource:
        return types.Resource.model_validate({
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
            "_meta": self.meta,
        })


class ResourceRegistry:
    """Maps resource uris to their definitions."""

    def __init__(self):
        self._resources: Dict[str, ResourceDefinition] = {}

    def add(self, resource: ResourceDefinition) -> None:
        """Add a prebuilt resource definition.

        Raises:
            DuplicateUriError: If the uri is already registered
        """
        if resource.uri in self._resources:
            raise DuplicateUriError(resource.uri)
        self._resources[resource.uri] = resource
        logger.debug(f"[RESOURCES] Registered resource: {resource.uri}")

    def register(
        self,
        uri: str,
        fetch: Callable[[], ResourcePayload],
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        mime_type: str = WIDGET_MIME_TYPE,
        meta: Optional[Dict[str, Any]] = None,
    ) -> ResourceDefinition:
        """Register a fetch function under ``uri``.

        Returns:
            The registered ResourceDefinition
        """
        resource = ResourceDefinition(
            uri=uri,
            name=name or uri,
            description=description,
            mime_type=mime_type,
            meta=meta,
            fetch=fetch,
        )
        self.add(resource)
        return resource

    def get(self, uri: str) -> Optional[ResourceDefinition]:
        return self._resources.get(uri)

    def get_all(self) -> List[ResourceDefinition]:
        return list(self._resources.values())

    def has(self, uri: str) -> bool:
        return uri in self._resources

    def resolve(self, uri: str) -> ResourcePayload:
        """Fetch the payload of a registered resource.

        Raises:
            UnknownResourceError: If no resource has this uri
            AssetNotFoundError: If the fetch function needs a missing build artifact
        """
        resource = self._resources.get(uri)
        if resource is None:
            raise UnknownResourceError(uri)
        payload = resource.fetch()
        if isinstance(payload, str):
            payload = ResourcePayload(text=payload, mime_type=resource.mime_type, meta=resource.meta)
        return payload
