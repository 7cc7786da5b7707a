"""Static catalog of renderer resources, keyed by URI."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from mcp import types

from .errors import ResourceReadError, UnknownResourceError

logger = logging.getLogger(__name__)

HTML_MIME_TYPE = "text/html"


@dataclass(frozen=True)
class ResourceDescriptor:
    """A renderer bundle: one self-contained HTML file in the UI directory."""

    uri: str
    name: str
    description: str
    filename: str
    mime_type: str = HTML_MIME_TYPE

    def to_mcp_resource(self) -> types.Resource:
        return types.Resource.model_validate(
            {
                "uri": self.uri,
                "name": self.name,
                "description": self.description,
                "mimeType": self.mime_type,
            }
        )


class ResourceCatalog:
    """Maps resource URIs to renderer payloads on disk."""

    def __init__(self, descriptors: Iterable[ResourceDescriptor], ui_dir: Path) -> None:
        self.ui_dir = ui_dir
        self._resources: dict[str, ResourceDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.uri in self._resources:
                raise ValueError(f"Duplicate resource uri: {descriptor.uri}")
            self._resources[descriptor.uri] = descriptor

    def list(self) -> list[ResourceDescriptor]:
        return list(self._resources.values())

    def describe(self, uri: str) -> ResourceDescriptor | None:
        return self._resources.get(uri)

    def read(self, uri: str) -> str:
        """Return the payload text for ``uri``.

        Raises:
            UnknownResourceError: If ``uri`` is not in the catalog.
            ResourceReadError: If the backing file cannot be read.
        """
        descriptor = self.describe(uri)
        if descriptor is None:
            raise UnknownResourceError(uri)

        path = self.ui_dir / descriptor.filename
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read resource {uri} from {path}: {e}")
            raise ResourceReadError(
                f"Failed to read resource {uri} from {path}. "
                f"Make sure the renderer bundles are built. Error: {e}"
            ) from e


RESOURCES = [
    ResourceDescriptor(
        uri="table://display",
        name="Interactive Table Display",
        description="HTML resource for rendering interactive tables",
        filename="table.html",
    ),
    ResourceDescriptor(
        uri="image://display",
        name="Image Preview",
        description="HTML resource for previewing images with title and caption",
        filename="image.html",
    ),
    ResourceDescriptor(
        uri="tree://display",
        name="Tree View",
        description="HTML resource for rendering collapsible trees",
        filename="tree.html",
    ),
    ResourceDescriptor(
        uri="list://display",
        name="List View",
        description="HTML resource for rendering checkable, reorderable lists",
        filename="list.html",
    ),
    ResourceDescriptor(
        uri="chart://display",
        name="Chart View",
        description="HTML resource for rendering line, bar, area, pie and scatter charts",
        filename="chart.html",
    ),
    ResourceDescriptor(
        uri="master-detail://display",
        name="Master-Detail View",
        description="HTML resource for rendering a master list with a detail panel",
        filename="master-detail.html",
    ),
]
