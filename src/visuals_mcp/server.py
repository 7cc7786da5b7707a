"""MCP Server for visuals - lets an AI show tables, images, trees, lists and charts.

This server provides:
- Display tools whose results carry a UI payload for a companion renderer
- Server-side filtering, sorting, pagination and export of the last table shown
- HTML renderer bundles as resources, one per display tool
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl

from .config import ServerConfig
from .dispatcher import ToolDispatcher
from .errors import ResourceReadError, UnknownResourceError, VisualsMCPError
from .images import ImageSourceResolver
from .resources import RESOURCES, ResourceCatalog
from .tools import default_registry

config = ServerConfig.from_env()

# Configure logging
logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# MCP Server instance
server = Server("visuals-mcp")
dispatcher: ToolDispatcher | None = None
catalog: ResourceCatalog | None = None


def get_dispatcher() -> ToolDispatcher:
    """Get or create the tool dispatcher and the dataset store it owns."""
    global dispatcher
    if dispatcher is None:
        dispatcher = ToolDispatcher(
            registry=default_registry(),
            images=ImageSourceResolver(config),
        )
    return dispatcher


def get_catalog() -> ResourceCatalog:
    """Get or create the resource catalog."""
    global catalog
    if catalog is None:
        catalog = ResourceCatalog(RESOURCES, config.ui_dir)
    return catalog


def _error_result(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=message)],
        isError=True,
    )


# =============================================================================
# Tools
# =============================================================================


@server.list_tools()  # type: ignore
async def list_tools() -> list[types.Tool]:
    """List available visual tools."""
    return [tool.to_mcp_tool() for tool in get_dispatcher().registry.list()]


@server.call_tool(validate_input=False)  # type: ignore
async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
    """Handle tool calls."""
    try:
        response = await get_dispatcher().dispatch(name, arguments)
    except VisualsMCPError as e:
        logger.warning(f"Tool {name} failed: {e}")
        return _error_result(f"Error: {e}")
    except Exception as e:
        logger.exception(f"Error calling tool {name}")
        return _error_result(f"Error: {str(e)}")
    return types.CallToolResult.model_validate(response.to_dict())


# =============================================================================
# Resources
# =============================================================================


@server.list_resources()  # type: ignore
async def list_resources() -> list[types.Resource]:
    """List renderer bundles."""
    return [descriptor.to_mcp_resource() for descriptor in get_catalog().list()]


@server.read_resource()  # type: ignore
async def read_resource(uri: AnyUrl | str) -> list[ReadResourceContents]:
    """Read a renderer bundle by URI."""
    resources = get_catalog()
    key = str(uri)
    descriptor = resources.describe(key)
    if descriptor is None:
        error = UnknownResourceError(key)
        raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(error)))
    try:
        text = resources.read(key)
    except ResourceReadError as e:
        raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=str(e))) from e

    return [ReadResourceContents(content=text, mime_type=descriptor.mime_type)]


async def main() -> None:
    """Run the MCP server."""
    logger.info("Starting visuals MCP server")

    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        if dispatcher is not None:
            await dispatcher.images.close()


def run() -> None:
    """Entry point for the MCP server."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
