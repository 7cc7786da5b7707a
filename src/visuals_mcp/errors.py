"""Exception types raised by the visuals MCP server."""

from __future__ import annotations


class VisualsMCPError(Exception):
    """Base class for errors surfaced to the caller as a failed invocation."""


class ValidationError(VisualsMCPError):
    """Tool arguments do not match the tool's declared input shape."""

    def __init__(self, path: str, problem: str) -> None:
        self.path = path
        self.problem = problem
        super().__init__(f"{path}: {problem}" if path else problem)


class UnknownToolError(VisualsMCPError):
    """The invoked tool name is not in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class UnknownResourceError(VisualsMCPError):
    """The requested resource URI is not in the catalog."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Unknown resource: {uri}")


class ResourceReadError(VisualsMCPError):
    """A known resource's backing payload could not be read."""


class PreconditionError(VisualsMCPError):
    """A query-type tool was invoked before any table was displayed."""


class ImageSourceError(VisualsMCPError):
    """An image source could not be normalized for the renderer."""
