"""Visual display tools (table, image, tree, list, chart, master-detail) over MCP."""

__version__ = "1.0.0"
