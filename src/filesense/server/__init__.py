"""MCP server exposing content-type identification."""

from filesense.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
