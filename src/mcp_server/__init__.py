"""MCP tool server for challenge submissions."""

from src.mcp_server.tools import TOOL_DEFINITIONS, ToolHandler, ToolProtocolError


__all__ = ["TOOL_DEFINITIONS", "ToolHandler", "ToolProtocolError"]
