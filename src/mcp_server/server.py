"""MCP stdio server exposing the submission tools."""

import json
import logging
import uuid
from typing import Any

import anyio
import anyio.to_thread
import click
import mcp.types as types
import structlog
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from src.mcp_server.tools import TOOL_DEFINITIONS, ToolHandler, ToolProtocolError
from src.observability.logging import bind_run_context, configure_logging
from src.settings.app import get_settings
from src.submissions.factory import build_service


logger = structlog.get_logger()

SERVER_NAME = "challenge-submissions"
SERVER_VERSION = "0.1.0"


def create_server(handler: ToolHandler) -> Server:
    """Build an MCP server whose tools delegate to a ToolHandler.

    Tool calls run one at a time in a worker thread, since the handler does
    blocking network and file I/O.

    Args:
        handler: Transport-free tool dispatcher.

    Returns:
        Configured low-level MCP server.
    """
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)
    call_lock = anyio.Lock()

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [types.Tool(**definition) for definition in TOOL_DEFINITIONS]

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        name = request.params.name
        arguments: dict[str, Any] | None = request.params.arguments
        async with call_lock:
            try:
                payload = await anyio.to_thread.run_sync(
                    handler.call, name, arguments
                )
            except ToolProtocolError as e:
                logger.warning(
                    "tool_call_rejected",
                    component="mcp_server",
                    tool=name,
                    code=e.code,
                )
                raise McpError(types.ErrorData(code=e.code, message=e.message)) from e

        return types.ServerResult(
            types.CallToolResult(
                content=[
                    types.TextContent(
                        type="text",
                        text=json.dumps(payload, indent=2, ensure_ascii=False),
                    )
                ],
                isError=False,
            )
        )

    # Protocol errors propagate to the session; ToolHandler alone checks arguments
    server.request_handlers[types.CallToolRequest] = call_tool
    return server


async def serve(handler: ToolHandler) -> None:
    """Serve tools over stdin/stdout until the client disconnects."""
    server = create_server(handler)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("mcp_server_started", component="mcp_server", name=SERVER_NAME)
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )


@click.command()
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs (default: true).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def main(json_logs: bool, verbose: bool) -> None:
    """Run the challenge submissions MCP server on stdio."""
    run_id = str(uuid.uuid4())
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        json_format=json_logs,
    )
    bind_run_context(run_id)

    service = build_service(get_settings(), run_id=run_id)
    anyio.run(serve, ToolHandler(service))


if __name__ == "__main__":
    main()
