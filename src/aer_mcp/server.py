"""
MCP Server for Aer.

Exposes encrypted capture and context search as tools for MCP clients.
"""

import json

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

# Import aer modules
from aer.config import load_settings
from aer.crypto import key_for_settings
from aer.errors import AerError
from aer.ingress import summary_artifact
from aer.notify import NullNotifier
from aer.search import assist_search
from aer.surfacing import full_context, resolve_preview
from aer.upload import upload_artifact

# Create MCP server
server = Server("aer")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="aer_upload",
            description="Encrypt text client-side and upload it to Aer as a context.",
            inputSchema={
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "The text to upload",
                    },
                    "title": {
                        "type": "string",
                        "description": "Optional title",
                    },
                    "url": {
                        "type": "string",
                        "description": "Optional source URL",
                    },
                },
                "required": ["text"],
            },
        ),
        Tool(
            name="aer_upload_summary",
            description="Upload only a short encrypted summary of the text to Aer.",
            inputSchema={
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "The text to summarize and upload",
                    },
                },
                "required": ["text"],
            },
        ),
        Tool(
            name="aer_search",
            description="Search Aer contexts. Returns results ranked by relevance with previews.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query (at least 3 characters)",
                    },
                    "full": {
                        "type": "boolean",
                        "description": "Return the full decrypted context of each result instead of a preview",
                    },
                },
                "required": ["query"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "aer_upload":
            return await tool_upload(arguments)
        elif name == "aer_upload_summary":
            return await tool_upload_summary(arguments)
        elif name == "aer_search":
            return await tool_search(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]
    except (AerError, ValueError) as e:
        return [TextContent(type="text", text=f"Error: {e}")]


async def tool_upload(args: dict) -> list[TextContent]:
    """Upload text."""
    text = str(args.get("text") or "").strip()
    if not text:
        return [TextContent(type="text", text="Error: Empty text")]

    artifact = {"content": text, "metadata": {"context": "mcp"}}
    for field in ("title", "url"):
        if args.get(field):
            artifact[field] = args[field]

    result = await upload_artifact(artifact, settings=load_settings(), notifier=NullNotifier())
    return [TextContent(type="text", text=f"Uploaded: {json.dumps(result)}")]


async def tool_upload_summary(args: dict) -> list[TextContent]:
    """Upload a summary-only capture."""
    text = str(args.get("text") or "").strip()
    if not text:
        return [TextContent(type="text", text="Error: Empty text")]

    artifact = summary_artifact(text, {"context": "mcp_summary"})
    result = await upload_artifact(artifact, settings=load_settings(), notifier=NullNotifier())
    return [TextContent(type="text", text=f"Uploaded summary: {json.dumps(result)}")]


async def tool_search(args: dict) -> list[TextContent]:
    """Search contexts."""
    query = str(args.get("query") or "").strip()
    if not query:
        return [TextContent(type="text", text="Error: Empty query")]

    settings = load_settings()
    key = key_for_settings(settings)
    ranked = await assist_search(query[:500], settings)

    if not ranked:
        return [TextContent(type="text", text=f"No contexts matching '{query}'.")]

    if args.get("full"):
        blocks = []
        for item in ranked:
            title = item.get("title") or "(untitled)"
            context = full_context(item, key) or "Unable to decrypt this context"
            blocks.append(f"[{item['_score']:.1f}] {title}\n{context}")
        return [TextContent(type="text", text="\n\n---\n\n".join(blocks))]

    lines = []
    for item in ranked:
        title = item.get("title") or "(untitled)"
        lines.append(f"[{item['_score']:.1f}] {title}")
        if item.get("url"):
            lines.append(f"  {item['url']}")
        lines.append(f"  {resolve_preview(item, key)}")
        lines.append("")

    return [TextContent(type="text", text="\n".join(lines).rstrip())]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    """Console script entry point."""
    import asyncio
    asyncio.run(main())


if __name__ == "__main__":
    run()
