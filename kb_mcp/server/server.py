"""
Foundry IQ Knowledge Base MCP Server.

Transport: stdio (default) or streamable HTTP.

Expected MCP Tool Return Format:
{
    "ok": bool,
    "results": Any,          # Present if ok is True
    "error": str,            # Present if ok is False
    "error_type": str        # Present if ok is False
}
"""

import argparse
import asyncio
import logging
import os
import sys
import signal
from typing import Any, Dict, List, Optional, Annotated

from pydantic import Field
from dotenv import load_dotenv
from fastmcp import FastMCP
from mcp.types import ToolAnnotations

from knowledge.common.config import KBConfig, load_config, ensure_directories
from knowledge.checkpoints import CheckpointService, create_checkpoint_store
from knowledge.retriever import create_gateway
from .reference import READ_ME

logger = logging.getLogger("foundry_kb.mcp")


class MCPServerApp:
    """
    Main application class for the MCP server.

    Tool visibility:
    - read_me, knowledge_base_retrieve: called by the agent
    - filter_sources, pin_evidence, save_checkpoint, read_checkpoint,
      navigate_document: called by the evidence-card widget
    """
    def __init__(
            self,
            service: CheckpointService,
            mcp_server_name: str = "foundry_kb_mcp_server",
        ) -> None:
        """
        Initializes the MCPServerApp with the given service and server name.
        Args:
            service (CheckpointService): Checkpoint state machine backing every tool.
            mcp_server_name (str): The name of the MCP server.
        """
        self.service = service
        self.mcp = FastMCP(name=mcp_server_name)

        # ---------- MCP Tools: Read Me ---------- #
        @self.mcp.tool(
            name="read_me",
            description=(
                "Returns the Foundry IQ Knowledge Base format reference with field descriptions, "
                "usage tips, and examples. Call this BEFORE using knowledge_base_retrieve for the first time."
            ),
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_read_me() -> str:
            """Static usage document for the calling agent."""
            return READ_ME

        # ---------- MCP Tools: Knowledge Base Retrieve ---------- #
        @self.mcp.tool(
            name="knowledge_base_retrieve",
            description=(
                "Retrieves documents from a Foundry IQ knowledge base and renders results as interactive evidence cards. "
                "Results carry source metadata, relevance scores, and deep-links. "
                "Each call creates a new checkpoint whose id is returned as checkpointId. "
                "Call read_me first to learn the format reference."
            ),
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_knowledge_base_retrieve(
            query: Annotated[str, Field(description="The user's search query or question.")],
            sources: Annotated[Optional[List[str]], Field(description="Optional array of source types to filter: sharepoint, onelake, web, fabric, mcp")] = None,
            top_k: Annotated[Optional[int], Field(description="Number of results to return (default: 10)")] = None,
            filters: Annotated[Optional[Dict[str, Any]], Field(description="Optional filter criteria as key-value pairs")] = None,
        ) -> Dict[str, Any]:
            """
            Retrieve evidence and store it as a new checkpoint.

            Returns:
                Dict[str, Any]: results, queryPlan, checkpointId and a text summary.
            """
            return await self.service.retrieve(query=query, sources=sources, top_k=top_k, filters=filters)

        # ---------- MCP Tools: Navigate Document (app-only) ---------- #
        @self.mcp.tool(
            name="navigate_document",
            description="Navigate to a specific page in a document with optional passage highlighting.",
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_navigate_document(
            documentUrl: Annotated[str, Field(description="URL of the document to navigate to")],
            pageNumber: Annotated[int, Field(description="Page number to display (1-based)")],
            highlightOffsets: Annotated[Optional[List[int]], Field(description="Character offsets to highlight [start, end]")] = None,
        ) -> Dict[str, Any]:
            """Echo a validated navigation target for the viewer."""
            return await self.service.navigate(
                document_url=documentUrl,
                page_number=pageNumber,
                highlight_offsets=highlightOffsets,
            )

        # ---------- MCP Tools: Filter Sources (app-only) ---------- #
        @self.mcp.tool(
            name="filter_sources",
            description=(
                "Filter a checkpoint's evidence by source type and minimum relevance score. "
                "The stored checkpoint is not modified."
            ),
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_filter_sources(
            checkpointId: Annotated[str, Field(description="Checkpoint ID to filter")],
            sourceTypes: Annotated[List[str], Field(description="Source types to include")],
            minRelevance: Annotated[Optional[float], Field(description="Minimum relevance score (0-1)")] = None,
        ) -> Dict[str, Any]:
            """Read-only filtered view of a checkpoint's results."""
            return await self.service.filter(
                checkpoint_id=checkpointId,
                source_types=sourceTypes,
                min_relevance=minRelevance,
            )

        # ---------- MCP Tools: Pin Evidence (app-only) ---------- #
        @self.mcp.tool(
            name="pin_evidence",
            description=(
                "Set the pinned evidence cards of a checkpoint for persistence across turns. "
                "cardIds replaces the previous selection; send the full desired set."
            ),
            annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=True)
        )
        async def tool_pin_evidence(
            checkpointId: Annotated[str, Field(description="Checkpoint ID")],
            cardIds: Annotated[List[str], Field(description="IDs of all cards that should be pinned")],
        ) -> Dict[str, Any]:
            """Replace the pinned id set of a checkpoint."""
            return await self.service.pin(checkpoint_id=checkpointId, card_ids=cardIds)

        # ---------- MCP Tools: Save Checkpoint (app-only) ---------- #
        @self.mcp.tool(
            name="save_checkpoint",
            description="Save checkpoint state for persistence. data is serialized JSON of at most 5 MiB.",
            annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True)
        )
        async def tool_save_checkpoint(
            id: Annotated[str, Field(description="Checkpoint ID to create or overwrite")],
            data: Annotated[str, Field(description="Serialized JSON checkpoint payload")],
        ) -> Dict[str, Any]:
            """Overwrite or create a checkpoint with a JSON payload."""
            return await self.service.save(checkpoint_id=id, data=data)

        # ---------- MCP Tools: Read Checkpoint (app-only) ---------- #
        @self.mcp.tool(
            name="read_checkpoint",
            description="Read checkpoint state for restore. Returns an empty data string if the checkpoint is unknown or expired.",
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_read_checkpoint(
            id: Annotated[str, Field(description="Checkpoint ID to read")],
        ) -> Dict[str, Any]:
            """Serialized checkpoint payload, verbatim."""
            return await self.service.read(checkpoint_id=id)

    def run(self, transport: str = "stdio", host: str = "127.0.0.1", port: int = 8000) -> None:
        """Runs the MCP server using the given transport."""
        if transport == "stdio":
            self.mcp.run(transport="stdio")
        elif transport == "http":
            self.mcp.run(transport="http", host=host, port=port)
        else:
            raise ValueError(f"Unsupported transport '{transport}' (expected 'stdio' or 'http')")


def build_app(config: KBConfig) -> MCPServerApp:
    """Wire store, gateway and service from configuration."""
    store = create_checkpoint_store(config)
    gateway = create_gateway(config)
    service = CheckpointService(
        store=store,
        gateway=gateway,
        retrieve_timeout=config.search.timeout_seconds,
        max_payload_bytes=config.checkpoint.max_payload_bytes,
    )
    return MCPServerApp(service=service, mcp_server_name=config.server.name)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Foundry IQ Knowledge Base MCP server.")
    parser.add_argument(
        "--server-name",
        default=None,
        help="Advertised MCP server name (default: MCP_SERVER_NAME or config).",
    )
    parser.add_argument(
        "--transport",
        default=None,
        choices=("stdio", "http"),
        help="MCP transport (default: MCP_TRANSPORT or stdio).",
    )
    parser.add_argument("--host", default=None, help="Bind host for the http transport.")
    parser.add_argument("--port", type=int, default=None, help="Bind port for the http transport.")
    parser.add_argument(
        "--checkpoint-backend",
        default=None,
        choices=("memory", "file"),
        help="Checkpoint store backend (default: KB_CHECKPOINT_BACKEND or memory).",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("KB_LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    args = parse_args(argv)

    # stdout carries the stdio transport; logs go to stderr
    logging.basicConfig(
        level=args.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config()
    if args.server_name:
        config.server.name = args.server_name
    if args.transport:
        config.server.transport = args.transport
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.checkpoint_backend:
        config.checkpoint.backend = args.checkpoint_backend

    ensure_directories(config)
    app = build_app(config)

    def _handle_shutdown(signum, frame):
        raise SystemExit(0)
    for sig in (signal.SIGINT, getattr(signal, "SIGTERM", None)):
        if sig is not None:
            signal.signal(sig, _handle_shutdown)

    logger.info(f"Starting {config.server.name} ({config.server.transport})")
    try:
        app.run(transport=config.server.transport, host=config.server.host, port=config.server.port)
    finally:
        asyncio.run(app.service.gateway.close())


if __name__ == "__main__":
    main()
