# tests/test_server.py
import json
import pytest
from unittest.mock import patch

from typing import Any, Dict

from fastmcp import Client

from knowledge.checkpoints import CheckpointService, InMemoryCheckpointStore
from knowledge.common.config import KBConfig
from knowledge.retriever import DemoKnowledgeBaseGateway, RetrievalGateway
from kb_mcp.server import MCPServerApp, build_app
from kb_mcp.server.server import parse_args


def _payload(result) -> Dict[str, Any]:
    """Structured tool output across fastmcp versions."""
    return getattr(result, "data", None) or getattr(result, "structured_content", None)


@pytest.fixture
def mcp_server():
    """
    Create and return a FastMCP server instance for testing.
    Backed by the demo corpus and an in-memory checkpoint store.
    """
    service = CheckpointService(store=InMemoryCheckpointStore(), gateway=DemoKnowledgeBaseGateway())
    app = MCPServerApp(service=service, mcp_server_name="test-kb-mcp")
    return app.mcp  # FastMCP Instance


# ----------- Tool Registration ----------- #
@pytest.mark.asyncio
async def test_tools_registered(mcp_server):
    async with Client(mcp_server) as client:
        tools = await client.list_tools()
        names = sorted(t.name for t in tools)
        assert names == sorted([
            "read_me",
            "knowledge_base_retrieve",
            "navigate_document",
            "filter_sources",
            "pin_evidence",
            "save_checkpoint",
            "read_checkpoint",
        ])


@pytest.mark.asyncio
async def test_read_me(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool("read_me", {})
        text = result.content[0].text
        assert "knowledge_base_retrieve" in text
        assert "checkpointId" in text


# ----------- Retrieve -> Pin -> Read ----------- #
@pytest.mark.asyncio
async def test_retrieve_pin_read_flow(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool(
            "knowledge_base_retrieve",
            {"query": "vendor approval", "sources": ["sharepoint"], "top_k": 2},
        )
        data = _payload(result)
        assert data["ok"] is True
        assert [r["id"] for r in data["results"]] == ["chunk-001", "chunk-002"]
        checkpoint_id = data["checkpointId"]

        result = await client.call_tool(
            "pin_evidence", {"checkpointId": checkpoint_id, "cardIds": ["chunk-001"]}
        )
        pinned = _payload(result)
        assert pinned["ok"] is True
        assert pinned["pinnedIds"] == ["chunk-001"]

        result = await client.call_tool("read_checkpoint", {"id": checkpoint_id})
        read = _payload(result)
        assert read["found"] is True
        stored = json.loads(read["data"])
        assert stored["pinnedIds"] == ["chunk-001"]
        assert len(stored["results"]) == 2


@pytest.mark.asyncio
async def test_filter_sources_on_sharepoint_checkpoint(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool(
            "knowledge_base_retrieve",
            {"query": "vendor approval", "sources": ["sharepoint"], "top_k": 2},
        )
        checkpoint_id = _payload(result)["checkpointId"]

        result = await client.call_tool(
            "filter_sources", {"checkpointId": checkpoint_id, "sourceTypes": ["web"]}
        )
        data = _payload(result)
        assert data["ok"] is True
        assert data["results"] == []

        result = await client.call_tool(
            "filter_sources",
            {"checkpointId": checkpoint_id, "sourceTypes": ["sharepoint"], "minRelevance": 0.96},
        )
        assert [r["id"] for r in _payload(result)["results"]] == ["chunk-001"]


@pytest.mark.asyncio
async def test_pin_unknown_checkpoint(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool(
            "pin_evidence", {"checkpointId": "no-such-checkpoint", "cardIds": ["chunk-001"]}
        )
        data = _payload(result)
        assert data["ok"] is False
        assert data["error_type"] == "not_found"


# ----------- Save / Read ----------- #
@pytest.mark.asyncio
async def test_save_and_read_checkpoint(mcp_server):
    async with Client(mcp_server) as client:
        payload = {"results": [], "pinnedIds": ["a", "b"], "viewMode": "inline"}
        result = await client.call_tool("save_checkpoint", {"id": "widget-1", "data": json.dumps(payload)})
        assert _payload(result)["ok"] is True

        result = await client.call_tool("read_checkpoint", {"id": "widget-1"})
        assert json.loads(_payload(result)["data"]) == payload


@pytest.mark.asyncio
async def test_save_checkpoint_invalid_json(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool("save_checkpoint", {"id": "widget-1", "data": "{oops"})
        data = _payload(result)
        assert data["ok"] is False
        assert data["error_type"] == "malformed_payload"


@pytest.mark.asyncio
async def test_read_checkpoint_missing(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool("read_checkpoint", {"id": "never-saved"})
        data = _payload(result)
        assert data["ok"] is True
        assert data["found"] is False
        assert data["data"] == ""


# ----------- Navigate ----------- #
@pytest.mark.asyncio
async def test_navigate_document(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool(
            "navigate_document",
            {
                "documentUrl": "https://contoso.sharepoint.com/sites/policies/Vendor_Policy_2025.pdf",
                "pageNumber": 7,
                "highlightOffsets": [1420, 1890],
            },
        )
        data = _payload(result)
        assert data["ok"] is True
        assert data["results"]["pageNumber"] == 7
        assert data["results"]["highlightOffsets"] == [1420, 1890]


# ----------- Backend failure ----------- #
class DownGateway(RetrievalGateway):
    async def _retrieve(self, query, sources, top_k, filters):
        raise ConnectionError("search service unreachable")


@pytest.mark.asyncio
async def test_retrieve_backend_failure_is_reported():
    service = CheckpointService(store=InMemoryCheckpointStore(), gateway=DownGateway())
    app = MCPServerApp(service=service, mcp_server_name="test-kb-mcp-down")

    async with Client(app.mcp) as client:
        result = await client.call_tool("knowledge_base_retrieve", {"query": "vendor approval"})
        data = _payload(result)
        assert data["ok"] is False
        assert data["error_type"] == "backend_failure"
        assert "search service unreachable" in data["error"]
        assert await service.store.count() == 0


# ----------- Wiring ----------- #
def test_build_app_uses_demo_gateway_without_credentials():
    app = build_app(KBConfig())
    assert isinstance(app.service.gateway, DemoKnowledgeBaseGateway)
    assert isinstance(app.service.store, InMemoryCheckpointStore)
    assert app.mcp.name == "foundry_kb_mcp_server"


def test_parse_args_overrides():
    with patch.dict("os.environ", {}, clear=True):
        args = parse_args(["--transport", "http", "--port", "9100", "--checkpoint-backend", "file"])
    assert args.transport == "http"
    assert args.port == 9100
    assert args.checkpoint_backend == "file"
    assert args.log_level == "INFO"
