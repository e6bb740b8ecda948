"""
Foundry IQ Knowledge Base MCP surface

Exposes the checkpoint service as MCP tools (FastMCP).

Usage:
    python -m kb_mcp.server --transport stdio
"""
