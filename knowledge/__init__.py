"""
Foundry KB Knowledge Core

Checkpoint-backed retrieval for the Foundry IQ Knowledge Base MCP server.

Philosophy:
- A new query is a new evidentiary context: every retrieve mints a checkpoint
- Filtering is a read-only view; the full result set stays recoverable
- Pins are replaced, never toggled: the caller always submits its full selection
- Checkpoints are conversational state, not permanent records (they expire)

Usage:
    from knowledge.common import load_config
    from knowledge.common.schemas import EvidenceItem, QueryPlan, Checkpoint
    from knowledge.checkpoints import CheckpointService, create_checkpoint_store
    from knowledge.retriever import create_gateway
"""

__version__ = "0.1.0"
