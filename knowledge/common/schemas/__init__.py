"""
Foundry KB Schemas

Evidence items, query plans and checkpoints exchanged with the agent host.
"""

from .evidence import (
    EvidenceItem,
    ChunkOffsets,
    QueryPlan,
    QueryPlanStep,
    SourceType,
    normalize_source_type,
)
from .checkpoint import Checkpoint, generate_checkpoint_id, CHECKPOINT_ID_LENGTH
from .templates import render_results_text

__all__ = [
    "EvidenceItem",
    "ChunkOffsets",
    "QueryPlan",
    "QueryPlanStep",
    "SourceType",
    "normalize_source_type",
    "Checkpoint",
    "generate_checkpoint_id",
    "CHECKPOINT_ID_LENGTH",
    "render_results_text",
]
