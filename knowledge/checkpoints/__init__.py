"""
Checkpoints - retrieval snapshots and the operations over them

Key Components:
- CheckpointStore: save/load with per-key atomic writes and expiry
- CheckpointService: retrieve/filter/pin/save/read/navigate state machine
"""

from .store import (
    CheckpointStore,
    InMemoryCheckpointStore,
    FileCheckpointStore,
    StoreError,
    create_checkpoint_store,
)
from .service import CheckpointService, ErrorType

__all__ = [
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "FileCheckpointStore",
    "StoreError",
    "create_checkpoint_store",
    "CheckpointService",
    "ErrorType",
]
