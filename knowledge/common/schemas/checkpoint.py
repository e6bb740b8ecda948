"""
Checkpoint Schema

A checkpoint is a server-held, id-addressed snapshot of one retrieval's result
set plus the user's pin selection. It is created by a retrieve call, read by
filter/pin/read calls, and superseded (never mutated) by the next retrieve.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .evidence import EvidenceItem, QueryPlan

CHECKPOINT_ID_LENGTH = 18


def generate_checkpoint_id() -> str:
    """Generate a checkpoint id: 18 hex chars of a random UUID4 (72 random bits)"""
    return uuid.uuid4().hex[:CHECKPOINT_ID_LENGTH]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Checkpoint(BaseModel):
    """
    Stored retrieval snapshot.

    pinned_ids is replaced wholesale by pin calls. Older widget builds wrote
    the field as ``pinnedCardIds``; both spellings are accepted on input.
    """
    model_config = ConfigDict(populate_by_name=True)

    results: List[EvidenceItem] = Field(default_factory=list)
    pinned_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("pinnedIds", "pinnedCardIds", "pinned_ids"),
        serialization_alias="pinnedIds",
    )
    query_plan: Optional[QueryPlan] = Field(
        default=None,
        validation_alias=AliasChoices("queryPlan", "query_plan"),
        serialization_alias="queryPlan",
    )
    query: Optional[str] = None
    created_at: datetime = Field(
        default_factory=_utcnow,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )

    @field_validator("pinned_ids")
    @classmethod
    def _dedupe_pins(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    def to_json(self) -> dict:
        """Serialize with camelCase keys for storage and for read_checkpoint"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
