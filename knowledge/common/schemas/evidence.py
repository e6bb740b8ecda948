"""
Evidence Schema

Retrieved passages ("evidence cards") and the query plan describing how a
retrieval was satisfied. JSON field names are camelCase because the widget
and the calling agent consume them verbatim.
"""

from datetime import datetime
from typing import List, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# Enums
# ============================================================================

class SourceType(str, Enum):
    """Known origin systems for knowledge base documents"""
    SHAREPOINT = "sharepoint"
    ONELAKE = "onelake"
    WEB = "web"
    FABRIC = "fabric"
    MCP = "mcp"


def normalize_source_type(value: str) -> str:
    """Lower-case a source type, unwrapping SourceType members"""
    if isinstance(value, SourceType):
        return value.value
    return str(value).strip().lower()


# ============================================================================
# Sub-models
# ============================================================================

class ChunkOffsets(BaseModel):
    """Half-open character range [start, end) within the source document"""
    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "ChunkOffsets":
        if self.start > self.end:
            raise ValueError(f"chunk start ({self.start}) must not exceed end ({self.end})")
        return self


class QueryPlanStep(BaseModel):
    """A single step of the retrieval audit trail"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    action: str
    detail: Optional[str] = None
    source: Optional[str] = None
    result_count: Optional[int] = Field(default=None, alias="resultCount", ge=0)


class QueryPlan(BaseModel):
    """
    Audit trail of how a retrieve call was satisfied.

    Immutable once produced; stored alongside a checkpoint for information only.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    steps: List[QueryPlanStep] = Field(default_factory=list)
    sources_consulted: List[str] = Field(default_factory=list, alias="sourcesConsulted")
    total_candidates: int = Field(default=0, ge=0, alias="totalCandidates")
    returned_results: int = Field(default=0, ge=0, alias="returnedResults")


# ============================================================================
# Main Schema
# ============================================================================

class EvidenceItem(BaseModel):
    """
    A single retrieved chunk/passage from the knowledge base.

    source_type accepts any string so new origin systems do not break parsing;
    the SourceType enum lists the ones the widget has badges for.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Stable chunk identifier")
    content: str = Field(default="", description="Passage text")
    title: str = Field(default="Untitled")
    document_url: str = Field(default="", alias="documentUrl")

    source_type: str = Field(..., alias="sourceType")
    source_group: str = Field(default="", alias="sourceGroup")
    purview_labels: List[str] = Field(default_factory=list, alias="purviewLabels")

    page_number: int = Field(default=1, ge=1, alias="pageNumber")
    total_pages: int = Field(default=1, ge=1, alias="totalPages")
    chunk_offsets: ChunkOffsets = Field(..., alias="chunkOffsets")

    relevance_score: float = Field(..., ge=0.0, le=1.0, alias="relevanceScore")
    last_modified: datetime = Field(..., alias="lastModified")

    @field_validator("source_type", mode="before")
    @classmethod
    def _normalize_source_type(cls, value):
        return normalize_source_type(value)

    @field_validator("purview_labels")
    @classmethod
    def _dedupe_labels(cls, value: List[str]) -> List[str]:
        # Sensitivity tags form a set; keep first-seen order for display
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _check_pages(self) -> "EvidenceItem":
        if self.page_number > self.total_pages:
            raise ValueError(
                f"pageNumber ({self.page_number}) exceeds totalPages ({self.total_pages})"
            )
        return self

    def to_json(self) -> dict:
        """Serialize with camelCase keys, as returned by the tools"""
        return self.model_dump(mode="json", by_alias=True)
