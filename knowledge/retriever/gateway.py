"""
Retrieval Gateway

Pluggable search backend interface. A gateway turns a query into ranked
EvidenceItems plus a QueryPlan, and reports backend failures as an explicit
outcome rather than raising, so callers can tell "retrieval failed" apart
from "zero results".
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError

from ..common.schemas import EvidenceItem, QueryPlan, normalize_source_type

logger = logging.getLogger("foundry_kb.retriever")

DEFAULT_TOP_K = 10


class RetrievalError(Exception):
    """Search backend failed to answer a query."""
    pass


@dataclass
class RetrievalOutcome:
    """Result of a gateway call."""
    ok: bool
    results: List[EvidenceItem] = field(default_factory=list)
    query_plan: Optional[QueryPlan] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "RetrievalOutcome":
        return cls(ok=False, results=[], query_plan=None, error=error)


class RetrievalGateway(ABC):
    """
    Base class for search backends.

    retrieve() validates arguments, delegates to _retrieve(), and converts
    any backend exception into a failed RetrievalOutcome. Subclasses only
    implement _retrieve() and may raise freely.
    """

    #: Short label used in logs and the read_me document
    name: str = "gateway"

    def __init__(self, default_top_k: int = DEFAULT_TOP_K):
        self.default_top_k = default_top_k

    async def retrieve(
        self,
        query: str,
        sources: Optional[Sequence[str]] = None,
        top_k: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> RetrievalOutcome:
        """
        Retrieve evidence for a query.

        Args:
            query: Natural-language query
            sources: Optional source types; only matching items are returned
            top_k: Maximum number of results (default: default_top_k)
            filters: Backend-specific filter criteria

        Returns:
            RetrievalOutcome; never raises for a well-formed query
        """
        if top_k is None:
            top_k = self.default_top_k
        if top_k < 1:
            return RetrievalOutcome.failure(f"top_k must be at least 1 (got {top_k})")

        source_set = None
        if sources:
            source_set = {normalize_source_type(s) for s in sources}

        try:
            results, query_plan = await self._retrieve(query, source_set, top_k, filters or {})
        except (RetrievalError, httpx.HTTPError, ValidationError) as e:
            logger.warning(f"[{self.name}] retrieval failed: {e}")
            return RetrievalOutcome.failure(str(e))
        except Exception as e:
            logger.exception(f"[{self.name}] unexpected retrieval error")
            return RetrievalOutcome.failure(f"{type(e).__name__}: {e}")

        # Contract enforcement regardless of backend behaviour
        if source_set is not None:
            results = [r for r in results if r.source_type in source_set]
        results = sorted(results, key=lambda r: r.relevance_score, reverse=True)[:top_k]

        return RetrievalOutcome(ok=True, results=results, query_plan=query_plan)

    @abstractmethod
    async def _retrieve(
        self,
        query: str,
        sources: Optional[set],
        top_k: int,
        filters: Dict[str, Any],
    ) -> Tuple[List[EvidenceItem], QueryPlan]:
        """Backend-specific retrieval; may raise RetrievalError"""

    async def close(self) -> None:
        """Release backend resources (no-op by default)"""
        return None
