"""
Demo Knowledge Base Gateway

Scores the in-memory Contoso corpus by blending each document's relevance
prior with lexical term overlap. Used when no live endpoint is configured.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..common.schemas import EvidenceItem, QueryPlan, QueryPlanStep
from .demo_corpus import load_demo_corpus
from .gateway import RetrievalGateway, DEFAULT_TOP_K

logger = logging.getLogger("foundry_kb.retriever.demo")

PRIOR_WEIGHT = 0.4
OVERLAP_WEIGHT = 0.6
MAX_SCORE = 0.99
MIN_TERM_LENGTH = 3


def extract_terms(query: str) -> List[str]:
    """Lower-cased whitespace tokens longer than two characters"""
    return [t for t in query.lower().split() if len(t) >= MIN_TERM_LENGTH]


def blend_score(prior: float, matched: int, total_terms: int) -> float:
    """combined = 0.4 * prior + 0.6 * matched/total, capped at 0.99 and rounded"""
    if total_terms == 0:
        return prior
    combined = min(MAX_SCORE, prior * PRIOR_WEIGHT + (matched / total_terms) * OVERLAP_WEIGHT)
    return round(combined, 2)


class DemoKnowledgeBaseGateway(RetrievalGateway):
    """
    Keyword-overlap scorer over a fixed corpus.

    Features:
    - Source filtering before ranking
    - Stable sort on combined score
    - Query plan with one retrieve step per consulted source
    """

    name = "demo"

    def __init__(
        self,
        corpus: Optional[List[EvidenceItem]] = None,
        default_top_k: int = DEFAULT_TOP_K,
    ):
        """
        Args:
            corpus: Documents to search (default: Contoso demo corpus)
            default_top_k: Result cap when the caller omits top_k
        """
        super().__init__(default_top_k=default_top_k)
        self._corpus = corpus if corpus is not None else load_demo_corpus()

    @property
    def corpus_size(self) -> int:
        return len(self._corpus)

    async def _retrieve(
        self,
        query: str,
        sources: Optional[set],
        top_k: int,
        filters: Dict[str, Any],
    ) -> Tuple[List[EvidenceItem], QueryPlan]:
        terms = extract_terms(query)

        scored = []
        for doc in self._corpus:
            haystack = f"{doc.title} {doc.content} {doc.source_group}".lower()
            matched = sum(1 for term in terms if term in haystack)
            score = blend_score(doc.relevance_score, matched, len(terms))
            scored.append(doc.model_copy(update={"relevance_score": score}))

        if sources:
            scored = [r for r in scored if r.source_type in sources]

        scored.sort(key=lambda r: r.relevance_score, reverse=True)
        results = scored[:top_k]

        # Preserve first-seen order so the plan reads in rank order
        sources_used = list(dict.fromkeys(r.source_type for r in results))
        steps = [QueryPlanStep(action="decompose", detail=f'Analyzed query: "{query}"')]
        steps.extend(
            QueryPlanStep(
                action="retrieve",
                source=source,
                result_count=sum(1 for r in results if r.source_type == source),
            )
            for source in sources_used
        )
        steps.append(QueryPlanStep(action="rank", detail=f"Semantic ranking across {len(results)} candidates"))

        query_plan = QueryPlan(
            steps=steps,
            sources_consulted=sources_used,
            total_candidates=self.corpus_size,
            returned_results=len(results),
        )
        logger.debug(f"Demo retrieval for {query!r}: {len(results)}/{self.corpus_size} results")
        return results, query_plan
