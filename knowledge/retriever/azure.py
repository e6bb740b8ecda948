"""
Azure AI Search Knowledge Base Gateway

Calls the knowledge base retrieve API of an Azure AI Search service
(2025-11-01-preview) and normalizes its response into EvidenceItems.
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from ..common.config import DEFAULT_API_VERSION
from ..common.schemas import EvidenceItem, QueryPlan, QueryPlanStep
from .gateway import RetrievalGateway, RetrievalError, DEFAULT_TOP_K

logger = logging.getLogger("foundry_kb.retriever.azure")


def _first(item: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Value of the first key present (and not None) in item"""
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return default


def _clamp_score(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(1.0, score))


def normalize_item(item: Dict[str, Any]) -> EvidenceItem:
    """
    Map one raw search hit onto EvidenceItem, filling gaps with defaults.

    Raises:
        ValidationError: If the hit cannot be made into a valid item
    """
    content = _first(item, "content", "text", default="")
    total_pages = _first(item, "totalPages", default=1)
    page_number = _first(item, "pageNumber", default=1)
    return EvidenceItem.model_validate({
        "id": str(_first(item, "id", "chunkId", default=uuid.uuid4().hex)),
        "content": content,
        "title": _first(item, "title", "documentTitle", default="Untitled"),
        "documentUrl": _first(item, "documentUrl", "url", default=""),
        "sourceType": _first(item, "sourceType", default="sharepoint"),
        "pageNumber": page_number,
        "totalPages": max(total_pages, page_number),
        "chunkOffsets": _first(item, "chunkOffsets", default={"start": 0, "end": len(content)}),
        "relevanceScore": _clamp_score(_first(item, "relevanceScore", "@search.score", default=0.0)),
        "lastModified": _first(item, "lastModified", default=datetime.now(timezone.utc).isoformat()),
        "purviewLabels": _first(item, "purviewLabels", default=[]),
        "sourceGroup": _first(item, "sourceGroup", default=""),
    })


class AzureKnowledgeBaseGateway(RetrievalGateway):
    """
    Live gateway for an Azure AI Search knowledge base.

    Usage:
        gateway = AzureKnowledgeBaseGateway(
            endpoint="https://my-search.search.windows.net",
            api_key="...",
            kb_name="contoso-kb",
        )
        outcome = await gateway.retrieve("vendor approval", top_k=5)
        await gateway.close()
    """

    name = "azure"

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        kb_name: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        default_top_k: int = DEFAULT_TOP_K,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            endpoint: Search service URL
            api_key: Admin or query key sent as the api-key header
            kb_name: Knowledge base name
            api_version: REST API version
            timeout: Per-request timeout in seconds
            default_top_k: Result cap when the caller omits top_k
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        super().__init__(default_top_k=default_top_k)
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.kb_name = kb_name
        self.api_version = api_version
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def retrieve_url(self) -> str:
        return f"{self.endpoint}/knowledgebases/{self.kb_name}/retrieve"

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _retrieve(
        self,
        query: str,
        sources: Optional[set],
        top_k: int,
        filters: Dict[str, Any],
    ) -> Tuple[List[EvidenceItem], QueryPlan]:
        body: Dict[str, Any] = {"search": query, "top": top_k}
        if sources:
            body["sources"] = sorted(sources)
        if filters:
            body["filter"] = filters

        response = await self._ensure_client().post(
            self.retrieve_url,
            params={"api-version": self.api_version},
            headers={"Content-Type": "application/json", "api-key": self.api_key},
            json=body,
        )
        if response.status_code >= 400:
            raise RetrievalError(
                f"Azure AI Search KB API error ({response.status_code}): {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RetrievalError(f"Azure AI Search KB API returned invalid JSON: {e}") from e

        raw_items = _first(data, "value", "results", default=[])
        results = []
        for raw in raw_items:
            try:
                results.append(normalize_item(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed search hit {raw.get('id', '?')}: {e}")

        query_plan = None
        if data.get("queryPlan"):
            try:
                query_plan = QueryPlan.model_validate(data["queryPlan"])
            except ValidationError as e:
                logger.warning(f"Ignoring malformed queryPlan from service: {e}")
        if query_plan is None:
            query_plan = QueryPlan(
                steps=[QueryPlanStep(action="retrieve", detail=f'Search for: "{query}"')],
                sources_consulted=list(dict.fromkeys(r.source_type for r in results)),
                total_candidates=int(data.get("@odata.count", len(results))),
                returned_results=len(results),
            )

        return results, query_plan
