"""
Checkpoint Service

The tool dispatch layer: retrieve, filter, pin, save, read and navigate
operations over the checkpoint store.

Return Format (every operation):
{
    "ok": bool,
    ...operation fields...,  # Present if ok is True
    "error": str,            # Present if ok is False
    "error_type": str        # not_found | payload_too_large | malformed_payload |
                             # backend_failure | invalid_argument | store_failure
}

Transitions:
- retrieve mints a brand-new checkpoint (results from the gateway, no pins)
- filter is a read-only view of a checkpoint's stored results
- pin replaces the pinned id list with exactly what the caller submits
- save/read move arbitrary JSON payloads in and out of the store

Pins are not carried forward by retrieve. The caller reads the old
checkpoint's pinnedIds and pins them onto the new checkpoint.
"""

import json
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..common.config import MAX_CHECKPOINT_BYTES
from ..common.schemas import (
    Checkpoint,
    generate_checkpoint_id,
    normalize_source_type,
    render_results_text,
)
from ..retriever.gateway import RetrievalGateway
from .store import CheckpointStore, StoreError

logger = logging.getLogger("foundry_kb.checkpoints.service")

MAX_ID_ATTEMPTS = 5


class ErrorType(str, Enum):
    """Failure categories reported to the caller"""
    NOT_FOUND = "not_found"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    MALFORMED_PAYLOAD = "malformed_payload"
    BACKEND_FAILURE = "backend_failure"
    INVALID_ARGUMENT = "invalid_argument"
    STORE_FAILURE = "store_failure"


def failure(error_type: ErrorType, message: str) -> Dict[str, Any]:
    """Build the structured error result returned by every operation"""
    return {"ok": False, "error": message, "error_type": error_type.value}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class CheckpointService:
    """
    State machine over checkpoints.

    Usage:
        service = CheckpointService(store=InMemoryCheckpointStore(), gateway=DemoKnowledgeBaseGateway())
        retrieved = await service.retrieve("vendor approval", sources=["sharepoint"], top_k=2)
        await service.pin(retrieved["checkpointId"], ["chunk-001"])
    """

    def __init__(
        self,
        store: CheckpointStore,
        gateway: RetrievalGateway,
        retrieve_timeout: float = 30.0,
        max_payload_bytes: int = MAX_CHECKPOINT_BYTES,
    ):
        """
        Args:
            store: Checkpoint store
            gateway: Retrieval backend
            retrieve_timeout: Upper bound in seconds on one gateway call
            max_payload_bytes: Size ceiling for save(), in UTF-8 bytes
        """
        self.store = store
        self.gateway = gateway
        self.retrieve_timeout = retrieve_timeout
        self.max_payload_bytes = max_payload_bytes

    # ------------------- Retrieve ------------------- #

    async def _new_checkpoint_id(self) -> str:
        """Mint an id not currently present in the store"""
        for _ in range(MAX_ID_ATTEMPTS):
            checkpoint_id = generate_checkpoint_id()
            if await self.store.load(checkpoint_id) is None:
                return checkpoint_id
            logger.warning(f"Checkpoint id collision on {checkpoint_id}; regenerating")
        raise StoreError(f"Could not mint an unused checkpoint id after {MAX_ID_ATTEMPTS} attempts")

    async def retrieve(
        self,
        query: str,
        sources: Optional[Sequence[str]] = None,
        top_k: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Run a retrieval and store its results as a new checkpoint.

        Returns:
            {"ok": True, "results", "queryPlan", "checkpointId", "summary"}
        """
        if not isinstance(query, str) or not query.strip():
            return failure(ErrorType.INVALID_ARGUMENT, "query must be a non-empty string.")
        if top_k is not None and top_k < 1:
            return failure(ErrorType.INVALID_ARGUMENT, f"top_k must be at least 1 (got {top_k}).")

        try:
            outcome = await asyncio.wait_for(
                self.gateway.retrieve(query, sources=sources, top_k=top_k, filters=filters),
                timeout=self.retrieve_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Retrieval timed out after {self.retrieve_timeout}s for query {query!r}")
            return failure(
                ErrorType.BACKEND_FAILURE,
                f"Knowledge base retrieval failed: timed out after {self.retrieve_timeout}s",
            )
        except Exception as e:
            logger.exception("Retrieval gateway raised unexpectedly")
            return failure(ErrorType.BACKEND_FAILURE, f"Knowledge base retrieval failed: {e}")

        if not outcome.ok:
            return failure(ErrorType.BACKEND_FAILURE, f"Knowledge base retrieval failed: {outcome.error}")

        checkpoint = Checkpoint(results=outcome.results, query_plan=outcome.query_plan, query=query)
        try:
            checkpoint_id = await self._new_checkpoint_id()
            await self.store.save(checkpoint_id, checkpoint.to_json())
        except StoreError as e:
            logger.error(f"Failed to store checkpoint: {e}")
            return failure(ErrorType.STORE_FAILURE, f"Failed to store checkpoint: {e}")

        logger.info(f"Created checkpoint {checkpoint_id} with {len(outcome.results)} results")

        query_plan = None
        if outcome.query_plan is not None:
            query_plan = outcome.query_plan.model_dump(mode="json", by_alias=True, exclude_none=True)

        return {
            "ok": True,
            "results": [r.to_json() for r in outcome.results],
            "queryPlan": query_plan,
            "checkpointId": checkpoint_id,
            "summary": render_results_text(query, outcome.results, checkpoint_id),
        }

    # ------------------- Filter ------------------- #

    async def filter(
        self,
        checkpoint_id: str,
        source_types: Sequence[str],
        min_relevance: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Return the stored results matching the source types and score floor.

        Never mutates the checkpoint. A missing or expired checkpoint yields
        {"ok": True, "found": False, "results": []}.
        """
        try:
            data = await self.store.load(checkpoint_id)
        except StoreError as e:
            return failure(ErrorType.STORE_FAILURE, f"Filter failed: {e}")

        if data is None:
            return {"ok": True, "found": False, "checkpointId": checkpoint_id, "results": []}

        results = data.get("results", []) if isinstance(data, dict) else None
        if not isinstance(results, list):
            return failure(
                ErrorType.MALFORMED_PAYLOAD,
                f"Checkpoint \"{checkpoint_id}\" does not hold a results list.",
            )

        # Stored items are filtered and returned verbatim; widget-written
        # state need not carry every EvidenceItem field.
        wanted = {normalize_source_type(s) for s in source_types}
        filtered = []
        for item in results:
            if not isinstance(item, dict) or "sourceType" not in item or not _is_number(item.get("relevanceScore")):
                return failure(
                    ErrorType.MALFORMED_PAYLOAD,
                    f"Checkpoint \"{checkpoint_id}\" has a result without sourceType/relevanceScore.",
                )
            if normalize_source_type(item["sourceType"]) not in wanted:
                continue
            if min_relevance is not None and item["relevanceScore"] < min_relevance:
                continue
            filtered.append(item)

        return {
            "ok": True,
            "found": True,
            "checkpointId": checkpoint_id,
            "results": filtered,
        }

    # ------------------- Pin ------------------- #

    async def pin(self, checkpoint_id: str, card_ids: List[str]) -> Dict[str, Any]:
        """
        Replace the checkpoint's pinned ids with exactly card_ids.

        Not a toggle: the caller submits the full desired selection.
        Fails with not_found if the checkpoint does not exist.
        """
        try:
            data = await self.store.load(checkpoint_id)
        except StoreError as e:
            return failure(ErrorType.STORE_FAILURE, f"Pin failed: {e}")

        if data is None:
            return failure(ErrorType.NOT_FOUND, f"Checkpoint \"{checkpoint_id}\" not found.")
        if not isinstance(data, dict):
            return failure(
                ErrorType.MALFORMED_PAYLOAD,
                f"Checkpoint \"{checkpoint_id}\" is not an object; cannot pin.",
            )

        pinned_ids = list(dict.fromkeys(card_ids))
        data.pop("pinnedCardIds", None)
        data["pinnedIds"] = pinned_ids

        results = data.get("results")
        if not isinstance(results, list):
            results = []
        known = {r.get("id") for r in results if isinstance(r, dict)}
        carried = [cid for cid in pinned_ids if cid not in known]
        if carried:
            logger.debug(f"Checkpoint {checkpoint_id}: pins not in current results {carried}")

        try:
            await self.store.save(checkpoint_id, data)
        except StoreError as e:
            return failure(ErrorType.STORE_FAILURE, f"Pin failed: {e}")

        return {"ok": True, "results": "ok", "checkpointId": checkpoint_id, "pinnedIds": pinned_ids}

    # ------------------- Generic save / read ------------------- #

    async def save(self, checkpoint_id: str, data: str) -> Dict[str, Any]:
        """
        Create or overwrite a checkpoint with an arbitrary JSON payload.

        The size ceiling is checked on the UTF-8 encoding before parsing, so
        an oversized payload is rejected without touching the store.
        """
        if not checkpoint_id:
            return failure(ErrorType.INVALID_ARGUMENT, "Checkpoint id must be a non-empty string.")

        try:
            size = len(data.encode("utf-8"))
        except UnicodeEncodeError as e:
            return failure(ErrorType.MALFORMED_PAYLOAD, f"Checkpoint data is not valid UTF-8 text: {e}")
        if size > self.max_payload_bytes:
            return failure(
                ErrorType.PAYLOAD_TOO_LARGE,
                f"Checkpoint data exceeds {self.max_payload_bytes} byte limit ({size} bytes).",
            )

        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as e:
            return failure(ErrorType.MALFORMED_PAYLOAD, f"Checkpoint data is not valid JSON: {e}")

        try:
            await self.store.save(checkpoint_id, parsed)
        except StoreError as e:
            return failure(ErrorType.STORE_FAILURE, f"save failed: {e}")

        return {"ok": True, "results": "ok", "checkpointId": checkpoint_id}

    async def read(self, checkpoint_id: str) -> Dict[str, Any]:
        """
        Load a checkpoint verbatim.

        Returns:
            {"ok": True, "found": bool, "data": serialized JSON or ""}
        """
        try:
            data = await self.store.load(checkpoint_id)
        except StoreError as e:
            return failure(ErrorType.STORE_FAILURE, f"read failed: {e}")

        if data is None:
            return {"ok": True, "found": False, "checkpointId": checkpoint_id, "data": ""}
        return {
            "ok": True,
            "found": True,
            "checkpointId": checkpoint_id,
            "data": json.dumps(data, ensure_ascii=False),
        }

    # ------------------- Navigate ------------------- #

    async def navigate(
        self,
        document_url: str,
        page_number: int,
        highlight_offsets: Optional[Sequence[int]] = None,
    ) -> Dict[str, Any]:
        """Validate and echo a document location for the presentation layer."""
        if not document_url or not document_url.strip():
            return failure(ErrorType.INVALID_ARGUMENT, "documentUrl must be a non-empty string.")
        if page_number < 1:
            return failure(ErrorType.INVALID_ARGUMENT, f"pageNumber must be at least 1 (got {page_number}).")

        offsets = None
        if highlight_offsets is not None:
            if len(highlight_offsets) != 2:
                return failure(
                    ErrorType.INVALID_ARGUMENT,
                    "highlightOffsets must be a [start, end] pair.",
                )
            start, end = highlight_offsets
            if start < 0 or end < start:
                return failure(
                    ErrorType.INVALID_ARGUMENT,
                    f"highlightOffsets must satisfy 0 <= start <= end (got [{start}, {end}]).",
                )
            offsets = [start, end]

        return {
            "ok": True,
            "results": {
                "documentUrl": document_url,
                "pageNumber": page_number,
                "highlightOffsets": offsets,
            },
        }
