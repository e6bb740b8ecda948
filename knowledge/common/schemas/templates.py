"""
Result Text Templates

Plain-text rendering of retrieval results for MCP hosts that cannot display
the evidence-card widget.
"""

from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .evidence import EvidenceItem

SNIPPET_LENGTH = 200

RESULTS_TEMPLATE = """Found {count} results for "{query}". Checkpoint id: "{checkpoint_id}".

{results_block}

---
To explore these results interactively, the MCP App renders evidence cards with document preview, passage highlighting, and source metadata.
If the user wants to refine, they can filter by source type or pin important evidence for follow-up questions."""


def _format_result(index: int, item: "EvidenceItem") -> str:
    """Format one evidence item as a numbered entry"""
    percent = round(item.relevance_score * 100)
    snippet = item.content[:SNIPPET_LENGTH]
    if len(item.content) > SNIPPET_LENGTH:
        snippet += "..."
    return (
        f"{index}. **{item.title}** ({percent}% relevant)\n"
        f"   {snippet}\n"
        f"   Source: {item.source_type} | Page {item.page_number}/{item.total_pages}\n"
        f"   Link: {item.document_url}"
    )


def render_results_text(query: str, results: List["EvidenceItem"], checkpoint_id: str) -> str:
    """Render retrieval results as the text fallback shown next to the widget"""
    if results:
        results_block = "\n\n".join(
            _format_result(i, item) for i, item in enumerate(results, 1)
        )
    else:
        results_block = "(no matching evidence)"

    return RESULTS_TEMPLATE.format(
        count=len(results),
        query=query,
        checkpoint_id=checkpoint_id,
        results_block=results_block,
    )
