"""
Usage reference returned by the read_me tool.
"""

READ_ME = """# Foundry IQ Knowledge Base - MCP App Reference

Thanks for calling read_me! Do NOT call it again in this conversation. You already have everything you need; now use knowledge_base_retrieve to search.

## Overview

The Foundry IQ Knowledge Base MCP App provides enterprise knowledge retrieval with an interactive visual experience. When you call knowledge_base_retrieve, results are rendered as evidence cards with:
- Document titles and source badges
- Relevance scores
- Text snippets with query term highlighting
- Deep-links to original sources
- Interactive document viewer with passage highlighting

## Tool: knowledge_base_retrieve

### Input
- **query** (required): The user's question or search query. Be specific and include key terms.
- **sources** (optional): Array of source types to filter by: "sharepoint", "onelake", "web", "fabric", "mcp"
- **top_k** (optional): Number of results to return (default: 10, inline view shows top 3)
- **filters** (optional): Additional filter criteria as key-value pairs

### Output
Returns structured results with:
- **results**: Array of evidence chunks with content, metadata, and relevance scores
- **queryPlan**: Steps taken to decompose and execute the query
- **checkpointId**: ID for restoring this evidence state in future turns
- **summary**: Plain-text rendering of the results

If retrieval fails, the result has "ok": false and an "error" message. This is different from a successful search with zero results.

### Best Practices
1. Use the user's exact question as the query; don't over-summarize
2. For comparative questions, omit sources so every source is searched
3. Results are ranked by relevance; inline mode shows top 3, fullscreen shows all
4. Each result includes a documentUrl for deep-linking to the original source
5. Relevance scores range from 0 to 1; scores above 0.8 indicate high confidence

## Checkpoints

Every knowledge_base_retrieve call returns a new checkpointId. Checkpoints expire after a period of inactivity.
For a follow-up question:
- Call knowledge_base_retrieve again; it creates a fresh checkpoint with no pins
- The app reads the previous checkpoint's pinnedIds and pins them onto the new one
- No need to re-retrieve previously found documents

## Source Types
| Type | Description | Badge Color |
|------|-------------|-------------|
| sharepoint | SharePoint documents and sites | Green |
| onelake | OneLake / Data Lake files | Blue |
| web | Web/Bing search results | Orange |
| fabric | Microsoft Fabric data | Purple |
| mcp | Other MCP-connected sources | Teal |

## Tips
- Do NOT call read_me again
- Let the app handle visual rendering; just pass the query
- For multi-source queries, omit the sources filter to search everywhere
"""
