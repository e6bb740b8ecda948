"""
Retriever - Knowledge Base Retrieval Gateway

Key Components:
- RetrievalGateway: backend interface returning RetrievalOutcome
- DemoKnowledgeBaseGateway: keyword-overlap scorer over the Contoso corpus
- AzureKnowledgeBaseGateway: live Azure AI Search knowledge base client

The backend is chosen once at startup by create_gateway(): the live client
when endpoint, API key and knowledge base name are all configured, the demo
corpus otherwise.
"""

import logging

from .gateway import RetrievalGateway, RetrievalOutcome, RetrievalError, DEFAULT_TOP_K
from .demo import DemoKnowledgeBaseGateway
from .azure import AzureKnowledgeBaseGateway

logger = logging.getLogger("foundry_kb.retriever")


def create_gateway(config) -> RetrievalGateway:
    """
    Factory: build the retrieval gateway selected by configuration presence.

    Args:
        config: KBConfig

    Returns:
        AzureKnowledgeBaseGateway if search credentials are set, else DemoKnowledgeBaseGateway
    """
    search = config.search
    topk = config.retriever.topk

    if search.is_configured:
        logger.info(f"Using Azure AI Search knowledge base '{search.kb_name}' at {search.endpoint}")
        return AzureKnowledgeBaseGateway(
            endpoint=search.endpoint,
            api_key=search.api_key,
            kb_name=search.kb_name,
            api_version=search.api_version,
            timeout=search.timeout_seconds,
            default_top_k=topk,
        )

    logger.info("Azure AI Search not configured (AZURE_SEARCH_ENDPOINT/API_KEY/KB_NAME) - using demo corpus")
    return DemoKnowledgeBaseGateway(default_top_k=topk)


__all__ = [
    "RetrievalGateway",
    "RetrievalOutcome",
    "RetrievalError",
    "DEFAULT_TOP_K",
    "DemoKnowledgeBaseGateway",
    "AzureKnowledgeBaseGateway",
    "create_gateway",
]
