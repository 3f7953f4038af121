"""Dense retriever: embed the query, rank stored chunks by cosine distance.

The query is embedded with the same model used at ingest time and is not
sanitized. Ranking is delegated to sqlite-vec's ``vec_distance_cosine``;
documents without an embedding are never returned.
"""

from __future__ import annotations

from dataclasses import dataclass

from agentlab.db.models import SearchResult
from agentlab.db.repository import Repository
from agentlab.rag.llm_client import embed


@dataclass
class RetrieverConfig:
    """Configuration for the retriever.

    Attributes:
        embedding_model: LiteLLM embedding model string (provider/model format).
        top_k: Number of documents returned for a full answer.
        citation_k: Number of documents shown as live citations.
    """

    embedding_model: str = "gemini/text-embedding-004"
    top_k: int = 5
    citation_k: int = 3


def embed_query(query: str, model: str) -> list[float]:
    """Embed *query* using LiteLLM with the specified model."""
    return embed(model, query)


def retrieve(
    query: str,
    repo: Repository,
    config: RetrieverConfig,
    top_k: int | None = None,
) -> list[SearchResult]:
    """Return the *top_k* nearest documents to *query*, closest first.

    Raises:
        ValueError: If the query embedding does not match the stored dimensionality.
    """
    limit = config.top_k if top_k is None else top_k
    if limit < 1:
        return []
    vector = embed_query(query, config.embedding_model)
    return repo.search_nearest(vector, limit=limit)
