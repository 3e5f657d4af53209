"""
Semantic search over enriched bookmarks.

The query is embedded with the same provider used for enrichment and every
embedded bookmark is scored by exact cosine similarity. There is no index;
each search is a linear scan of the corpus.
"""

import asyncio
import logging
from typing import List, Optional

from .constants import DEFAULT_SEARCH_LIMIT
from .embeddings import EmbeddingProvider
from .models import EnrichedBookmark, SearchResult
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)


class SearchEngine:
    """Ranks enriched bookmarks by similarity to a free-text query."""

    def __init__(self, provider: EmbeddingProvider):
        self.provider = provider

    async def search(self, query: str, corpus: List[EnrichedBookmark],
                     limit: int = DEFAULT_SEARCH_LIMIT,
                     threshold: Optional[float] = None) -> List[SearchResult]:
        """
        Perform semantic search on bookmarks.

        Args:
            query: Search query
            corpus: Enriched bookmarks to rank; members without an embedding
                are ignored
            limit: Maximum number of results
            threshold: Minimum similarity to keep a result

        Returns:
            Results sorted by similarity, highest first. Equal scores keep
            corpus order.

        Raises:
            ValueError: If the query is blank or the limit is negative
            EmbeddingError: If the query cannot be embedded
            InvalidVectorError: If a stored embedding is unusable; the whole
                search fails rather than ranking around it
        """
        if not query or not query.strip():
            raise ValueError("Search query must not be empty")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValueError(f"limit must be a non-negative integer, got {limit!r}")

        candidates = [(index, bookmark) for index, bookmark in enumerate(corpus)
                      if bookmark.embedding is not None]
        if limit == 0 or not candidates:
            logger.debug("No embedded bookmarks to search")
            return []

        query_embedding = await self.provider.embed(query)

        scored = []
        for index, bookmark in candidates:
            similarity = cosine_similarity(query_embedding, bookmark.embedding)
            if threshold is not None and similarity < threshold:
                continue
            scored.append((similarity, index, bookmark))

        scored.sort(key=lambda item: (-item[0], item[1]))

        return [SearchResult(bookmark=bookmark, similarity=similarity)
                for similarity, _, bookmark in scored[:limit]]


def run_search(query: str, corpus: List[EnrichedBookmark], engine: SearchEngine,
               limit: int = DEFAULT_SEARCH_LIMIT,
               threshold: Optional[float] = None) -> List[SearchResult]:
    """Synchronous wrapper for SearchEngine.search."""
    return asyncio.run(engine.search(query, corpus, limit, threshold))
