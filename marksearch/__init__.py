"""
marksearch - semantic search for bookmarks

Turns a flat JSON list of bookmarks into a searchable collection: each
bookmark's page is fetched, its text is embedded with a sentence-transformer
model, and free-text queries are ranked by cosine similarity.

Example Usage:
    >>> import asyncio
    >>> from marksearch import (Enricher, EnrichmentResult, HtmlContentExtractor,
    ...                         SearchEngine, SentenceTransformerProvider, load_bookmarks)
    >>> provider = SentenceTransformerProvider()
    >>> enricher = Enricher(HtmlContentExtractor(), provider)
    >>> results = asyncio.run(enricher.enrich_all(load_bookmarks("site.json")))
    >>> records = EnrichmentResult.records(results)
    >>> hits = asyncio.run(SearchEngine(provider).search("icon", records))
"""

__version__ = "0.1.0"
__author__ = "marksearch Contributors"

# Configuration
from marksearch.config import MarksearchConfig, get_config, init_config

# Models
from marksearch.models import Bookmark, EnrichedBookmark, SearchResult

# Errors
from marksearch.errors import (
    MarksearchError,
    FetchError,
    EmbeddingError,
    InvalidVectorError,
    MismatchedDimensionError,
    StoreError,
)

# Pipeline
from marksearch.content_extractor import ContentExtractor, HtmlContentExtractor, ExtractedContent
from marksearch.embeddings import EmbeddingProvider, SentenceTransformerProvider
from marksearch.similarity import cosine_similarity
from marksearch.enricher import Enricher, EnrichmentResult, build_embedding_text, run_enrichment
from marksearch.search import SearchEngine, run_search

# Storage
from marksearch.store import load_bookmarks, load_enriched, save_enriched, save_embeddings

__all__ = [
    # Config
    "MarksearchConfig",
    "get_config",
    "init_config",
    # Models
    "Bookmark",
    "EnrichedBookmark",
    "SearchResult",
    # Errors
    "MarksearchError",
    "FetchError",
    "EmbeddingError",
    "InvalidVectorError",
    "MismatchedDimensionError",
    "StoreError",
    # Pipeline
    "ContentExtractor",
    "HtmlContentExtractor",
    "ExtractedContent",
    "EmbeddingProvider",
    "SentenceTransformerProvider",
    "cosine_similarity",
    "Enricher",
    "EnrichmentResult",
    "build_embedding_text",
    "run_enrichment",
    "SearchEngine",
    "run_search",
    # Storage
    "load_bookmarks",
    "load_enriched",
    "save_enriched",
    "save_embeddings",
]
