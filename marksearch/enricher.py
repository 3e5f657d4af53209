"""
Bookmark enrichment.

Enrichment fetches each bookmark's page, copies its title, description and
main text into the record, and attaches an embedding of all of the record's
text. Bookmarks are processed one at a time in input order. A bookmark that
fails is reported as a skip and never appears in the output as a hole.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .content_extractor import ContentExtractor, is_raw_ip_url
from .embeddings import EmbeddingProvider
from .models import Bookmark, EnrichedBookmark

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, "EnrichmentResult"], None]


@dataclass
class EnrichmentResult:
    """Outcome of enriching a single bookmark: a record or a skip reason."""
    bookmark: Bookmark
    record: Optional[EnrichedBookmark] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, record: EnrichedBookmark) -> "EnrichmentResult":
        return cls(bookmark=record, record=record)

    @classmethod
    def skipped(cls, bookmark: Bookmark, reason: str) -> "EnrichmentResult":
        return cls(bookmark=bookmark, reason=reason)

    @property
    def ok(self) -> bool:
        return self.record is not None

    @staticmethod
    def records(results: List["EnrichmentResult"]) -> List[EnrichedBookmark]:
        """Successful records, in input order."""
        return [r.record for r in results if r.ok]


def build_embedding_text(record: EnrichedBookmark) -> str:
    """
    Join the record's text fields into one blob for embedding.

    Order: title, description, content, each category, each tag. Empty
    values are skipped; the rest are joined with single spaces.
    """
    parts = [record.title, record.description, record.content]
    parts.extend(record.category)
    parts.extend(record.tag)
    return " ".join(part for part in parts if part)


class Enricher:
    """Combines a content extractor and an embedding provider."""

    def __init__(self, extractor: ContentExtractor, provider: EmbeddingProvider):
        self.extractor = extractor
        self.provider = provider

    async def enrich(self, bookmark: Bookmark) -> EnrichmentResult:
        """
        Enrich one bookmark.

        Args:
            bookmark: Raw bookmark

        Returns:
            A success carrying the enriched record, or a skip if anything
            went wrong along the way
        """
        try:
            record = EnrichedBookmark.from_bookmark(bookmark)

            if not is_raw_ip_url(bookmark.site):
                content = await self.extractor.extract(bookmark.site)
                record.title = content.title
                record.description = content.description
                record.content = content.body_text

            text = build_embedding_text(record)
            if text:
                record.embedding = await self.provider.embed(text)
            else:
                logger.warning(f"No text available to embed for {bookmark.site}")

            return EnrichmentResult.success(record)
        except Exception as e:
            logger.error(f"Error enhancing bookmark {bookmark.site}: {e}")
            return EnrichmentResult.skipped(bookmark, f"{type(e).__name__}: {e}")

    async def enrich_all(self, bookmarks: List[Bookmark],
                         progress_callback: Optional[ProgressCallback] = None
                         ) -> List[EnrichmentResult]:
        """
        Enrich bookmarks sequentially, preserving input order.

        Args:
            bookmarks: Raw bookmarks
            progress_callback: Optional callback(completed, total, result)

        Returns:
            One result per input bookmark
        """
        results = []
        total = len(bookmarks)
        for index, bookmark in enumerate(bookmarks, start=1):
            result = await self.enrich(bookmark)
            results.append(result)
            if result.ok:
                logger.info(f"Enhanced bookmark: {bookmark.site}")
            else:
                logger.warning(f"Skipped bookmark {bookmark.site}: {result.reason}")
            if progress_callback:
                progress_callback(index, total, result)
        return results


def run_enrichment(bookmarks: List[Bookmark], enricher: Enricher,
                   progress_callback: Optional[ProgressCallback] = None
                   ) -> List[EnrichmentResult]:
    """Synchronous wrapper for Enricher.enrich_all."""
    return asyncio.run(enricher.enrich_all(bookmarks, progress_callback))


def summarize_results(results: List[EnrichmentResult]) -> Dict[str, Any]:
    """Generate a summary of an enrichment run.

    Args:
        results: List of EnrichmentResult objects

    Returns:
        Summary dictionary with counts and the skipped bookmarks
    """
    summary = {
        'total': len(results),
        'enriched': 0,
        'embedded': 0,
        'skipped': 0,
        'skipped_bookmarks': []
    }

    for result in results:
        if result.ok:
            summary['enriched'] += 1
            if result.record.has_embedding:
                summary['embedded'] += 1
        else:
            summary['skipped'] += 1
            summary['skipped_bookmarks'].append({
                'site': result.bookmark.site,
                'reason': result.reason
            })

    return summary
