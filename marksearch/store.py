"""
JSON file storage for bookmarks.

The input is a JSON array of bookmark objects. Enrichment writes the
enriched records to one file and, optionally, a second file holding just the
embedding vectors. The second file is always derived from the enriched
records, so the two can never disagree.
"""
import json
import logging
import os
from typing import Any, Callable, List, TypeVar

from .errors import StoreError
from .models import Bookmark, EnrichedBookmark

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _ensure_parent_dir(path: str):
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def _load_records(path: str, factory: Callable[[Any], T]) -> List[T]:
    if not os.path.exists(path):
        logger.warning(f"{path} not found. Starting with an empty bookmark list.")
        return []

    with open(path, "r", encoding="utf-8") as file:
        try:
            data = json.load(file)
        except json.JSONDecodeError as e:
            raise StoreError(f"Error decoding JSON from {path}: {e}") from e

    if not isinstance(data, list):
        raise StoreError(f"{path} must contain a JSON array of bookmarks")

    records = []
    for position, item in enumerate(data):
        try:
            records.append(factory(item))
        except ValueError as e:
            raise StoreError(f"Invalid bookmark at index {position} in {path}: {e}") from e

    logger.debug(f"Loaded {len(records)} bookmarks from {path}.")
    return records


def _write_json(data: Any, path: str):
    _ensure_parent_dir(path)
    with open(path, "w", encoding="utf-8") as file:
        json.dump(data, file, ensure_ascii=False, indent=2)


def load_bookmarks(path: str) -> List[Bookmark]:
    """
    Load raw bookmarks from a JSON file.

    Returns an empty list if the file does not exist.

    Args:
        path: Path to the bookmark file

    Returns:
        List of bookmarks in file order

    Raises:
        StoreError: If the file exists but is not a valid bookmark array
    """
    return _load_records(path, Bookmark.from_dict)


def load_enriched(path: str) -> List[EnrichedBookmark]:
    """Load previously enriched bookmarks; same rules as ``load_bookmarks``."""
    return _load_records(path, EnrichedBookmark.from_dict)


def save_enriched(records: List[EnrichedBookmark], path: str):
    """Write enriched bookmarks as an indented JSON array, replacing the file."""
    _write_json([record.to_dict() for record in records], path)
    logger.info(f"Saved {len(records)} enriched bookmarks to {path}")


def save_embeddings(records: List[EnrichedBookmark], path: str) -> int:
    """
    Write the embedding vectors of the given records as a JSON array.

    Records without an embedding contribute nothing, so entry ``i`` of this
    file lines up with the ``i``-th embedded record, not the ``i``-th record.

    Returns:
        Number of vectors written
    """
    embeddings = [list(record.embedding) for record in records if record.has_embedding]
    _write_json(embeddings, path)
    logger.info(f"Saved {len(embeddings)} embeddings to {path}")
    return len(embeddings)
