"""
Data model for marksearch.

Bookmarks are plain dataclasses that round-trip through the JSON files the
store reads and writes. Keys the model does not know about are carried in
``extra`` so enrichment never drops user data.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

BOOKMARK_FIELDS = ("site", "category", "tag")
ENRICHED_FIELDS = ("title", "description", "content", "embedding")


def _as_str_list(value: Any, key: str) -> List[str]:
    """Coerce a category/tag value into a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise ValueError(f"'{key}' must be a list of strings, got {type(value).__name__}")


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class Bookmark:
    """A raw bookmark record as read from the input file."""
    site: str
    category: List[str] = field(default_factory=list)
    tag: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bookmark":
        """Build a bookmark from a JSON object."""
        if not isinstance(data, dict):
            raise ValueError(f"Bookmark must be an object, got {type(data).__name__}")
        site = data.get("site")
        if not isinstance(site, str) or not site.strip():
            raise ValueError("Bookmark is missing a 'site' URL")
        extra = {k: v for k, v in data.items() if k not in BOOKMARK_FIELDS}
        return cls(
            site=site,
            category=_as_str_list(data.get("category"), "category"),
            tag=_as_str_list(data.get("tag"), "tag"),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = dict(self.extra)
        data["site"] = self.site
        data["category"] = list(self.category)
        data["tag"] = list(self.tag)
        return data


@dataclass
class EnrichedBookmark(Bookmark):
    """A bookmark augmented with fetched page text and an embedding."""
    title: str = ""
    description: str = ""
    content: str = ""
    embedding: Optional[List[float]] = None

    @classmethod
    def from_bookmark(cls, bookmark: Bookmark) -> "EnrichedBookmark":
        """Start an enriched record from a raw bookmark.

        Text fields already present on the input are kept as starting values.
        """
        extra = {k: v for k, v in bookmark.extra.items() if k not in ENRICHED_FIELDS}
        return cls(
            site=bookmark.site,
            category=list(bookmark.category),
            tag=list(bookmark.tag),
            extra=extra,
            title=_as_text(bookmark.extra.get("title")),
            description=_as_text(bookmark.extra.get("description")),
            content=_as_text(bookmark.extra.get("content")),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnrichedBookmark":
        """Build an enriched record from a JSON object written by ``to_dict``."""
        base = Bookmark.from_dict(data)
        extra = {k: v for k, v in base.extra.items() if k not in ENRICHED_FIELDS}
        embedding = data.get("embedding")
        if embedding is not None:
            if not isinstance(embedding, list):
                raise ValueError(f"Embedding for {base.site} must be a list")
            try:
                embedding = [float(value) for value in embedding]
            except (TypeError, ValueError) as e:
                raise ValueError(f"Embedding for {base.site} must hold only numbers: {e}") from e
        return cls(
            site=base.site,
            category=base.category,
            tag=base.tag,
            extra=extra,
            title=_as_text(data.get("title")),
            description=_as_text(data.get("description")),
            content=_as_text(data.get("content")),
            embedding=embedding,
        )

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting ``embedding`` when absent."""
        data = super().to_dict()
        data["title"] = self.title
        data["description"] = self.description
        data["content"] = self.content
        if self.embedding is not None:
            data["embedding"] = list(self.embedding)
        return data


@dataclass
class SearchResult:
    """One ranked hit from a semantic search."""
    bookmark: EnrichedBookmark
    similarity: float

    @property
    def display_title(self) -> str:
        return self.bookmark.title or self.bookmark.site

    def to_dict(self) -> Dict[str, Any]:
        data = self.bookmark.to_dict()
        data["similarity"] = self.similarity
        return data
