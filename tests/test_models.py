"""
Tests for marksearch data models.
"""
import pytest

from marksearch.models import Bookmark, EnrichedBookmark, SearchResult


class TestBookmark:
    """Tests for the raw Bookmark model."""

    def test_from_dict(self):
        bookmark = Bookmark.from_dict({
            "site": "https://example.com",
            "category": ["dev"],
            "tag": ["python", "docs"],
        })
        assert bookmark.site == "https://example.com"
        assert bookmark.category == ["dev"]
        assert bookmark.tag == ["python", "docs"]
        assert bookmark.extra == {}

    def test_missing_lists_default_empty(self):
        bookmark = Bookmark.from_dict({"site": "https://example.com"})
        assert bookmark.category == []
        assert bookmark.tag == []

    def test_string_tag_becomes_list(self):
        bookmark = Bookmark.from_dict({"site": "https://example.com", "tag": "solo"})
        assert bookmark.tag == ["solo"]

    def test_invalid_tag_type(self):
        with pytest.raises(ValueError):
            Bookmark.from_dict({"site": "https://example.com", "tag": 42})

    @pytest.mark.parametrize("data", [
        {},
        {"site": ""},
        {"site": None},
        {"site": 123},
    ])
    def test_site_required(self, data):
        with pytest.raises(ValueError):
            Bookmark.from_dict(data)

    def test_non_object_rejected(self):
        with pytest.raises(ValueError):
            Bookmark.from_dict(["https://example.com"])

    def test_extra_fields_round_trip(self):
        data = {"site": "https://example.com", "category": [], "tag": [],
                "added": "2024-01-01", "starred": True}
        bookmark = Bookmark.from_dict(data)
        assert bookmark.extra == {"added": "2024-01-01", "starred": True}
        assert bookmark.to_dict() == data


class TestEnrichedBookmark:
    """Tests for EnrichedBookmark."""

    def test_from_bookmark_copies_lists(self):
        bookmark = Bookmark(site="https://example.com", category=["a"], tag=["b"],
                            extra={"note": "keep"})
        record = EnrichedBookmark.from_bookmark(bookmark)

        assert record.site == bookmark.site
        assert record.category == ["a"]
        assert record.category is not bookmark.category
        assert record.extra == {"note": "keep"}
        assert record.embedding is None
        assert record.title == ""

    def test_from_bookmark_drops_stale_embedding(self):
        bookmark = Bookmark.from_dict({"site": "https://example.com",
                                       "embedding": [1.0, 2.0], "title": "Old"})
        record = EnrichedBookmark.from_bookmark(bookmark)
        assert record.embedding is None
        assert record.title == "Old"
        assert "embedding" not in record.extra
        assert "title" not in record.extra

    def test_to_dict_shape(self):
        record = EnrichedBookmark(site="https://example.com", category=["c"], tag=["t"],
                                  title="T", description="D", content="C",
                                  embedding=[0.5, 0.5])
        assert record.to_dict() == {
            "site": "https://example.com",
            "category": ["c"],
            "tag": ["t"],
            "title": "T",
            "description": "D",
            "content": "C",
            "embedding": [0.5, 0.5],
        }

    def test_to_dict_omits_missing_embedding(self):
        record = EnrichedBookmark(site="https://example.com")
        assert "embedding" not in record.to_dict()
        assert record.has_embedding is False

    def test_from_dict_round_trip(self):
        record = EnrichedBookmark(site="https://example.com", category=["c"], tag=["t"],
                                  extra={"added": "2024"}, title="T", embedding=[1.0, 0.0])
        assert EnrichedBookmark.from_dict(record.to_dict()) == record

    def test_from_dict_null_text_fields(self):
        record = EnrichedBookmark.from_dict({"site": "https://example.com",
                                             "title": None, "content": None})
        assert record.title == ""
        assert record.content == ""

    def test_from_dict_bad_embedding(self):
        with pytest.raises(ValueError):
            EnrichedBookmark.from_dict({"site": "https://example.com", "embedding": "oops"})

    def test_integer_embedding_values_become_floats(self):
        record = EnrichedBookmark.from_dict({"site": "https://example.com", "embedding": [1, 0]})
        assert record.embedding == [1.0, 0.0]
        assert all(isinstance(v, float) for v in record.embedding)


class TestSearchResult:
    """Tests for SearchResult."""

    def test_display_title_falls_back_to_site(self):
        result = SearchResult(bookmark=EnrichedBookmark(site="https://example.com"),
                              similarity=0.5)
        assert result.display_title == "https://example.com"

    def test_to_dict_adds_similarity(self):
        record = EnrichedBookmark(site="https://example.com", title="Example",
                                  embedding=[1.0])
        data = SearchResult(bookmark=record, similarity=0.9).to_dict()
        assert data["similarity"] == 0.9
        assert data["title"] == "Example"
        assert data["site"] == "https://example.com"
