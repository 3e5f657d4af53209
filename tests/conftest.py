import math
import re
import json
import os
import shutil
import tempfile
from typing import Dict, List, Optional

import pytest

from marksearch import config as config_module
from marksearch.content_extractor import ContentExtractor, ExtractedContent
from marksearch.embeddings import EmbeddingProvider
from marksearch.errors import EmbeddingError


class FakeEmbeddingProvider(EmbeddingProvider):
    """Deterministic bag-of-words provider.

    Every distinct token (with a trailing plural 's' folded away) gets its own
    axis, so texts sharing words point in similar directions.
    """

    def __init__(self, dim: int = 32, fail_on: Optional[str] = None):
        self.dim = dim
        self.fail_on = fail_on
        self.vocabulary: Dict[str, int] = {}
        self.calls: List[str] = []

    @property
    def dimension(self) -> int:
        return self.dim

    @staticmethod
    def tokenize(text: str) -> List[str]:
        tokens = []
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            if len(token) > 3 and token.endswith("s"):
                token = token[:-1]
            tokens.append(token)
        return tokens

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.fail_on and self.fail_on in text:
            raise EmbeddingError(f"refusing to embed {self.fail_on!r}")

        vector = [0.0] * self.dim
        for token in self.tokenize(text):
            if token not in self.vocabulary:
                if len(self.vocabulary) >= self.dim:
                    raise EmbeddingError("fake vocabulary exhausted")
                self.vocabulary[token] = len(self.vocabulary)
            vector[self.vocabulary[token]] += 1.0

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]


class FakeExtractor(ContentExtractor):
    """Returns canned content per URL and records what was requested."""

    def __init__(self, pages: Optional[Dict[str, ExtractedContent]] = None):
        self.pages = pages or {}
        self.requested: List[str] = []

    async def extract(self, url: str) -> ExtractedContent:
        self.requested.append(url)
        return self.pages.get(url, ExtractedContent())


@pytest.fixture(autouse=True)
def reset_global_config():
    """Each test starts without a cached global config."""
    config_module._config = None
    yield
    config_module._config = None


@pytest.fixture
def fake_provider():
    return FakeEmbeddingProvider()


@pytest.fixture
def fake_extractor():
    return FakeExtractor()


@pytest.fixture
def sample_bookmarks():
    """Sample bookmark data for testing."""
    return [
        {
            "site": "https://x.test/icons",
            "category": ["icons"],
            "tag": ["svg"]
        },
        {
            "site": "https://x.test/cooking",
            "category": ["cooking"],
            "tag": ["recipe"]
        }
    ]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp(prefix="marksearch_test_")
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def bookmarks_file(temp_dir, sample_bookmarks):
    """Write the sample bookmarks to site.json in a temp directory."""
    path = os.path.join(temp_dir, "site.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(sample_bookmarks, f, indent=2)
    return path
