"""
Exception hierarchy for marksearch.

Per-bookmark failures (FetchError, EmbeddingError) are recovered inside the
enrichment pipeline. Vector and store errors propagate to the caller.
"""


class MarksearchError(Exception):
    """Base class for marksearch errors."""
    pass


class FetchError(MarksearchError):
    """A page could not be fetched or parsed."""
    pass


class EmbeddingError(MarksearchError):
    """The embedding backend failed to produce a vector."""
    pass


class InvalidVectorError(MarksearchError):
    """A vector was missing or empty where one was required."""
    pass


class MismatchedDimensionError(InvalidVectorError):
    """Two vectors of different lengths were compared."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"Vectors must be of the same length ({left} != {right})")


class StoreError(MarksearchError):
    """A bookmark file exists but could not be read."""
    pass
