"""
Constants for marksearch.

These constants are used by various modules for sensible defaults.
Most are also available via the config system.
"""

# Conventional file locations
DEFAULT_INPUT_FILE = "site.json"
DEFAULT_OUTPUT_FILE = "enhanced_bookmarks.json"
DEFAULT_EMBEDDINGS_FILE = "embedding.json"

# Embedding model
DEFAULT_MODEL_NAME = "all-MiniLM-L6-v2"
DEFAULT_DEVICE = "cpu"

# Character budget applied before embedding. This approximates the model's
# token limit; it is not a token count.
MAX_EMBEDDING_CHARS = 512

# Network timeouts and retries (in seconds)
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_FETCH_RETRIES = 1
DEFAULT_RETRY_BACKOFF = 0.5
DEFAULT_EMBEDDING_TIMEOUT = 60.0

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; marksearch/0.1)"

# Selectors treated as the "main content" of a page
MAIN_CONTENT_SELECTORS = "main, article, .content, #content"

# Search
DEFAULT_SEARCH_LIMIT = 5
DEFAULT_QUERY = "icon"
