"""
Content extraction for marksearch bookmarks.

This module fetches a bookmarked page and pulls out the handful of text
fields used to build its embedding: the page title, the meta description,
and the text of the page's main content area.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Dict, Optional

import aiohttp
from bs4 import BeautifulSoup

from .constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_FETCH_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_USER_AGENT,
    MAIN_CONTENT_SELECTORS,
)
from .errors import FetchError
from .utils import call_with_retry, normalize_whitespace

logger = logging.getLogger(__name__)

_RAW_IP_RE = re.compile(r"^https?://(\d{1,3}\.){3}\d{1,3}")

# Connection problems and timeouts are worth a second attempt; HTTP error
# statuses are not.
TRANSIENT_FETCH_ERRORS = (aiohttp.ClientConnectionError, asyncio.TimeoutError)


def is_raw_ip_url(url: str) -> bool:
    """Whether the URL's host is a literal IPv4 address."""
    return bool(_RAW_IP_RE.match(url or ""))


@dataclass
class ExtractedContent:
    """Text fields pulled from a page. Empty strings mean nothing was found."""
    title: str = ""
    description: str = ""
    body_text: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.description or self.body_text)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class ContentExtractor(ABC):
    """Interface for content extraction implementations.

    Implementations must not raise: any failure is logged and reported as
    an empty ``ExtractedContent``.
    """

    @abstractmethod
    async def extract(self, url: str) -> ExtractedContent:
        """Extract content from a URL."""
        pass


class HtmlContentExtractor(ContentExtractor):
    """Fetches pages with aiohttp and parses them with BeautifulSoup."""

    def __init__(self, timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 retries: int = DEFAULT_FETCH_RETRIES,
                 backoff: float = DEFAULT_RETRY_BACKOFF,
                 user_agent: str = DEFAULT_USER_AGENT,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the extractor.

        Args:
            timeout: Deadline in seconds for each fetch attempt
            retries: Extra attempts on connection errors and timeouts
            backoff: Initial delay between attempts in seconds
            user_agent: User-Agent header sent with every request
            session: Shared aiohttp session; one is opened per fetch if omitted
        """
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self.user_agent = user_agent
        self.session = session

    async def extract(self, url: str) -> ExtractedContent:
        """
        Extract title, description and body text from a URL.

        Args:
            url: Page to fetch

        Returns:
            Extracted content; all fields empty on any failure or for
            raw-IP hosts
        """
        if is_raw_ip_url(url):
            logger.debug(f"Skipping fetch for raw IP host: {url}")
            return ExtractedContent()

        try:
            html = await call_with_retry(
                lambda: self._fetch_html(url),
                timeout=self.timeout,
                retries=self.retries,
                retry_on=TRANSIENT_FETCH_ERRORS,
                backoff=self.backoff,
                description=f"Fetch {url}",
            )
            return self.parse(html)
        except asyncio.TimeoutError:
            logger.error(f"Error fetching content for {url}: timed out after {self.timeout}s")
        except FetchError as e:
            logger.error(f"Error fetching content for {url}: {e}")
        except aiohttp.ClientError as e:
            logger.error(f"Error fetching content for {url}: {type(e).__name__}: {e}")
        except Exception as e:
            logger.error(f"Error extracting content from {url}: {e}")

        return ExtractedContent()

    async def _fetch_html(self, url: str) -> str:
        """Fetch a page and return its decoded body."""
        if self.session is not None:
            return await self._get(self.session, url)

        async with aiohttp.ClientSession(headers={"User-Agent": self.user_agent}) as session:
            return await self._get(session, url)

    async def _get(self, session: aiohttp.ClientSession, url: str) -> str:
        async with session.get(url, allow_redirects=True,
                               timeout=aiohttp.ClientTimeout(total=self.timeout),
                               headers={"User-Agent": self.user_agent}) as response:
            if response.status >= 400:
                raise FetchError(f"HTTP {response.status}")
            return await response.text(errors="replace")

    @staticmethod
    def parse(html: str) -> ExtractedContent:
        """
        Pull the text fields out of an HTML document.

        The title falls back from <title> to the first <h1>. Body text comes
        only from main-content containers; a page without one yields an
        empty body.
        """
        soup = BeautifulSoup(html, "html.parser")

        title = ""
        title_tag = soup.find("title")
        if title_tag:
            title = title_tag.get_text().strip()
        if not title:
            h1 = soup.find("h1")
            if h1:
                title = h1.get_text().strip()

        description = ""
        meta = soup.find("meta", attrs={"name": "description"})
        if meta and meta.get("content"):
            description = meta["content"]

        body_text = normalize_whitespace(
            " ".join(node.get_text() for node in soup.select(MAIN_CONTENT_SELECTORS))
        )

        return ExtractedContent(title=title, description=description, body_text=body_text)
