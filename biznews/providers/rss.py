"""
RSS headline provider.

This module provides the RSSHeadlineProvider class for reading top stories
from an RSS feed such as Google News.
"""

import html
import re
from typing import Any, Dict, List, cast
import logging

import requests
import feedparser  # type: ignore
from biznews.errors import UpstreamError
from biznews.models import Article
from biznews.providers.base import HeadlineProvider

logger = logging.getLogger(__name__)

_TAGS = re.compile("<.*?>")


class RSSHeadlineProvider(HeadlineProvider):
    """Reads headlines from a standard RSS feed."""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    def _clean_html(self, raw_html: str) -> str:
        """Removes HTML tags and entities from a string."""
        if not raw_html:
            return ""
        text = html.unescape(re.sub(_TAGS, "", raw_html))
        return " ".join(text.split())

    def _normalize(self, entry: Any) -> Article:
        article: Dict[str, Any] = {}
        if "id" in entry:
            article["identifier"] = entry.id
        if "title" in entry:
            article["title"] = entry.title
        if "summary" in entry:
            article["description"] = self._clean_html(entry.summary) or None
        if "link" in entry:
            article["url"] = entry.link
        if "published" in entry:
            article["published_at"] = entry.published
        if "source" in entry:
            article["source"] = entry.source.get("title")
        return cast(Article, article)

    def fetch_top_headlines(self) -> List[Article]:
        try:
            # Some feeds reject requests without a user-agent
            resp = requests.get(
                self.url, timeout=self.timeout, headers={"User-Agent": "BizNewsBot/1.0"}
            )
            resp.raise_for_status()
        except requests.RequestException as req_err:
            logger.error("Network error fetching %s: %s", self.url, req_err)
            raise UpstreamError() from req_err

        feed = feedparser.parse(resp.content)
        if feed.bozo and not feed.entries:
            logger.error("Unparseable feed at %s: %s", self.url, feed.get("bozo_exception"))
            raise UpstreamError()

        articles = [self._normalize(entry) for entry in feed.entries]
        logger.info("Fetched %d headlines from %s.", len(articles), self.url)
        return articles
