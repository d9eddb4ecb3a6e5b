"""
NewsAPI.org headline provider.

Top headlines come back as a flat list under "articles", each with a nested
{"id", "name"} source object.
"""

import logging
from typing import Any, Dict, List, cast

import requests
from biznews.errors import UpstreamError
from biznews.models import Article, HeadlineSummary, Headlines, summarize
from biznews.providers.base import SummarizingProvider, copy_present, resolve_source

logger = logging.getLogger(__name__)

NEWS_API_URL = "https://newsapi.org/v2/top-headlines"

_FIELDS = {
    "title": "title",
    "description": "description",
    "url": "url",
    "urlToImage": "image_url",
    "publishedAt": "published_at",
    "author": "author",
    "content": "content",
}


class NewsAPIProvider(SummarizingProvider):
    """Fetches US top headlines from NewsAPI."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        country: str = "us",
        page_size: int = 100,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.country = country
        self.page_size = page_size

    def _normalize(self, raw: Dict[str, Any]) -> Article:
        article: Dict[str, Any] = {}
        copy_present(raw, article, _FIELDS)
        if "source" in raw:
            article["source"] = resolve_source(raw["source"])
        return cast(Article, article)

    def normalize(self, payload: Any) -> List[Article]:
        """Maps a NewsAPI response body to a list of articles."""
        if not isinstance(payload, dict):
            return []
        raw_articles = payload.get("articles") or []
        return [self._normalize(raw) for raw in raw_articles if isinstance(raw, dict)]

    def summary(self, payload: Any, articles: List[Article]) -> HeadlineSummary:
        """Reports NewsAPI's totalResults, or synthesized counts without it."""
        total = payload.get("totalResults") if isinstance(payload, dict) else None
        if not isinstance(total, int) or isinstance(total, bool):
            return summarize(articles)
        return {
            "found": total,
            "returned": len(articles),
            "limit": self.page_size,
            "page": 1,
        }

    def fetch_headlines(self) -> Headlines:
        params = {
            "pageSize": self.page_size,
            "country": self.country,
            "apiKey": self.api_key,
        }
        try:
            resp = requests.get(NEWS_API_URL, params=params, timeout=self.timeout)
        except requests.RequestException as req_err:
            logger.error("Network error fetching NewsAPI headlines: %s", req_err)
            raise UpstreamError() from req_err

        if not resp.ok:
            logger.error("NewsAPI returned HTTP %s", resp.status_code)
            raise UpstreamError(status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error("NewsAPI returned a non-JSON body: %s", e)
            raise UpstreamError() from e

        articles = self.normalize(payload)
        logger.info("Fetched %d headlines from NewsAPI.", len(articles))
        return Headlines(articles, self.summary(payload, articles))

    def fetch_top_headlines(self) -> List[Article]:
        return self.fetch_headlines().articles
