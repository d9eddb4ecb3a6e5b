"""
TheNewsAPI.com headline provider.

The headlines endpoint groups articles by category ({"data": {"business":
[...], "tech": [...]}}); other endpoints return a flat "data" list. Both
shapes are flattened into one list.
"""

import logging
from typing import Any, Dict, List, cast

import requests
from biznews.errors import UpstreamError
from biznews.models import Article, HeadlineSummary, Headlines, summarize
from biznews.providers.base import SummarizingProvider, copy_present, resolve_source

logger = logging.getLogger(__name__)

THE_NEWS_API_URL = "https://api.thenewsapi.com/v1/news/headlines"

_SUMMARY_KEYS = ("found", "returned", "limit", "page")

_FIELDS = {
    "uuid": "identifier",
    "title": "title",
    "description": "description",
    "keywords": "keywords",
    "snippet": "snippet",
    "url": "url",
    "image_url": "image_url",
    "language": "language",
    "published_at": "published_at",
    "categories": "categories",
    "relevance_score": "relevance_score",
    "locale": "locale",
}


class TheNewsAPIProvider(SummarizingProvider):
    """Fetches top headlines from TheNewsAPI."""

    def __init__(
        self,
        api_token: str,
        timeout: float = 10.0,
        locale: str = "us",
        language: str = "en",
        url: str = THE_NEWS_API_URL,
    ):
        self.api_token = api_token
        self.timeout = timeout
        self.locale = locale
        self.language = language
        self.url = url

    def _normalize(self, raw: Dict[str, Any]) -> Article:
        article: Dict[str, Any] = {}
        copy_present(raw, article, _FIELDS)
        if "source" in raw:
            article["source"] = resolve_source(raw["source"])
        return cast(Article, article)

    def _flatten(self, data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            flat: List[Dict[str, Any]] = []
            for category, items in data.items():
                if isinstance(items, list):
                    flat.extend(items)
                else:
                    logger.debug("Skipping non-list category %r", category)
            return flat
        return []

    def normalize(self, payload: Any) -> List[Article]:
        """Maps a TheNewsAPI response body to a list of articles."""
        if not isinstance(payload, dict):
            return []
        raw_articles = self._flatten(payload.get("data"))
        return [self._normalize(raw) for raw in raw_articles if isinstance(raw, dict)]

    def summary(self, payload: Any, articles: List[Article]) -> HeadlineSummary:
        """Reports the response's own meta block, or synthesized counts without one."""
        meta = payload.get("meta") if isinstance(payload, dict) else None
        if isinstance(meta, dict) and all(
            isinstance(meta.get(key), int) and not isinstance(meta.get(key), bool)
            for key in _SUMMARY_KEYS
        ):
            return {
                "found": meta["found"],
                "returned": meta["returned"],
                "limit": meta["limit"],
                "page": meta["page"],
            }
        return summarize(articles)

    def fetch_headlines(self) -> Headlines:
        params = {
            "locale": self.locale,
            "language": self.language,
            "api_token": self.api_token,
        }
        try:
            resp = requests.get(self.url, params=params, timeout=self.timeout)
        except requests.RequestException as req_err:
            logger.error("Network error fetching TheNewsAPI headlines: %s", req_err)
            raise UpstreamError() from req_err

        if not resp.ok:
            logger.error("TheNewsAPI returned HTTP %s", resp.status_code)
            raise UpstreamError(status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error("TheNewsAPI returned a non-JSON body: %s", e)
            raise UpstreamError() from e

        articles = self.normalize(payload)
        logger.info("Fetched %d headlines from TheNewsAPI.", len(articles))
        return Headlines(articles, self.summary(payload, articles))

    def fetch_top_headlines(self) -> List[Article]:
        return self.fetch_headlines().articles
