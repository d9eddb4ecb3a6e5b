"""
News tools exposed by the BizNews service.

Each tool returns a plain payload dict; tool_result() wraps it in the
single-text-item envelope the transport sends back.
"""

import json
import logging
from typing import Any, Dict

from biznews.models import summarize
from biznews.providers.base import HeadlineProvider
from biznews.services.llm import RelevanceFilter

logger = logging.getLogger(__name__)


def error_payload(err: Exception) -> Dict[str, Any]:
    """Builds the caller-visible error payload for an exception."""
    return {"error": str(err) or "Unknown error"}


def tool_result(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Wraps a payload as a tool call result."""
    return {"content": [{"type": "text", "text": json.dumps(payload)}]}


class NewsTools:
    """Implements the news and business_news operations."""

    def __init__(self, provider: HeadlineProvider, relevance_filter: RelevanceFilter):
        self.provider = provider
        self.relevance_filter = relevance_filter

    def news(self) -> Dict[str, Any]:
        """Unfiltered top headlines, with the provider's counts when it sends them."""
        fetch_headlines = getattr(self.provider, "fetch_headlines", None)
        try:
            if callable(fetch_headlines):
                articles, summary = fetch_headlines()
            else:
                articles = self.provider.fetch_top_headlines()
                summary = summarize(articles)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("news failed: %s", e)
            return error_payload(e)
        return {"articles": articles, "meta": summary}

    def business_news(self) -> Dict[str, Any]:
        """Top headlines filtered for business relevance."""
        try:
            articles = self.provider.fetch_top_headlines()
            result = self.relevance_filter.filter(articles)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("business_news failed: %s", e)
            return error_payload(e)
        return result.to_payload()
