"""
Data models for the BizNews service.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, TypedDict


class Article(TypedDict, total=False):
    """Type definition for a normalized news article.

    Keys the provider did not send are left out; keys it sent empty are None.
    """

    identifier: Optional[str]
    title: Optional[str]
    description: Optional[str]
    url: Optional[str]
    image_url: Optional[str]
    published_at: Optional[str]
    source: Optional[str]
    author: Optional[str]
    content: Optional[str]
    keywords: Optional[str]
    snippet: Optional[str]
    categories: Optional[List[str]]
    relevance_score: Optional[float]
    locale: Optional[str]
    language: Optional[str]


class HeadlineSummary(TypedDict):
    """Counts reported alongside an unfiltered headline list."""

    found: int
    returned: int
    limit: int
    page: int


def summarize(articles: List[Article]) -> HeadlineSummary:
    """Builds the summary record for a list the provider sent no counts for."""
    count = len(articles)
    return {"found": count, "returned": count, "limit": count, "page": 1}


class Headlines(NamedTuple):
    """Fetched articles together with the provider's counts."""

    articles: List[Article]
    summary: HeadlineSummary


@dataclass(frozen=True)
class FilterResult:
    """Outcome of the relevance filter: a list of articles or an error."""

    articles: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, articles: List[Dict[str, Any]]) -> "FilterResult":
        return cls(articles=list(articles))

    @classmethod
    def failed(cls, message: str) -> "FilterResult":
        return cls(error=message)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_payload(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {"articles": self.articles or []}
