"""
Selects the headline provider named in the configuration.
"""

from typing import Callable, Dict

from biznews.config import Config
from biznews.errors import ConfigurationError
from biznews.providers.base import HeadlineProvider
from biznews.providers.newsapi import NewsAPIProvider
from biznews.providers.rss import RSSHeadlineProvider
from biznews.providers.thenewsapi import TheNewsAPIProvider

PROVIDERS: Dict[str, Callable[[Config], HeadlineProvider]] = {
    "newsapi": lambda c: NewsAPIProvider(c.newsapi_api_key, timeout=c.http_timeout),
    "thenewsapi": lambda c: TheNewsAPIProvider(
        c.thenewsapi_api_key, timeout=c.http_timeout
    ),
    "rss": lambda c: RSSHeadlineProvider(c.rss_feed_url, timeout=c.http_timeout),
}


def build_provider(config: Config) -> HeadlineProvider:
    """Returns the provider configured by NEWS_PROVIDER."""
    try:
        factory = PROVIDERS[config.news_provider]
    except KeyError:
        raise ConfigurationError(
            f"Unknown NEWS_PROVIDER {config.news_provider!r}; "
            f"expected one of {', '.join(sorted(PROVIDERS))}"
        ) from None
    return factory(config)
