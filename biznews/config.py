"""
Configuration for the BizNews service.

Settings are read once from the environment (and an optional .env file) and
passed explicitly to the components that need them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_RSS_FEED_URL = "https://news.google.com/rss?hl=en-US&gl=US&ceid=US:en"


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Resolved service settings."""

    news_provider: str = "newsapi"
    newsapi_api_key: str = ""
    thenewsapi_api_key: str = ""
    rss_feed_url: str = DEFAULT_RSS_FEED_URL
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    facilitator_url: str = ""
    evm_recipient_address: str = ""
    svm_recipient_address: str = ""
    testnet: bool = True
    business_news_price: str = "$0.05"
    http_timeout: float = 10.0
    port: int = 3011
    log_level: str = "INFO"


def load_config(
    environ: Optional[Mapping[str, str]] = None, dotenv: bool = True
) -> Config:
    """Builds a Config from environment variables."""
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    config = Config(
        news_provider=environ.get("NEWS_PROVIDER", "newsapi").strip().lower(),
        newsapi_api_key=environ.get("NEWSAPI_API_KEY", ""),
        thenewsapi_api_key=environ.get("THENEWSAPI_API_KEY", ""),
        rss_feed_url=environ.get("RSS_FEED_URL") or DEFAULT_RSS_FEED_URL,
        openai_api_key=environ.get("OPENAI_API_KEY", ""),
        openai_model=environ.get("OPENAI_MODEL") or "gpt-4o-mini",
        facilitator_url=environ.get("FACILITATOR_URL", ""),
        evm_recipient_address=environ.get("EVM_RECIPIENT_ADDRESS", ""),
        svm_recipient_address=environ.get("SVM_RECIPIENT_ADDRESS", ""),
        testnet=_as_bool(environ.get("PAYMENT_TESTNET"), True),
        business_news_price=environ.get("BUSINESS_NEWS_PRICE") or "$0.05",
        http_timeout=float(environ.get("HTTP_TIMEOUT") or 10),
        port=int(environ.get("PORT") or 3011),
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
    )
    logger.debug("Loaded configuration (provider=%s).", config.news_provider)
    return config
