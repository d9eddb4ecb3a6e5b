"""Unit tests for headline providers."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from biznews.config import Config
from biznews.errors import ConfigurationError, UpstreamError
from biznews.models import summarize
from biznews.providers.factory import build_provider
from biznews.providers.newsapi import NewsAPIProvider
from biznews.providers.rss import RSSHeadlineProvider
from biznews.providers.thenewsapi import TheNewsAPIProvider


def make_response(payload=None, ok=True, status_code=200):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


class TestNewsAPIProvider(unittest.TestCase):
    PAYLOAD = {
        "status": "ok",
        "totalResults": 2,
        "articles": [
            {
                "source": {"id": None, "name": "Reuters"},
                "author": None,
                "title": "Chip maker expands",
                "description": "New fab announced",
                "url": "https://example.com/a",
                "urlToImage": None,
                "publishedAt": "2024-05-01T12:00:00Z",
                "content": None,
            },
            {
                "source": "bloomberg.com",
                "title": "Rates hold steady",
                "url": "https://example.com/b",
            },
        ],
    }

    @patch("biznews.providers.newsapi.requests.get")
    def test_fetch_normalizes_in_order(self, mock_get):
        mock_get.return_value = make_response(self.PAYLOAD)
        provider = NewsAPIProvider("key123")

        articles = provider.fetch_top_headlines()

        self.assertEqual(len(articles), 2)
        first, second = articles
        self.assertEqual(first["title"], "Chip maker expands")
        self.assertEqual(first["source"], "Reuters")
        self.assertEqual(first["image_url"], None)
        self.assertEqual(first["published_at"], "2024-05-01T12:00:00Z")
        self.assertIn("author", first)
        self.assertIsNone(first["author"])
        self.assertEqual(second["source"], "bloomberg.com")

    @patch("biznews.providers.newsapi.requests.get")
    def test_absent_fields_stay_absent(self, mock_get):
        mock_get.return_value = make_response(self.PAYLOAD)
        second = NewsAPIProvider("key123").fetch_top_headlines()[1]

        self.assertNotIn("description", second)
        self.assertNotIn("image_url", second)
        self.assertNotIn("published_at", second)
        self.assertNotIn("identifier", second)

    @patch("biznews.providers.newsapi.requests.get")
    def test_api_key_sent_as_query_param(self, mock_get):
        mock_get.return_value = make_response({"articles": []})
        NewsAPIProvider("key&123").fetch_top_headlines()

        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["params"]["apiKey"], "key&123")
        self.assertEqual(kwargs["params"]["country"], "us")
        self.assertEqual(kwargs["params"]["pageSize"], 100)

    @patch("biznews.providers.newsapi.requests.get")
    def test_error_status_raises_upstream_error(self, mock_get):
        mock_get.return_value = make_response(ok=False, status_code=401)

        with self.assertRaises(UpstreamError) as ctx:
            NewsAPIProvider("bad").fetch_top_headlines()

        self.assertEqual(str(ctx.exception), "Failed to fetch top headlines")
        self.assertEqual(ctx.exception.status_code, 401)

    @patch("biznews.providers.newsapi.requests.get")
    def test_network_error_raises_upstream_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")

        with self.assertRaises(UpstreamError):
            NewsAPIProvider("key").fetch_top_headlines()

    def test_source_object_prefers_domain(self):
        provider = NewsAPIProvider("key")
        articles = provider.normalize(
            {
                "articles": [
                    {"source": {"domain": "reuters.com", "name": "Reuters"}},
                    {"source": {"domain": None, "name": "Reuters"}},
                ]
            }
        )
        self.assertEqual(articles[0]["source"], "reuters.com")
        self.assertEqual(articles[1]["source"], "Reuters")

    @patch("biznews.providers.newsapi.requests.get")
    def test_summary_reports_total_results(self, mock_get):
        payload = dict(self.PAYLOAD, totalResults=37)
        mock_get.return_value = make_response(payload)

        headlines = NewsAPIProvider("key").fetch_headlines()

        self.assertEqual(len(headlines.articles), 2)
        self.assertEqual(
            headlines.summary, {"found": 37, "returned": 2, "limit": 100, "page": 1}
        )

    def test_summary_without_total_results(self):
        provider = NewsAPIProvider("key")
        articles = [{"title": "a"}]
        self.assertEqual(
            provider.summary({"articles": []}, articles),
            {"found": 1, "returned": 1, "limit": 1, "page": 1},
        )

    def test_source_object_without_name_or_domain(self):
        provider = NewsAPIProvider("key")
        articles = provider.normalize({"articles": [{"source": {"id": "x"}}]})
        self.assertIn("source", articles[0])
        self.assertIsNone(articles[0]["source"])


class TestTheNewsAPIProvider(unittest.TestCase):
    @patch("biznews.providers.thenewsapi.requests.get")
    def test_flattens_categories_in_order(self, mock_get):
        payload = {
            "data": {
                "business": [{"uuid": "a1", "title": "A1"}],
                "tech": [{"uuid": "a2", "title": "A2"}, {"uuid": "a3", "title": "A3"}],
            }
        }
        mock_get.return_value = make_response(payload)

        articles = TheNewsAPIProvider("token").fetch_top_headlines()

        self.assertEqual([a["identifier"] for a in articles], ["a1", "a2", "a3"])

    def test_flat_data_list(self):
        payload = {
            "meta": {"found": 1, "returned": 1, "limit": 3, "page": 1},
            "data": [
                {
                    "uuid": "u1",
                    "title": "Title",
                    "description": "",
                    "keywords": "markets",
                    "snippet": "Snip",
                    "url": "https://example.com/u1",
                    "image_url": "https://example.com/u1.jpg",
                    "language": "en",
                    "published_at": "2024-05-01T12:00:00.000000Z",
                    "source": "example.com",
                    "categories": ["business"],
                    "relevance_score": None,
                    "locale": "us",
                }
            ],
        }
        article = TheNewsAPIProvider("token").normalize(payload)[0]

        self.assertEqual(article["identifier"], "u1")
        self.assertEqual(article["description"], "")
        self.assertEqual(article["source"], "example.com")
        self.assertEqual(article["categories"], ["business"])
        self.assertIsNone(article["relevance_score"])
        self.assertEqual(article["published_at"], "2024-05-01T12:00:00.000000Z")

    @patch("biznews.providers.thenewsapi.requests.get")
    def test_summary_uses_meta_block(self, mock_get):
        meta = {"found": 1000, "returned": 1, "limit": 3, "page": 2}
        mock_get.return_value = make_response({"meta": meta, "data": [{"uuid": "x"}]})

        headlines = TheNewsAPIProvider("token").fetch_headlines()

        self.assertEqual(headlines.articles, [{"identifier": "x"}])
        self.assertEqual(headlines.summary, meta)

    def test_summary_synthesized_for_category_map(self):
        provider = TheNewsAPIProvider("token")
        payload = {"data": {"business": [{"uuid": "a1"}], "tech": [{"uuid": "a2"}]}}
        articles = provider.normalize(payload)

        self.assertEqual(
            provider.summary(payload, articles),
            {"found": 2, "returned": 2, "limit": 2, "page": 1},
        )

    def test_non_list_categories_are_skipped(self):
        payload = {"data": {"general": [{"title": "G"}], "note": "ignored"}}
        articles = TheNewsAPIProvider("token").normalize(payload)
        self.assertEqual(articles, [{"title": "G"}])

    @patch("biznews.providers.thenewsapi.requests.get")
    def test_error_status_raises_upstream_error(self, mock_get):
        mock_get.return_value = make_response(ok=False, status_code=500)

        with self.assertRaises(UpstreamError):
            TheNewsAPIProvider("token").fetch_top_headlines()


class TestRSSHeadlineProvider(unittest.TestCase):
    FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Top stories</title>
    <item>
      <guid>story-1</guid>
      <title>Retailer opens stores</title>
      <link>https://example.com/1</link>
      <description>&lt;p&gt;Expansion &lt;b&gt;plans&lt;/b&gt;&lt;/p&gt;</description>
      <pubDate>Wed, 01 May 2024 12:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second story</title>
      <link>https://example.com/2</link>
    </item>
  </channel>
</rss>
"""

    def test_clean_html(self):
        provider = RSSHeadlineProvider("http://feed")
        self.assertEqual(provider._clean_html("<p>Hello <b>World</b></p>"), "Hello World")
        self.assertEqual(provider._clean_html("Tom &amp; Jerry"), "Tom & Jerry")
        self.assertEqual(provider._clean_html(""), "")

    @patch("biznews.providers.rss.requests.get")
    def test_fetch_feed(self, mock_get):
        mock_resp = MagicMock()
        mock_resp.content = self.FEED
        mock_get.return_value = mock_resp

        articles = RSSHeadlineProvider("http://feed").fetch_top_headlines()

        self.assertEqual(len(articles), 2)
        self.assertEqual(articles[0]["identifier"], "story-1")
        self.assertEqual(articles[0]["title"], "Retailer opens stores")
        self.assertEqual(articles[0]["url"], "https://example.com/1")
        self.assertEqual(articles[0]["description"], "Expansion plans")
        self.assertEqual(articles[0]["published_at"], "Wed, 01 May 2024 12:00:00 GMT")
        self.assertNotIn("published_at", articles[1])
        self.assertNotIn("description", articles[1])

    @patch("biznews.providers.rss.requests.get")
    def test_http_error_raises_upstream_error(self, mock_get):
        mock_resp = MagicMock()
        mock_resp.raise_for_status.side_effect = requests.HTTPError("503")
        mock_get.return_value = mock_resp

        with self.assertRaises(UpstreamError):
            RSSHeadlineProvider("http://feed").fetch_top_headlines()


class TestFactory(unittest.TestCase):
    def test_builds_configured_provider(self):
        self.assertIsInstance(build_provider(Config()), NewsAPIProvider)
        self.assertIsInstance(
            build_provider(Config(news_provider="thenewsapi")), TheNewsAPIProvider
        )
        self.assertIsInstance(build_provider(Config(news_provider="rss")), RSSHeadlineProvider)

    def test_unknown_provider(self):
        with self.assertRaises(ConfigurationError):
            build_provider(Config(news_provider="nope"))


class TestSummarize(unittest.TestCase):
    def test_summary_counts(self):
        self.assertEqual(
            summarize([{"title": "a"}, {"title": "b"}]),
            {"found": 2, "returned": 2, "limit": 2, "page": 1},
        )


if __name__ == "__main__":
    unittest.main()
