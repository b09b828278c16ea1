import os
import unittest
from unittest import mock

from newsdesk.config import DEFAULT_GNEWS_ENDPOINT, Settings


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            s = Settings.from_env(dotenv=False)
        self.assertIsNone(s.gnews_api_key)
        self.assertEqual(s.gnews_endpoint, DEFAULT_GNEWS_ENDPOINT)
        self.assertEqual(s.default_country_code, "IN")
        self.assertEqual(s.max_articles, 10)
        self.assertEqual(s.ingest_mode, "once")

    def test_env_overrides(self):
        env = {
            "GNEWS_API_KEY": " abc ",
            "DEFAULT_COUNTRY_CODE": "us",
            "NEWS_MAX_ARTICLES": "500",
            "NEWS_FETCH_TIMEOUT": "2.5",
            "INGEST_MODE": "Scheduled",
            "CORS_ORIGINS": "https://a.example, https://b.example",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            s = Settings.from_env(dotenv=False)
        self.assertEqual(s.gnews_api_key, "abc")
        self.assertEqual(s.default_country_code, "US")
        self.assertEqual(s.max_articles, 100)
        self.assertEqual(s.fetch_timeout, 2.5)
        self.assertEqual(s.ingest_mode, "scheduled")
        self.assertEqual(s.cors_origins, ("https://a.example", "https://b.example"))

    def test_bad_numbers_fall_back(self):
        with mock.patch.dict(os.environ, {"NEWS_MAX_ARTICLES": "ten", "NEWS_FETCH_TIMEOUT": "x"}, clear=True):
            s = Settings.from_env(dotenv=False)
        self.assertEqual(s.max_articles, 10)
        self.assertEqual(s.fetch_timeout, 30.0)


if __name__ == "__main__":
    unittest.main()
