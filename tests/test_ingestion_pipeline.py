import unittest
from datetime import datetime, timezone
from unittest import mock

from fakes import CATEGORY_IDS, InMemoryNewsStore, StaticSource

from newsdesk.config import Settings
from newsdesk.ingestion.article_types import ArticleCandidate
from newsdesk.ingestion.news_source import GNewsSource
from newsdesk.ingestion.pipeline import IngestionPipeline, OutcomeKind


def candidate(title, description="Some description", **kw):
    return ArticleCandidate(title=title, description=description, **kw)


BATCH = [
    candidate("Election results: BJP and Congress trade leads", "Votes counted in every assembly seat"),
    candidate("India beat Australia in IPL-style thriller", "Captain hits a century as the match goes to the wire",
              content="Full match report", image_url="https://img.example/1.jpg", source_name="Sportstar",
              published_at=datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)),
    candidate("A quiet afternoon in the hills", "Nothing in particular happened"),
]


class TestIngestionPipeline(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryNewsStore()
        self.settings = Settings(default_country_code="IN", max_articles=10)

    def _run(self, candidates, **kw):
        source = StaticSource(candidates, **kw)
        pipeline = IngestionPipeline(source, self.store, self.settings)
        return pipeline.run(timeout=5), source

    def test_accepts_new_articles_with_derived_fields(self):
        run, source = self._run(BATCH)
        self.assertEqual(run.summary(), {"fetched": 3, "accepted": 3, "duplicate": 0, "skipped": 0, "failed": 0})
        self.assertEqual(source.calls, [{"limit": 10, "timeout": 5}])

        stored = self.store.articles["india-beat-australia-in-ipl-style-thriller"]["article"]
        self.assertEqual(stored.category_id, CATEGORY_IDS["sports"])
        self.assertEqual(stored.country_id, 91)
        self.assertEqual(stored.author, "Sportstar")
        self.assertEqual(stored.content, "Full match report")
        self.assertEqual(stored.image_url, "https://img.example/1.jpg")
        self.assertEqual(stored.published_at, datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(stored.tags[:3], ["india", "beat", "australia"])
        self.assertLessEqual(len(stored.tags), 10)

        politics = self.store.articles["election-results-bjp-and-congress-trade-leads"]["article"]
        self.assertEqual(politics.category_id, CATEGORY_IDS["politics"])
        self.assertEqual(politics.author, "GNews")
        self.assertEqual(politics.content, "Votes counted in every assembly seat")
        self.assertIsNotNone(politics.published_at.tzinfo)

        quiet = self.store.articles["a-quiet-afternoon-in-the-hills"]["article"]
        self.assertEqual(quiet.category_id, CATEGORY_IDS["uncategorized"])

        self.assertEqual(len(run.created_articles), 3)

    def test_second_run_is_idempotent(self):
        first, _ = self._run(BATCH)
        second, _ = self._run(BATCH)
        self.assertEqual(first.accepted, 3)
        self.assertEqual(second.accepted, 0)
        self.assertEqual(second.duplicate, 3)
        self.assertEqual(len(self.store.articles), 3)

    def test_source_failure_aborts_with_zero_summary(self):
        run, _ = self._run(BATCH, error="GNews API error: 500")
        self.assertEqual(run.summary(), {"fetched": 0, "accepted": 0, "duplicate": 0, "skipped": 0, "failed": 0})
        self.assertEqual(run.error, "GNews API error: 500")
        self.assertEqual(self.store.articles, {})
        self.assertEqual(self.store.slug_checks, 0)

    def test_zero_timeout_from_real_source_aborts_with_zero_summary(self):
        pipeline = IngestionPipeline(GNewsSource(api_key="k"), self.store, self.settings)
        with mock.patch("newsdesk.ingestion.news_source.requests.get") as get:
            run = pipeline.run(timeout=0)
        get.assert_not_called()
        self.assertEqual(run.summary(), {"fetched": 0, "accepted": 0, "duplicate": 0, "skipped": 0, "failed": 0})
        self.assertIn("timeout must be positive", run.error)

    def test_missing_title_or_description_is_skipped_not_failed(self):
        run, _ = self._run([candidate("", "desc"), candidate("Title only", None), candidate("Title", "   ")])
        self.assertEqual(run.skipped, 3)
        self.assertEqual(run.failed, 0)
        self.assertEqual(run.fetched, 3)

    def test_unsluggable_title_fails_only_that_candidate(self):
        run, _ = self._run([candidate("!!!"), candidate("Sensex rallies")])
        self.assertEqual(run.failed, 1)
        self.assertEqual(run.accepted, 1)
        failure = run.to_dict()["failures"][0]
        self.assertEqual(failure["title"], "!!!")
        self.assertTrue(failure["reason"].startswith("invalid_title"))

    def test_duplicate_titles_within_batch(self):
        run, _ = self._run([candidate("Same headline"), candidate("Same   headline!")])
        self.assertEqual(run.accepted, 1)
        self.assertEqual(run.duplicate, 1)

    def test_existing_slug_is_not_classified_again(self):
        self._run([candidate("Markets close higher")])
        self.store.unavailable.add("find_category_id")
        run, _ = self._run([candidate("Markets close higher")])
        self.assertEqual(run.duplicate, 1)
        self.assertEqual(run.failed, 0)

    def test_insert_race_counts_as_duplicate(self):
        class RacingStore(InMemoryNewsStore):
            def slug_exists(self, slug):
                return False

        self.store = RacingStore()
        self._run([candidate("Rupee hits record low")])
        run, _ = self._run([candidate("Rupee hits record low")])
        self.assertEqual(run.duplicate, 1)
        self.assertEqual(run.failed, 0)

    def test_store_failure_fails_candidate_and_continues(self):
        class FlakyStore(InMemoryNewsStore):
            def insert_article_if_absent(self, article):
                if article.slug == "flaky-one":
                    from newsdesk.errors import StoreUnavailable

                    raise StoreUnavailable("connection reset")
                return super().insert_article_if_absent(article)

        self.store = FlakyStore()
        run, _ = self._run([candidate("Flaky one"), candidate("Solid one")])
        self.assertEqual(run.failed, 1)
        self.assertEqual(run.accepted, 1)
        self.assertIn("store_unavailable", run.to_dict()["failures"][0]["reason"])

    def test_category_lookup_failure_is_per_candidate(self):
        self.store.unavailable.add("find_category_id")
        run, _ = self._run(BATCH)
        self.assertEqual(run.failed, 3)
        self.assertEqual(run.accepted, 0)
        self.assertIsNone(run.error)

    def test_batch_is_bounded(self):
        many = [candidate(f"Headline number {i}") for i in range(25)]
        run, source = self._run(many)
        self.assertEqual(run.fetched, 10)
        self.assertEqual(run.accepted, 10)

    def test_unknown_country_leaves_region_empty(self):
        self.settings = Settings(default_country_code="ZZ")
        self._run([candidate("Monsoon arrives early")])
        self.assertIsNone(self.store.articles["monsoon-arrives-early"]["article"].country_id)

    def test_outcomes_are_tagged(self):
        run, _ = self._run([candidate("Fresh story"), candidate("", "x")])
        kinds = [o.kind for o in run.outcomes]
        self.assertEqual(kinds, [OutcomeKind.ACCEPTED, OutcomeKind.SKIPPED])
        body = run.to_dict()
        self.assertEqual(body["accepted"], 1)
        self.assertEqual(body["articles"][0]["slug"], "fresh-story")
        self.assertIsNone(body["error"])


if __name__ == "__main__":
    unittest.main()
