import unittest

from newsdesk.classification.categories import (
    CATEGORY_KEYWORDS,
    UNCATEGORIZED,
    classify_category,
    score_categories,
)


class TestCategoryClassifier(unittest.TestCase):
    def test_repeated_election_is_politics(self):
        text = "election election election"
        scores = score_categories(text)
        self.assertEqual(classify_category(text), "politics")
        others = [v for k, v in scores.items() if k != "politics"]
        self.assertGreater(scores["politics"], max(others))

    def test_no_trigger_words_is_uncategorized(self):
        self.assertEqual(classify_category("A quiet afternoon", "Nothing much happened here"), UNCATEGORIZED)

    def test_tie_is_uncategorized(self):
        # one sports hit, one health hit
        self.assertEqual(classify_category("Cricket hospital"), UNCATEGORIZED)

    def test_whole_word_matching_only(self):
        # "matchbox" must not count as "match", "aid" must not count as "ai"
        self.assertEqual(score_categories("matchbox aid")["sports"], 0)
        self.assertEqual(score_categories("matchbox aid")["technology"], 0)

    def test_phrases_and_case(self):
        scores = score_categories("PRIME MINISTER addresses Lok Sabha")
        self.assertGreaterEqual(scores["politics"], 3)

    def test_empty_body_uses_title(self):
        self.assertEqual(classify_category("IPL final: captain scores century", ""), "sports")
        self.assertEqual(classify_category("IPL final: captain scores century", None), "sports")

    def test_body_contributes(self):
        self.assertEqual(
            classify_category("Big day", "The vaccine rollout reached every hospital as doctors cheered"),
            "health",
        )

    def test_long_body_is_tolerated(self):
        body = "startup revenue " * 5000
        self.assertEqual(classify_category("Update", body), "business")

    def test_result_is_in_taxonomy(self):
        cat = classify_category("Smartphone launch with AI chip", "new software update")
        self.assertIn(cat, set(CATEGORY_KEYWORDS) | {UNCATEGORIZED})
        self.assertEqual(cat, "technology")


if __name__ == "__main__":
    unittest.main()
