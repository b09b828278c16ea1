import re
import unittest

from newsdesk.errors import InvalidInput
from newsdesk.ingestion.slugs import slugify


SLUG_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class TestSlugify(unittest.TestCase):
    def test_basic_title(self):
        self.assertEqual(slugify("India wins the Test series!"), "india-wins-the-test-series")

    def test_collapses_punctuation_and_whitespace(self):
        self.assertEqual(slugify("  Sensex -- up   300 pts; Nifty @ record  "), "sensex-up-300-pts-nifty-record")

    def test_in_word_punctuation_is_dropped(self):
        self.assertEqual(slugify("India's GDP"), "indias-gdp")
        self.assertEqual(slugify("India's GDP grows 6.5%"), "indias-gdp-grows-65")
        self.assertEqual(slugify("U.S. talks"), "us-talks")
        self.assertEqual(slugify("IPL-style thriller"), "ipl-style-thriller")

    def test_folds_accents(self):
        self.assertEqual(slugify("Český Krumlov"), "cesky-krumlov")
        self.assertEqual(slugify("¡Hola señor!"), "hola-senor")

    def test_shape_and_determinism(self):
        titles = [
            "RBI keeps repo rate unchanged at 6.5%",
            "'Pushpa 2' box office: day 3 collection",
            "--Leading and trailing--",
            "A",
        ]
        for t in titles:
            s = slugify(t)
            self.assertRegex(s, SLUG_RE)
            self.assertEqual(s, slugify(t))

    def test_max_length_trims_trailing_hyphen(self):
        s = slugify("word " * 50, max_length=12)
        self.assertLessEqual(len(s), 12)
        self.assertFalse(s.endswith("-"))
        self.assertEqual(s, "word-word-wo")

    def test_titles_sharing_the_capped_prefix_share_a_slug(self):
        prefix = "budget " * 20
        a = slugify(prefix + "raises income tax slabs")
        b = slugify(prefix + "cuts fuel duty")
        self.assertEqual(len(a), 120)
        self.assertEqual(a, b)
        self.assertNotEqual(slugify(prefix + "x", max_length=200), slugify(prefix + "y", max_length=200))

    def test_empty_title_is_invalid(self):
        with self.assertRaises(InvalidInput):
            slugify("")
        with self.assertRaises(InvalidInput):
            slugify("   ")

    def test_title_without_sluggable_characters_is_invalid(self):
        with self.assertRaises(InvalidInput):
            slugify("!!! ??? ...")
        with self.assertRaises(InvalidInput):
            slugify("भारत")


if __name__ == "__main__":
    unittest.main()
