"""Unit tests for rendering.slugger module."""

from src.rendering.slugger import Slugger, slugify


class TestSlugify:
    """Test cases for slugify function."""

    def test_lowercases_and_hyphenates(self):
        assert slugify("Getting Started") == "getting-started"

    def test_strips_punctuation(self):
        assert slugify("What's new? (2024)") == "whats-new-2024"

    def test_keeps_unicode_letters(self):
        assert slugify("Café Über") == "café-über"

    def test_keeps_underscores_and_hyphens(self):
        assert slugify("snake_case - kebab") == "snake_case---kebab"


class TestSlugger:
    """Test cases for Slugger class."""

    def test_repeated_slugs_get_suffixes(self):
        slugger = Slugger()
        assert [slugger.slug("Intro") for _ in range(3)] == ["intro", "intro-1", "intro-2"]

    def test_suffix_skips_taken_slug(self):
        """A heading literally named like a suffixed slug is not reused."""
        slugger = Slugger()
        assert [slugger.slug(v) for v in ("Foo", "Foo 1", "Foo")] == ["foo", "foo-1", "foo-2"]

    def test_reset_forgets_slugs(self):
        slugger = Slugger()
        slugger.slug("Intro")
        slugger.reset()
        assert slugger.slug("Intro") == "intro"
