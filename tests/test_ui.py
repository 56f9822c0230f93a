"""Tests for category lookup and completion."""

from prompt_toolkit.document import Document

from finflow.categories import DEFAULT_CATEGORIES, FALLBACK_CATEGORY, lookup
from finflow.ui import CategoryCompleter, fuzzy_match


class TestFuzzyMatch:
    def test_in_order_characters(self):
        assert fuzzy_match("gro", "groceries")
        assert fuzzy_match("fdd", "food & dining")

    def test_out_of_order(self):
        assert not fuzzy_match("dof", "food")


class TestCategoryCompleter:
    def test_completions(self):
        completer = CategoryCompleter(DEFAULT_CATEGORIES)
        names = [c.text for c in completer.get_completions(Document("hlth"), None)]
        assert names == ["Healthcare"]

    def test_empty_query_lists_all(self):
        completer = CategoryCompleter(DEFAULT_CATEGORIES)
        completions = list(completer.get_completions(Document(""), None))
        assert len(completions) == len(DEFAULT_CATEGORIES)

    def test_resolve_canonical_spelling(self):
        completer = CategoryCompleter(DEFAULT_CATEGORIES)
        assert completer.resolve(" shopping ") == "Shopping"
        assert completer.resolve("Pets") == "Pets"


class TestLookup:
    def test_known(self):
        assert lookup("income").name == "Income"

    def test_unknown_keeps_name(self):
        category = lookup("Pets")
        assert category.name == "Pets"
        assert category.icon == lookup("Others").icon

    def test_fallback_is_registered(self):
        assert lookup(FALLBACK_CATEGORY) in DEFAULT_CATEGORIES
