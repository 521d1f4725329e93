# tests/test_matcher.py
"""
Tests for text heuristics and selector matching.
"""

import pytest

from uiauto_wda.hierarchy import Bounds, Node
from uiauto_wda.matcher import filter_by_selector, looks_like_regex, matches_selector, matches_text
from uiauto_wda.selector import Selector


class TestLooksLikeRegex:
    """Tests for looks_like_regex."""

    @pytest.mark.parametrize("text, expected", [
        ("mastodon.social", False),
        ("v1.2.3", False),
        ("Log.*", True),
        ("^Start", True),
        ("end$", True),
        ("Login", False),
        ("a.+b", True),
        ("Item (1)", True),
        ("a|b", True),
        ("Price $5", False),
        ("2^10", False),
        (r"a\*b", False),
    ])
    def test_cases(self, text, expected):
        """Should classify text as a pattern only when it has regex syntax."""
        assert looks_like_regex(text) is expected


class TestMatchesText:
    """Tests for matches_text."""

    def test_substring_case_insensitive(self):
        """Should match plain text as a case-insensitive substring."""
        assert matches_text("login", "Please LOGIN now")
        assert not matches_text("logout", "Login")

    def test_any_text_matches(self):
        """Should match when any of the texts matches."""
        assert matches_text("Email", "", "emailField", "")

    def test_regex_case_insensitive(self):
        """Should search patterns case-insensitively."""
        assert matches_text("log.*", "Login")
        assert not matches_text("^in", "Login")

    def test_regex_against_flattened_newlines(self):
        """Should also try the text with newlines flattened to spaces."""
        assert matches_text("^Hello world$", "Hello\nworld")

    def test_regex_literal_equality(self):
        """Should accept a literal match of the pattern text."""
        assert matches_text("a+b", "a+b")

    def test_invalid_regex_falls_back_to_substring(self):
        """Should fall back to substring matching for an invalid pattern."""
        assert matches_text("[abc", "x[ABC]")
        assert not matches_text("[abc", "abc")

    def test_dot_is_literal_in_domains(self):
        """Should keep a dot literal in domain-like text."""
        assert matches_text("mastodon.social", "Join mastodon.social")
        assert not matches_text("mastodon.social", "mastodonXsocial")


def _node(**kw):
    return Node(**kw)


class TestMatchesSelector:
    """Tests for matches_selector."""

    def test_text_checks_all_attributes(self):
        """Should match text against placeholder and value too."""
        assert matches_selector(_node(placeholder="Enter email"), Selector(text="enter"))
        assert matches_selector(_node(value="42 items"), Selector(text="42"))

    def test_id_is_substring_of_name(self):
        """Should match id as a case-sensitive substring of the name."""
        node = _node(name="loginButton")
        assert matches_selector(node, Selector(id="login"))
        assert not matches_selector(node, Selector(id="Login"))

    def test_size_default_tolerance(self):
        """Should accept sizes within the default tolerance."""
        node = _node(bounds=Bounds(0, 0, 295, 50))
        assert matches_selector(node, Selector(width=290))
        assert not matches_selector(node, Selector(width=289))
        assert matches_selector(node, Selector(width=290, height=46))

    def test_size_exact_tolerance(self):
        """Should require an exact size with tolerance 0."""
        node = _node(bounds=Bounds(0, 0, 291, 50))
        assert not matches_selector(node, Selector(width=290, tolerance=0))
        assert matches_selector(node, Selector(width=291, tolerance=0))

    def test_state(self):
        """Should compare only the state fields that are set."""
        node = _node(label="Settings", enabled=False, selected=True)
        assert matches_selector(node, Selector(text="Settings", enabled=False))
        assert not matches_selector(node, Selector(text="Settings", enabled=True))
        assert matches_selector(node, Selector(selected=True))
        assert not matches_selector(node, Selector(focused=True))

    def test_conjunction(self):
        """Should require every constraint to match."""
        node = _node(label="Login", name="loginButton")
        assert not matches_selector(node, Selector(text="Login", id="signup"))

    def test_empty_matches_everything(self):
        """Should match any node with an empty selector."""
        assert matches_selector(_node(), Selector())

    def test_filter_keeps_order(self):
        """Should keep document order when filtering."""
        nodes = [_node(label="Row 2"), _node(label="Header"), _node(label="Row 1")]
        assert [n.label for n in filter_by_selector(nodes, Selector(text="Row"))] == ["Row 2", "Row 1"]
