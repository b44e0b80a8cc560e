"""Tests for keyword-based category suggestions."""

import pytest

from quotekeeper.services.categorize import (
    score_categories,
    should_auto_categorize,
    suggest_category,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Believe in your dreams and follow your hope for the future", "inspiration"),
        ("Success needs discipline and focus on the goal", "motivation"),
        ("Knowledge speaks, but wisdom listens", "wisdom"),
        ("A good laugh and a joke make every day funny", "humor"),
        ("The cat sat on the mat", "other"),
    ],
)
def test_suggest_category(text, expected):
    assert suggest_category(text) == expected


def test_whole_word_scores_higher_than_substring():
    scores = score_categories("Wit")
    assert scores["humor"] == 1.5

    # "wit" only appears inside "without"
    scores = score_categories("Without")
    assert scores["humor"] == 1


def test_author_counts_toward_score():
    assert suggest_category("Carry on", author="The Comedy Club") == "humor"


def test_tie_goes_to_earlier_category():
    # "achieve" is an inspiration and a motivation keyword
    assert suggest_category("achieve") == "inspiration"


def test_matching_is_case_insensitive():
    assert suggest_category("WISDOM") == "wisdom"


def test_should_auto_categorize():
    assert should_auto_categorize("Knowledge speaks, but wisdom listens") is True
    # Too short
    assert should_auto_categorize("wisdom") is False
    # Long enough but no keyword match
    assert should_auto_categorize("The cat sat on the mat") is False
