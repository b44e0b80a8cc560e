"""Keyword-based category suggestions for new quotes."""

import re

FALLBACK_CATEGORY = "other"
MIN_AUTO_CATEGORIZE_LENGTH = 10

# Order matters: on equal scores the earlier category wins.
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "inspiration": [
        "inspire", "dream", "achieve", "possible", "potential", "believe",
        "courage", "hope", "future", "aspire", "overcome", "journey",
    ],
    "motivation": [
        "motivate", "drive", "success", "goal", "achieve", "determination",
        "perseverance", "discipline", "focus", "ambition", "excellence", "progress",
    ],
    "wisdom": [
        "wisdom", "knowledge", "learn", "understand", "experience", "insight",
        "perspective", "truth", "philosophy", "reflection", "thought", "mind",
    ],
    "humor": [
        "humor", "funny", "laugh", "joke", "comedy", "smile",
        "wit", "amusing", "entertain", "hilarious", "irony", "sarcasm",
    ],
}  # fmt: skip


def score_categories(text: str, author: str = "") -> dict[str, float]:
    """Score each category: +1 per keyword found, +0.5 more when it is a whole word."""
    content = f"{text} {author}".lower()
    scores: dict[str, float] = {}
    for category, keywords in CATEGORY_KEYWORDS.items():
        score = 0.0
        for keyword in keywords:
            if keyword in content:
                score += 1
                if re.search(rf"\b{re.escape(keyword)}\b", content):
                    score += 0.5
        scores[category] = score
    return scores


def suggest_category(text: str, author: str = "") -> str:
    """Return the best matching category, or "other" when nothing matches."""
    best_category = FALLBACK_CATEGORY
    highest_score = 0.0
    for category, score in score_categories(text, author).items():
        if score > highest_score:
            highest_score = score
            best_category = category
    return best_category


def should_auto_categorize(text: str, author: str = "") -> bool:
    """Only auto-categorize quotes long enough to have a clear keyword match."""
    if len(text) < MIN_AUTO_CATEGORIZE_LENGTH:
        return False
    return suggest_category(text, author) != FALLBACK_CATEGORY
