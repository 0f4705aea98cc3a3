"""
Keyword-based topic categorization
"""
from typing import List, Tuple

from app.schemas.quiz_generation import Category


# Ordered: the first category with a matching keyword wins
CATEGORY_KEYWORDS: List[Tuple[Tuple[str, ...], Category]] = [
    (
        ("programming", "coding", "javascript", "python", "java", "react", "technology", "computer"),
        Category.TECHNOLOGY,
    ),
    (("history", "war", "ancient", "medieval"), Category.HISTORY),
    (("science", "physics", "chemistry", "biology"), Category.SCIENCE),
    (("geography", "country", "capital", "continent"), Category.GEOGRAPHY),
    (("math", "algebra", "geometry", "calculus"), Category.MATHEMATICS),
    (("sport", "football", "basketball", "olympic"), Category.SPORTS),
    (("movie", "music", "celebrity", "entertainment"), Category.ENTERTAINMENT),
]

FALLBACK_CATEGORY = Category.GENERAL_KNOWLEDGE


def classify_topic(topic: str) -> Category:
    """
    Map a free-text topic to a category

    Case-insensitive substring match against CATEGORY_KEYWORDS.
    Returns General Knowledge when nothing matches.
    """
    lower_topic = (topic or "").lower()

    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in lower_topic for keyword in keywords):
            return category

    return FALLBACK_CATEGORY
