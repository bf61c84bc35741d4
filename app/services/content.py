"""
Derived content fields and field validation for blog posts.
"""
import math
import re
from typing import Iterable, List, Optional

from .errors import ValidationError

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
CONTENT_MIN_LENGTH = 50
EXCERPT_MAX_LENGTH = 300
AUTO_EXCERPT_LENGTH = 150
TAG_MAX_LENGTH = 30
WORDS_PER_MINUTE = 200

CATEGORIES = [
    "Technology",
    "Programming",
    "AI/ML",
    "Web Development",
    "Mobile Development",
    "DevOps",
    "Database",
    "Security",
    "Tutorial",
    "Opinion",
    "News",
    "Other",
]

_MARKDOWN_MARKS = re.compile(r"[#*`]")


def reading_time(content: str) -> int:
    """Minutes to read at 200 words per minute, never below 1."""
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def make_excerpt(content: str) -> str:
    return _MARKDOWN_MARKS.sub("", content)[:AUTO_EXCERPT_LENGTH] + "..."


def validate_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters",
            field="title",
        )
    return title


def validate_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if len(content) < CONTENT_MIN_LENGTH:
        raise ValidationError(
            f"Content must be at least {CONTENT_MIN_LENGTH} characters long",
            field="content",
        )
    return content


def validate_excerpt(excerpt: Optional[str]) -> Optional[str]:
    if excerpt is None:
        return None
    excerpt = excerpt.strip()
    if len(excerpt) > EXCERPT_MAX_LENGTH:
        raise ValidationError(
            f"Excerpt cannot exceed {EXCERPT_MAX_LENGTH} characters",
            field="excerpt",
        )
    return excerpt or None


def validate_category(category: Optional[str]) -> Optional[str]:
    if category is not None and category not in CATEGORIES:
        raise ValidationError("Invalid category", field="category")
    return category


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    normalized = []
    for tag in tags or []:
        tag = tag.strip().lower()
        if not 1 <= len(tag) <= TAG_MAX_LENGTH:
            raise ValidationError(
                f"Each tag must be between 1 and {TAG_MAX_LENGTH} characters",
                field="tags",
            )
        if tag not in normalized:
            normalized.append(tag)
    return normalized
