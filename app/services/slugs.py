"""
URL slugs for blog posts.

Slugs only have to be unique among approved posts, so collision probing runs
only when the post is (or is becoming) approved.
"""
import re
from typing import Callable, Iterator, Optional

SLUG_MAX_LENGTH = 50
FALLBACK_SLUG = "post"

_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

# (candidate, exclude_id) -> is another approved post already using it?
SlugLookup = Callable[[str, Optional[int]], bool]


def base_slug(title: str) -> str:
    """
    "Hello World!!" -> "hello-world"

    Leading/trailing whitespace is dropped before hyphenating so titles never
    produce dangling hyphens.
    """
    slug = _DISALLOWED.sub("", title.lower()).strip()
    slug = _WHITESPACE.sub("-", slug)[:SLUG_MAX_LENGTH]
    return slug or FALLBACK_SLUG


def candidates(base: str) -> Iterator[str]:
    yield base
    counter = 1
    while True:
        yield f"{base}-{counter}"
        counter += 1


def allocate_slug(
    title: str,
    current_id: Optional[int],
    will_be_approved: bool,
    is_taken: SlugLookup,
) -> str:
    """
    Pick the slug a post should be saved with.

    Args:
        title: Post title (already validated)
        current_id: Id of the post being saved, excluded from the lookup
        will_be_approved: Status of the post after this save is "approved"
        is_taken: Approved-slug lookup supplied by the store

    Returns:
        The base slug, or the first free ``base-N`` when approved.
    """
    base = base_slug(title)
    if not will_be_approved:
        return base

    for candidate in candidates(base):
        if not is_taken(candidate, current_id):
            return candidate
