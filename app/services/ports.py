"""
Collaborator contracts the blog core depends on.

The core never imports the ORM session; it talks to these protocols and the
SQLAlchemy implementations in ``app.repositories`` are wired in per request.
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Tuple


ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation."""
    id: int
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def owns(self, post) -> bool:
        return post.author_id == self.id


class PostStore(Protocol):
    def new_post(self, **fields) -> Any: ...

    def find_by_id(self, post_id: int) -> Optional[Any]: ...

    def find_one(self, **filters) -> Optional[Any]: ...

    def save(self, post) -> Any: ...

    def delete_by_id(self, post_id: int) -> None: ...

    def count_by_slug_status(self, slug: str, status: str, exclude_id: Optional[int]) -> int: ...


class CommentStore(Protocol):
    def add(self, blog_id: int, author_id: int, content: str, parent_id: Optional[int] = None) -> Any: ...

    def find_by_id(self, comment_id: int) -> Optional[Any]: ...

    def save(self, comment) -> Any: ...

    def delete(self, comment) -> int: ...

    def list_for_blog(self, blog_id: int) -> List[Any]: ...

    def delete_all_by_blog(self, blog_id: int) -> int: ...

    def find_report(self, comment_id: int, user_id: int) -> Optional[Any]: ...

    def add_report(self, comment_id: int, user_id: int, reason: str) -> int: ...

    def list_reported(self, page: int = 1, per_page: int = 20) -> Tuple[List[Any], int]: ...


class LikeStore(Protocol):
    def find(self, blog_id: int, user_id: int) -> Optional[Any]: ...

    def add(self, blog_id: int, user_id: int, kind: str = "like") -> Any: ...

    def delete(self, like) -> None: ...

    def delete_all_by_blog(self, blog_id: int) -> int: ...


class UserStats(Protocol):
    def increment_blog_count(self, author_id: int, delta: int) -> None: ...
