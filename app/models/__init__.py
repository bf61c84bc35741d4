from .user import User
from .blog import Blog
from .comment import Comment, CommentReport
from .like import Like

__all__ = [
    "User",
    "Blog",
    "Comment",
    "CommentReport",
    "Like",
]
