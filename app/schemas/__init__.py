from .auth import UserCreate, UserLogin, UserResponse, TokenResponse, RefreshRequest
from .blog import BlogCreate, BlogUpdate, ReviewRequest, LikeRequest, blog_to_dict
from .comment import (
    CommentCreate,
    CommentReportRequest,
    ModerateCommentRequest,
    comment_to_dict,
    moderated_comment_to_dict,
    thread_comments,
)

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "TokenResponse", "RefreshRequest",
    "BlogCreate", "BlogUpdate", "ReviewRequest", "LikeRequest", "blog_to_dict",
    "CommentCreate", "CommentReportRequest", "ModerateCommentRequest",
    "comment_to_dict", "moderated_comment_to_dict", "thread_comments",
]
