from typing import Dict, List, Optional

from pydantic import BaseModel

from .blog import author_to_dict, iso


class CommentCreate(BaseModel):
    blog_id: int
    content: str
    parent_id: Optional[int] = None


class CommentReportRequest(BaseModel):
    reason: str = "other"


class ModerateCommentRequest(BaseModel):
    action: str  # hide or show


def comment_to_dict(comment) -> dict:
    return {
        "id": comment.id,
        "blog_id": comment.blog_id,
        "parent_id": comment.parent_id,
        "content": comment.content,
        "author": author_to_dict(comment.author),
        "created_at": iso(comment.created_at),
    }


def moderated_comment_to_dict(comment) -> dict:
    """Comment as admins see it, with its moderation flags."""
    data = comment_to_dict(comment)
    data["is_hidden"] = comment.is_hidden
    data["is_reported"] = comment.is_reported
    return data


def thread_comments(comments: List) -> List[dict]:
    """
    Nest replies under their top-level comment.

    Top-level comments come back newest first, replies in the order they were
    written. ``reply_count`` is computed here rather than stored.
    """
    replies: Dict[int, List[dict]] = {}
    top_level = []
    for comment in comments:
        if comment.parent_id is None:
            top_level.append(comment)
        else:
            replies.setdefault(comment.parent_id, []).append(comment_to_dict(comment))

    threaded = []
    for comment in reversed(top_level):
        data = comment_to_dict(comment)
        data["replies"] = replies.get(comment.id, [])
        data["reply_count"] = len(data["replies"])
        threaded.append(data)
    return threaded
