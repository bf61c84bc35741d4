from .auth import router as auth_router
from .blogs import router as blogs_router
from .comments import router as comments_router
from .admin import router as admin_router

__all__ = [
    "auth_router",
    "blogs_router",
    "comments_router",
    "admin_router",
]
