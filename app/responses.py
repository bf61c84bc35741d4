"""
Inkpost API Response Utilities
Standardized response format and error handling
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .logging_config import api_logger
from .services.errors import BlogError


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: Optional[str] = None, meta: Optional[Dict] = None) -> Dict:
    """Create success response"""
    response = {
        "ok": True,
        "timestamp": _now(),
    }

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    if meta:
        response["meta"] = meta

    return response


def paginated(items: List, total: int, page: int = 1, per_page: int = 20) -> Dict:
    """Paginated list response"""
    return {
        "ok": True,
        "data": items,
        "pagination": {
            "total": total,
            "page": page,
            "per_page": per_page,
            "total_pages": (total + per_page - 1) // per_page,
            "has_next": page * per_page < total,
            "has_prev": page > 1,
        },
        "timestamp": _now(),
    }


def error_body(message: str, error_code: str, details: Optional[Dict] = None) -> Dict:
    body = {
        "ok": False,
        "error": message,
        "error_code": error_code,
        "timestamp": _now(),
    }
    if details:
        body["details"] = details
    return body


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    """Render a core failure with the status its kind carries"""
    log = api_logger.error if exc.status_code >= 500 else api_logger.warning
    log(
        f"API Error: {exc.message}",
        status_code=exc.status_code,
        error_code=exc.error_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code, exc.details),
    )


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Keep FastAPI's ``detail`` key and add the standard envelope"""
    api_logger.warning(
        f"HTTP Error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    content = error_body(str(exc.detail), f"HTTP_{exc.status_code}")
    content["detail"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, blog_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
