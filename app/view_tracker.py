"""
Reader-side view dedupe.

A reader counts once per blog per window. The key combines the client's
session id, its address and the blog, so the blog core only ever sees
"count this view".
"""
import threading
import time
from typing import Callable, Dict, Optional

from .logging_config import api_logger


class ViewTracker:
    """In-process record of when each dedupe key last counted a view"""

    def __init__(self, window_seconds: int = 3600, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self.clock = clock
        self._seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key_for(session_id: Optional[str], client_ip: Optional[str], blog_id: int) -> str:
        return f"{session_id or 'anon'}:{client_ip or 'unknown'}:{blog_id}"

    def should_count(self, key: str) -> bool:
        """True, and remembers the view, if ``key`` has not counted within the window."""
        now = self.clock()
        with self._lock:
            last = self._seen.get(key)
            if last is not None and now - last < self.window_seconds:
                return False
            self._seen[key] = now
            if len(self._seen) > 10000:
                self._prune(now)
            return True

    def _prune(self, now: float):
        expired = [k for k, seen in self._seen.items() if now - seen >= self.window_seconds]
        for k in expired:
            del self._seen[k]

    def forget(self, key: str):
        """Drop ``key`` so its next read counts again."""
        with self._lock:
            self._seen.pop(key, None)

    def clear(self):
        with self._lock:
            self._seen.clear()


def record_view(workflow, blog_id: int) -> bool:
    """
    Count a view without letting a failure reach the reader.

    Errors are logged with the blog id; the read that triggered the view
    still succeeds. Returns whether the view was stored.
    """
    try:
        workflow.increment_view(blog_id)
    except Exception as e:
        api_logger.error("Failed to record blog view", error=e, blog_id=blog_id)
        return False
    return True


def track_view(tracker: ViewTracker, key: str, workflow, blog_id: int) -> bool:
    """Count the view if ``key`` is outside its window. A failed count leaves the window open."""
    if not tracker.should_count(key):
        return False
    if not record_view(workflow, blog_id):
        tracker.forget(key)
        return False
    return True
