"""
Application-scoped dashboard state.

Each viewer gets a ViewerSession holding the selected student and reporting
month, the panel slices loaded for that selection and a queue of transient
toast notifications.

Panel loads are guarded by a generation token: changing the student or month
bumps the generation and drops every cached slice, and a load that started
under an older generation is discarded instead of overwriting newer state.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Deque, Dict, List, Optional

from app.config import get_settings

TOAST_TYPES = ('success', 'error', 'info', 'warning')
DEFAULT_TOAST_DURATION_MS = 5000


def current_month() -> str:
    return date.today().strftime("%Y-%m")


@dataclass
class Toast:
    type: str
    message: str
    title: Optional[str] = None
    duration: int = DEFAULT_TOAST_DURATION_MS
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self):
        return {
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "duration": self.duration,
            "createdAt": self.created_at.isoformat(),
        }


class ToastQueue:
    """Bounded FIFO of toasts; the oldest entries fall off when full."""

    def __init__(self, maxlen: int = 20):
        self._toasts: Deque[Toast] = deque(maxlen=maxlen)

    def push(self, type: str, message: str, title: Optional[str] = None,
             duration: int = DEFAULT_TOAST_DURATION_MS) -> Toast:
        if type not in TOAST_TYPES:
            raise ValueError(f"Invalid toast type: {type}")
        toast = Toast(type=type, message=message, title=title, duration=duration)
        self._toasts.append(toast)
        return toast

    def success(self, message: str, **kwargs) -> Toast:
        return self.push("success", message, **kwargs)

    def error(self, message: str, **kwargs) -> Toast:
        return self.push("error", message, **kwargs)

    def peek(self) -> List[Toast]:
        return list(self._toasts)

    def drain(self) -> List[Toast]:
        toasts = list(self._toasts)
        self._toasts.clear()
        return toasts

    def __len__(self) -> int:
        return len(self._toasts)


class ViewerSession:
    def __init__(self, viewer_id: str, student_id: Optional[str] = None, toast_limit: int = 20):
        self.viewer_id = viewer_id
        self.student_id = student_id
        self.month = current_month()
        self.generation = 0
        self.panels: Dict[str, Any] = {}
        self.toasts = ToastQueue(maxlen=toast_limit)

    def _invalidate(self) -> None:
        self.generation += 1
        self.panels = {}

    def select_student(self, student_id: Optional[str]) -> bool:
        """Returns True when the selection changed."""
        if student_id == self.student_id:
            return False
        self.student_id = student_id
        self._invalidate()
        return True

    def select_month(self, month: str) -> bool:
        if month == self.month:
            return False
        self.month = month
        self._invalidate()
        return True

    def begin_load(self) -> int:
        """Token to hand back to apply() once the fetch completes."""
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation

    def apply(self, panel: str, token: int, data: Any) -> bool:
        """Store a panel slice, replacing the previous one; stale tokens are dropped."""
        if not self.is_current(token):
            return False
        self.panels[panel] = data
        return True

    def to_dict(self):
        return {
            "viewerId": self.viewer_id,
            "studentId": self.student_id,
            "month": self.month,
            "generation": self.generation,
            "loadedPanels": sorted(self.panels),
            "pendingToasts": len(self.toasts),
        }


class SessionRegistry:
    """Process-wide map of viewer id -> ViewerSession."""

    def __init__(self, toast_limit: int = 20):
        self.toast_limit = toast_limit
        self._sessions: Dict[str, ViewerSession] = {}

    def get(self, viewer_id: str, default_student_id: Optional[str] = None) -> ViewerSession:
        session = self._sessions.get(viewer_id)
        if session is None:
            session = ViewerSession(viewer_id, default_student_id, toast_limit=self.toast_limit)
            self._sessions[viewer_id] = session
        return session

    def discard(self, viewer_id: str) -> None:
        self._sessions.pop(viewer_id, None)

    def clear(self) -> None:
        self._sessions.clear()


sessions = SessionRegistry(toast_limit=get_settings().toast_queue_size)


def toasts_for(viewer_id: str) -> ToastQueue:
    return sessions.get(viewer_id).toasts
