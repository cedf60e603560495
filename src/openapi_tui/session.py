"""Per-operation sessions, the active stack and the suspended-session cache.

A :class:`Session` holds the editable draft for one operation's call. Opening a
call pushes a session on the active stack (most recent first); hanging up pops
it and, when a key is given, parks it in the :class:`HistoryCache` so the
next call for the same operation resumes exactly where the user left off.
Responses are not stored on sessions: they live in the shared response store
keyed by operation, so a response that lands while a session is suspended is
visible on resume.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Optional

from openapi_tui.models import OperationEntry, RequestDraft
from openapi_tui.output import get_output
from openapi_tui.request import draft_from_operation


@dataclass
class Session:
    """Editable state of one operation's active call."""

    operation_key: str
    draft: RequestDraft
    focused_pane_index: int = 0
    fullscreen: bool = False
    pane_state: dict[str, object] = field(default_factory=dict)


class HistoryCache:
    """Suspended sessions keyed by operation, evicting least recently stored.

    Args:
        limit: Maximum number of sessions kept.
    """

    def __init__(self, limit: int = 32) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self._limit = limit
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    def store(self, session: Session, key: Optional[str] = None) -> None:
        """Park *session* under *key* (default: its operation key), replacing
        any prior entry for that key."""
        key = key if key is not None else session.operation_key
        self._sessions.pop(key, None)
        self._sessions[key] = session
        while len(self._sessions) > self._limit:
            evicted, _ = self._sessions.popitem(last=False)
            get_output().debug(f"history: evicted {evicted}")

    def take(self, key: str) -> Optional[Session]:
        """Remove and return the session for *key*, if suspended."""
        return self._sessions.pop(key, None)

    def keys(self) -> list[str]:
        """Suspended keys, most recently stored first."""
        return list(reversed(self._sessions))

    def __contains__(self, key: object) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


class SessionManager:
    """Active stack plus history cache.

    Args:
        history_limit: Capacity of the :class:`HistoryCache`.
    """

    def __init__(self, history_limit: int = 32) -> None:
        self._stack: list[Session] = []
        self.history = HistoryCache(history_limit)

    @property
    def stack(self) -> list[Session]:
        """Open sessions, most recent first."""
        return list(self._stack)

    def top(self) -> Optional[Session]:
        return self._stack[0] if self._stack else None

    def new_call(self, operation: OperationEntry) -> Session:
        """Resume the suspended session for *operation*, or start a fresh one.

        Either way the session becomes the top of the active stack.
        """
        session = self.history.take(operation.key)
        if session is None:
            session = Session(operation.key, draft_from_operation(operation))
            get_output().debug(f"session: new {operation.key}")
        else:
            get_output().debug(f"session: resumed {operation.key}")
        self._stack.insert(0, session)
        return session

    def hang_up(self, key: Optional[str] = None) -> Optional[Session]:
        """Pop the top session; park it in history under *key* when given.

        Returns:
            The popped session, or ``None`` when the stack was empty.
        """
        if not self._stack:
            return None
        session = self._stack.pop(0)
        if key is not None:
            self.history.store(session, key)
        return session
