# paintmate/services/history.py
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from paintmate.document import Document

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class HistoryManager:
    """Bounded undo/redo over full document snapshots.

    ``snapshots[cursor - 1]`` is the current state, so the caller pushes the
    document *after* each edit (and once right after new/open). Stored states
    are copied on push and again on restore: the live document never shares
    buffers with the history.
    """
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if int(capacity) < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self._capacity = int(capacity)
        self._snapshots: List[Document] = []
        self._cursor = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._snapshots)

    def clear(self) -> None:
        self._snapshots.clear()
        self._cursor = 0

    def push_state(self, doc: Document) -> None:
        # new edit drops the redo branch
        del self._snapshots[self._cursor:]
        self._snapshots.append(doc.copy())
        self._cursor = len(self._snapshots)

        while len(self._snapshots) > self._capacity:
            self._snapshots.pop(0)
            if self._cursor > 0:
                self._cursor -= 1
            logger.debug("history full (%d), evicted oldest snapshot", self._capacity)

    def can_undo(self) -> bool:
        return self._cursor > 1

    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots)

    def undo(self) -> Optional[Document]:
        if not self.can_undo():
            return None
        self._cursor -= 1
        return self._snapshots[self._cursor - 1].copy()

    def redo(self) -> Optional[Document]:
        if not self.can_redo():
            return None
        self._cursor += 1
        return self._snapshots[self._cursor - 1].copy()

    def stats(self) -> dict:
        return {
            "undo_count": max(0, self._cursor - 1),
            "redo_count": len(self._snapshots) - self._cursor,
            "capacity": self._capacity,
            "full": len(self._snapshots) >= self._capacity,
        }
