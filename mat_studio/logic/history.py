"""
History Manager for Undo/Redo

Linear history of ProjectState snapshots:
- One list of entries plus a cursor pointing at the current one
- Pushing after an undo discards the entries ahead of the cursor
- Limited to MAX_HISTORY entries, oldest dropped first

Entries are ProjectState values, which are immutable, so a snapshot is
just a reference.
"""

import logging
from contextlib import contextmanager

from ..config import MAX_HISTORY

log = logging.getLogger(__name__)


class HistoryManager:
    """Manages undo/redo history as a list + cursor"""

    def __init__(self, limit: int = MAX_HISTORY):
        """
        Initialize history manager

        Args:
            limit: Maximum number of entries kept (default 50)
                Older entries are dropped once the log grows past it
        """
        self.limit = limit
        self.entries = []
        self.cursor = -1
        self._replaying = False

    def reset(self, state):
        """Start over with ``state`` as the only (initial) entry."""
        self.entries = [state]
        self.cursor = 0

    def push(self, state) -> bool:
        """
        Record a settled state.

        Returns False (and records nothing) while an undo/redo is being
        applied, so replaying an entry can never re-enter history.
        """
        if self._replaying:
            log.debug("push ignored during replay")
            return False

        del self.entries[self.cursor + 1:]  # New action = can't redo old futures!
        self.entries.append(state)
        if len(self.entries) > self.limit:
            del self.entries[:len(self.entries) - self.limit]
        self.cursor = len(self.entries) - 1
        return True

    def undo(self):
        """
        Step back one entry.

        Returns:
            The entry to restore, or None if already at the first entry
        """
        if self.cursor <= 0:
            return None
        self.cursor -= 1
        return self.entries[self.cursor]

    def redo(self):
        """
        Step forward one entry.

        Returns:
            The entry to restore, or None if already at the newest entry
        """
        if self.cursor >= len(self.entries) - 1:
            return None
        self.cursor += 1
        return self.entries[self.cursor]

    @contextmanager
    def replaying(self):
        """Guard used while applying an undo/redo result; push() is a no-op inside."""
        previous = self._replaying
        self._replaying = True
        try:
            yield
        finally:
            self._replaying = previous

    @property
    def is_replaying(self) -> bool:
        return self._replaying

    @property
    def current(self):
        if self.cursor < 0:
            return None
        return self.entries[self.cursor]

    def can_undo(self) -> bool:
        """Check if undo is available"""
        return self.cursor > 0

    def can_redo(self) -> bool:
        """Check if redo is available"""
        return 0 <= self.cursor < len(self.entries) - 1

    def __len__(self):
        return len(self.entries)

    def get_stats(self) -> dict:
        """
        Get statistics about history usage

        Returns:
            dict: entry count, cursor position and undo/redo availability
        """
        return {
            'entries': len(self.entries),
            'cursor': self.cursor,
            'undo_count': max(self.cursor, 0),
            'redo_count': max(len(self.entries) - 1 - self.cursor, 0),
            'limit': self.limit,
            'full': len(self.entries) >= self.limit
        }
