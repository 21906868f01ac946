from __future__ import annotations

import abc
from datetime import datetime
from typing import Iterable, List, Sequence, Union

from .models import CheckInEntry, Flag, JournalEntry, MoodEntry

Entry = Union[CheckInEntry, MoodEntry, JournalEntry]

MOOD_KIND = "mood"
JOURNAL_KIND = "journal"
RANGE_KINDS = (MOOD_KIND, JOURNAL_KIND)


class EntryStore(abc.ABC):
    """Read/write access to a user's entries.

    Implementations raise ``StoreReadError`` / ``StoreWriteError`` on failure.
    """

    @abc.abstractmethod
    def fetch_recent_check_ins(self, user_id: str, limit: int) -> List[CheckInEntry]:
        """Newest first (ties broken by id, descending), at most ``limit`` entries."""

    @abc.abstractmethod
    def fetch_entries_in_range(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        kind: str,
    ) -> Sequence[Union[MoodEntry, JournalEntry]]:
        """Mood or journal entries with ``start <= timestamp <= end``, oldest first."""

    @abc.abstractmethod
    def persist(self, entry: Entry) -> None:
        """Create ``entry``. Persisting an id that already exists is a no-op."""

    @abc.abstractmethod
    def update_flags(self, entry_id: str, flags: Iterable[Flag]) -> None:
        """Replace only the flags of a stored check-in."""
