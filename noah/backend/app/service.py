from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .aggregator import (
    JournalAnalytics,
    MoodAnalytics,
    compute_journal_analytics,
    compute_mood_analytics,
)
from .config import Settings, configure_logging, load_settings
from .errors import NotAuthenticatedError, StoreError, ValidationError
from .insights import build_flag_messages, build_insights, crisis_resources
from .models import CheckInEntry, Flag, JournalEntry, MoodEntry
from .schemas import CheckInSubmission, JournalCreate, MoodEntryCreate, load
from .store import JOURNAL_KIND, MOOD_KIND, EntryStore
from .submission import build_check_in, new_entry_id
from .trend_analyzer import analyze_trend, trend_flag_for

logger = logging.getLogger(__name__)


class StaticIdentity:
    def __init__(self, user_id: Optional[str]) -> None:
        self.user_id = user_id

    def __call__(self) -> Optional[str]:
        return self.user_id


@dataclass
class CheckInResult:
    entry: CheckInEntry
    trend: Optional[Flag] = None
    messages: List[str] = field(default_factory=list)
    resources: List[dict] = field(default_factory=list)


class CheckInService:
    """Submission and analytics workflow over an injected entry store.

    Submissions for the same user must not run concurrently: the trend write
    is last-write-wins on the flags field. Serialize per user in the caller.
    """

    def __init__(
        self,
        store: EntryStore,
        identity: Callable[[], Optional[str]],
        clock: Callable[[], datetime] = datetime.utcnow,
        settings: Optional[Settings] = None,
        id_factory: Callable[[], str] = new_entry_id,
    ) -> None:
        self.store = store
        self.identity = identity
        self.clock = clock
        self.settings = settings or load_settings()
        self.id_factory = id_factory

    def current_user(self) -> str:
        user_id = self.identity()
        if not user_id:
            raise NotAuthenticatedError("Please sign in to continue")
        return user_id

    def submit_check_in(self, responses: Mapping[Any, Optional[int]], notes: Optional[str] = None) -> CheckInResult:
        user_id = self.current_user()
        submission = load(CheckInSubmission, {"responses": dict(responses), "notes": notes})
        entry = build_check_in(
            user_id,
            submission.responses,
            submission.notes,
            clock=self.clock,
            id_factory=self.id_factory,
        )
        try:
            self.store.persist(entry)
        except StoreError:
            logger.warning("Check-in %s for user %s was not saved", entry.id, user_id)
            raise

        newest, trend = self.refresh_trend(user_id)
        if newest is not None and newest.id == entry.id:
            entry = newest
        else:
            # Trend was written onto a different newest check-in.
            trend = None

        return CheckInResult(
            entry=entry,
            trend=trend,
            messages=build_flag_messages(entry.flags),
            resources=crisis_resources() if Flag.CRISIS in entry.flags else [],
        )

    def refresh_trend(self, user_id: str) -> Tuple[Optional[CheckInEntry], Optional[Flag]]:
        """Re-read the recent window and write the trend flag onto the newest check-in."""
        sample_size = self.settings.trend_min_sample
        recent = self.store.fetch_recent_check_ins(user_id, self.settings.trend_window)
        trend = trend_flag_for(recent, sample_size)
        if trend is None:
            return None, None
        try:
            newest = analyze_trend(recent, self.store, sample_size)
        except StoreError:
            logger.warning("Trend flags for user %s could not be saved", user_id)
            raise
        return newest, trend

    def log_mood(self, data: Mapping[str, Any]) -> MoodEntry:
        user_id = self.current_user()
        payload = load(MoodEntryCreate, data)
        entry = MoodEntry(
            id=self.id_factory(),
            user_id=user_id,
            timestamp=self.clock(),
            mood=payload.mood,
            intensity=payload.intensity,
            activities=tuple(payload.activities),
            notes=payload.notes,
            tags=tuple(payload.tags),
        )
        self.store.persist(entry)
        logger.info("Saved mood entry %s for user %s", entry.id, user_id)
        return entry

    def write_journal(self, data: Mapping[str, Any]) -> JournalEntry:
        user_id = self.current_user()
        payload = load(JournalCreate, data)
        entry = JournalEntry(
            id=self.id_factory(),
            user_id=user_id,
            timestamp=self.clock(),
            content=payload.content,
            mood_before=payload.mood_before,
            mood_after=payload.mood_after,
            tags=tuple(payload.tags),
            prompt=payload.prompt,
        )
        self.store.persist(entry)
        logger.info("Saved journal entry %s for user %s", entry.id, user_id)
        return entry

    def _window(self, days: Optional[int]):
        if days is None:
            days = self.settings.analytics_days
        elif days < 1:
            raise ValidationError("InvalidValue", "Analytics window must be at least 1 day", ["days"])
        end = self.clock()
        start = end - timedelta(days=days)
        return start, end

    def mood_analytics(self, days: Optional[int] = None) -> MoodAnalytics:
        user_id = self.current_user()
        start, end = self._window(days)
        entries = self.store.fetch_entries_in_range(user_id, start, end, MOOD_KIND)
        return compute_mood_analytics(entries, start, end)

    def journal_analytics(self, days: Optional[int] = None) -> JournalAnalytics:
        user_id = self.current_user()
        start, end = self._window(days)
        entries = self.store.fetch_entries_in_range(user_id, start, end, JOURNAL_KIND)
        return compute_journal_analytics(entries, start, end)

    def insights(self, days: Optional[int] = None) -> List[str]:
        user_id = self.current_user()
        recent = self.store.fetch_recent_check_ins(user_id, self.settings.trend_window)
        trend = trend_flag_for(recent, self.settings.trend_min_sample)
        return build_insights(self.mood_analytics(days), self.journal_analytics(days), trend)


def create_service(identity: Callable[[], Optional[str]], settings: Optional[Settings] = None) -> CheckInService:
    """Wire a service to the SQL store configured by the environment."""
    # Core modules must not import SQLAlchemy at module level.
    from .sql_store import SqlEntryStore

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    store = SqlEntryStore.from_path(settings.db_path)
    logger.info("Using entry store at %s", settings.db_path)
    return CheckInService(store, identity, settings=settings)
