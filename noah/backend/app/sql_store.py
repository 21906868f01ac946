from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Iterable, List, Sequence, Union

from sqlalchemy import Column, DateTime, Integer, String, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import StoreReadError, StoreWriteError
from .models import CheckInEntry, Flag, JournalEntry, MoodEntry
from .store import MOOD_KIND, RANGE_KINDS, Entry, EntryStore

logger = logging.getLogger(__name__)

Base = declarative_base()


class CheckInRecord(Base):
    __tablename__ = "check_ins"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    timestamp = Column(DateTime, index=True, nullable=False)
    responses_json = Column(String, nullable=False, default="{}")
    notes = Column(String, nullable=True)
    flags_json = Column(String, nullable=False, default="[]")


class MoodEntryRecord(Base):
    __tablename__ = "mood_entries"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    timestamp = Column(DateTime, index=True, nullable=False)
    mood = Column(String, nullable=False)
    intensity = Column(Integer, nullable=False)
    activities_json = Column(String, nullable=False, default="[]")
    notes = Column(String, nullable=True)
    tags_json = Column(String, nullable=False, default="[]")


class JournalEntryRecord(Base):
    __tablename__ = "journal_entries"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    timestamp = Column(DateTime, index=True, nullable=False)
    content = Column(String, nullable=False)
    prompt = Column(String, nullable=True)
    mood_before = Column(Integer, nullable=True)
    mood_after = Column(Integer, nullable=True)
    tags_json = Column(String, nullable=False, default="[]")


def create_engine_for(db_path: str):
    if db_path == ":memory:":
        return create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})


def init_db(engine) -> None:
    Base.metadata.create_all(bind=engine)


def _check_in_record(entry: CheckInEntry) -> CheckInRecord:
    document = entry.to_document()
    return CheckInRecord(
        id=entry.id,
        user_id=entry.user_id,
        timestamp=entry.timestamp,
        responses_json=json.dumps(document["responses"]),
        notes=entry.notes,
        flags_json=json.dumps(document["flags"]),
    )


def _mood_record(entry: MoodEntry) -> MoodEntryRecord:
    return MoodEntryRecord(
        id=entry.id,
        user_id=entry.user_id,
        timestamp=entry.timestamp,
        mood=entry.mood.value,
        intensity=entry.intensity,
        activities_json=json.dumps([activity.value for activity in entry.activities]),
        notes=entry.notes,
        tags_json=json.dumps(list(entry.tags)),
    )


def _journal_record(entry: JournalEntry) -> JournalEntryRecord:
    return JournalEntryRecord(
        id=entry.id,
        user_id=entry.user_id,
        timestamp=entry.timestamp,
        content=entry.content,
        prompt=entry.prompt,
        mood_before=entry.mood_before,
        mood_after=entry.mood_after,
        tags_json=json.dumps(list(entry.tags)),
    )


def _to_check_in(record: CheckInRecord) -> CheckInEntry:
    return CheckInEntry.from_document({
        "id": record.id,
        "userId": record.user_id,
        "timestamp": record.timestamp,
        "responses": json.loads(record.responses_json or "{}"),
        "notes": record.notes,
        "flags": json.loads(record.flags_json or "[]"),
    })


def _to_mood(record: MoodEntryRecord) -> MoodEntry:
    return MoodEntry.from_document({
        "id": record.id,
        "userId": record.user_id,
        "timestamp": record.timestamp,
        "mood": record.mood,
        "intensity": record.intensity,
        "activities": json.loads(record.activities_json or "[]"),
        "notes": record.notes,
        "tags": json.loads(record.tags_json or "[]"),
    })


def _to_journal(record: JournalEntryRecord) -> JournalEntry:
    return JournalEntry.from_document({
        "id": record.id,
        "userId": record.user_id,
        "timestamp": record.timestamp,
        "content": record.content,
        "prompt": record.prompt,
        "moodBefore": record.mood_before,
        "moodAfter": record.mood_after,
        "tags": json.loads(record.tags_json or "[]"),
    })


class SqlEntryStore(EntryStore):
    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    @classmethod
    def from_path(cls, db_path: str) -> "SqlEntryStore":
        engine = create_engine_for(db_path)
        init_db(engine)
        return cls(sessionmaker(autocommit=False, autoflush=False, bind=engine))

    def fetch_recent_check_ins(self, user_id: str, limit: int) -> List[CheckInEntry]:
        session = self.session_factory()
        try:
            records = (
                session.query(CheckInRecord)
                .filter(CheckInRecord.user_id == user_id)
                .order_by(CheckInRecord.timestamp.desc(), CheckInRecord.id.desc())
                .limit(limit)
                .all()
            )
            return [_to_check_in(record) for record in records]
        except SQLAlchemyError as exc:
            logger.warning("Failed to fetch check-ins for user %s: %s", user_id, exc)
            raise StoreReadError(f"Could not load check-ins for user {user_id}") from exc
        finally:
            session.close()

    def fetch_entries_in_range(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        kind: str,
    ) -> Sequence[Union[MoodEntry, JournalEntry]]:
        if kind not in RANGE_KINDS:
            raise ValueError(f"Unknown entry kind: {kind}")
        if kind == MOOD_KIND:
            model, convert = MoodEntryRecord, _to_mood
        else:
            model, convert = JournalEntryRecord, _to_journal

        session = self.session_factory()
        try:
            records = (
                session.query(model)
                .filter(
                    model.user_id == user_id,
                    model.timestamp >= start,
                    model.timestamp <= end,
                )
                .order_by(model.timestamp.asc(), model.id.asc())
                .all()
            )
            return [convert(record) for record in records]
        except SQLAlchemyError as exc:
            logger.warning("Failed to fetch %s entries for user %s: %s", kind, user_id, exc)
            raise StoreReadError(f"Could not load {kind} entries for user {user_id}") from exc
        finally:
            session.close()

    def persist(self, entry: Entry) -> None:
        if isinstance(entry, CheckInEntry):
            model, record = CheckInRecord, _check_in_record(entry)
        elif isinstance(entry, MoodEntry):
            model, record = MoodEntryRecord, _mood_record(entry)
        elif isinstance(entry, JournalEntry):
            model, record = JournalEntryRecord, _journal_record(entry)
        else:
            raise TypeError(f"Unsupported entry type: {type(entry).__name__}")

        session = self.session_factory()
        try:
            if session.get(model, entry.id) is not None:
                return
            session.add(record)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Failed to persist entry %s: %s", entry.id, exc)
            raise StoreWriteError(f"Could not save entry {entry.id}") from exc
        finally:
            session.close()

    def update_flags(self, entry_id: str, flags: Iterable[Flag]) -> None:
        session = self.session_factory()
        try:
            record = session.get(CheckInRecord, entry_id)
            if record is None:
                raise StoreWriteError(f"Unknown check-in: {entry_id}")
            record.flags_json = json.dumps(sorted(flag.value for flag in flags))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Failed to update flags for check-in %s: %s", entry_id, exc)
            raise StoreWriteError(f"Could not update flags for check-in {entry_id}") from exc
        finally:
            session.close()
