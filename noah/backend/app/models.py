from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

SCALE_MIN = 1
SCALE_MAX = 5


class Question(str, Enum):
    SLEEP = "sleep"
    ANXIETY = "anxiety"
    MOOD = "mood"
    ENERGY = "energy"
    FOCUS = "focus"
    APPETITE = "appetite"
    SOCIAL_CONNECTION = "socialConnection"
    MOTIVATION = "motivation"

    @property
    def prompt(self) -> str:
        return QUESTION_CATALOG[self]["prompt"]

    @property
    def description(self) -> str:
        return QUESTION_CATALOG[self]["description"]

    @property
    def low_label(self) -> str:
        return QUESTION_CATALOG[self]["low"]

    @property
    def high_label(self) -> str:
        return QUESTION_CATALOG[self]["high"]


# Declaration order is the order questions are shown and reported as missing.
QUESTIONS: Tuple[Question, ...] = tuple(Question)

QUESTION_CATALOG: Dict[Question, Dict[str, str]] = {
    Question.SLEEP: {
        "prompt": "How well did you sleep?",
        "description": "Rate your sleep quality from last night",
        "low": "Poor sleep",
        "high": "Well rested",
    },
    Question.ANXIETY: {
        "prompt": "How anxious do you feel?",
        "description": "Rate your current anxiety level",
        "low": "Very anxious",
        "high": "Calm",
    },
    Question.MOOD: {
        "prompt": "How is your mood?",
        "description": "Rate your overall mood right now",
        "low": "Low mood",
        "high": "Great mood",
    },
    Question.ENERGY: {
        "prompt": "How is your energy level?",
        "description": "Rate your current energy level",
        "low": "Low energy",
        "high": "Energetic",
    },
    Question.FOCUS: {
        "prompt": "How is your ability to focus?",
        "description": "Rate your ability to concentrate today",
        "low": "Unable to focus",
        "high": "Highly focused",
    },
    Question.APPETITE: {
        "prompt": "How is your appetite?",
        "description": "Rate your appetite today",
        "low": "Poor appetite",
        "high": "Good appetite",
    },
    Question.SOCIAL_CONNECTION: {
        "prompt": "How connected do you feel to others?",
        "description": "Rate how connected you feel to others",
        "low": "Disconnected",
        "high": "Well connected",
    },
    Question.MOTIVATION: {
        "prompt": "How motivated do you feel?",
        "description": "Rate your motivation level today",
        "low": "Unmotivated",
        "high": "Highly motivated",
    },
}


class Flag(str, Enum):
    NEEDS_ATTENTION = "needsAttention"
    CRISIS = "crisis"
    IMPROVEMENT = "improvement"
    CONSISTENT = "consistent"
    DECLINING = "declining"

    @property
    def label(self) -> str:
        return FLAG_LABELS[self]


FLAG_LABELS: Dict[Flag, str] = {
    Flag.NEEDS_ATTENTION: "Needs Attention",
    Flag.CRISIS: "Crisis",
    Flag.IMPROVEMENT: "Improvement",
    Flag.CONSISTENT: "Consistent",
    Flag.DECLINING: "Declining",
}

TREND_FLAGS = frozenset({Flag.IMPROVEMENT, Flag.CONSISTENT, Flag.DECLINING})


class Mood(str, Enum):
    VERY_HAPPY = "veryHappy"
    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    VERY_SAD = "verySad"
    ANXIOUS = "anxious"
    ANGRY = "angry"
    OVERWHELMED = "overwhelmed"

    @property
    def label(self) -> str:
        return MOOD_LABELS[self]


MOOD_LABELS: Dict[Mood, str] = {
    Mood.VERY_HAPPY: "Very Happy",
    Mood.HAPPY: "Happy",
    Mood.NEUTRAL: "Neutral",
    Mood.SAD: "Sad",
    Mood.VERY_SAD: "Very Sad",
    Mood.ANXIOUS: "Anxious",
    Mood.ANGRY: "Angry",
    Mood.OVERWHELMED: "Overwhelmed",
}

POSITIVE_MOODS = frozenset({Mood.VERY_HAPPY, Mood.HAPPY})


class Activity(str, Enum):
    EXERCISE = "exercise"
    MEDITATION = "meditation"
    THERAPY = "therapy"
    SOCIALIZING = "socializing"
    WORK = "work"
    READING = "reading"
    NATURE = "nature"
    MUSIC = "music"
    ART = "art"
    SLEEP = "sleep"
    MEDICATION = "medication"
    JOURNALING = "journaling"


def parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")
    # Stored and compared as naive UTC.
    if parsed.tzinfo:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Strip whitespace, drop blanks and duplicates, keep first-seen order."""
    cleaned = (tag.strip() for tag in tags if tag is not None)
    return list(dict.fromkeys(tag for tag in cleaned if tag))


def _require(document: Mapping[str, object], *keys: str) -> None:
    missing = [key for key in keys if document.get(key) is None]
    if missing:
        raise ValueError(f"Document is missing required fields: {', '.join(missing)}")


def _optional_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class CheckInPayload:
    id: str
    user_id: str
    timestamp: datetime
    responses: Mapping[Question, int]
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "responses", MappingProxyType(dict(self.responses)))


@dataclass
class CheckInEntry:
    """A daily check-in.

    The payload never changes after creation. ``flags`` is the only field the
    trend analyzer rewrites, and stores update it on its own.
    """

    payload: CheckInPayload
    flags: Set[Flag] = field(default_factory=set)

    @property
    def id(self) -> str:
        return self.payload.id

    @property
    def user_id(self) -> str:
        return self.payload.user_id

    @property
    def timestamp(self) -> datetime:
        return self.payload.timestamp

    @property
    def responses(self) -> Mapping[Question, int]:
        return self.payload.responses

    @property
    def notes(self) -> Optional[str]:
        return self.payload.notes

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "timestamp": self.timestamp,
            "responses": {question.value: value for question, value in self.responses.items()},
            "notes": self.notes,
            "flags": sorted(flag.value for flag in self.flags),
        }

    @classmethod
    def from_document(cls, document: Mapping[str, object]) -> "CheckInEntry":
        _require(document, "id", "userId", "timestamp", "responses")
        responses: Dict[Question, int] = {}
        for key, value in dict(document["responses"]).items():
            try:
                responses[Question(key)] = int(value)
            except ValueError:
                continue
        return cls(
            payload=CheckInPayload(
                id=str(document["id"]),
                user_id=str(document["userId"]),
                timestamp=parse_timestamp(document["timestamp"]),
                responses=responses,
                notes=_optional_text(document.get("notes")),
            ),
            flags=set(_decode_enum_values(Flag, document.get("flags") or [])),
        )


@dataclass(frozen=True)
class MoodEntry:
    id: str
    user_id: str
    timestamp: datetime
    mood: Mood
    intensity: int
    activities: Tuple[Activity, ...] = ()
    notes: Optional[str] = None
    tags: Tuple[str, ...] = ()

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "timestamp": self.timestamp,
            "mood": self.mood.value,
            "intensity": self.intensity,
            "activities": [activity.value for activity in self.activities],
            "notes": self.notes,
            "tags": list(self.tags),
        }

    @classmethod
    def from_document(cls, document: Mapping[str, object]) -> "MoodEntry":
        _require(document, "id", "userId", "timestamp", "mood", "intensity")
        return cls(
            id=str(document["id"]),
            user_id=str(document["userId"]),
            timestamp=parse_timestamp(document["timestamp"]),
            mood=Mood(document["mood"]),
            intensity=int(document["intensity"]),
            activities=tuple(_decode_enum_values(Activity, document.get("activities") or [])),
            notes=_optional_text(document.get("notes")),
            tags=tuple(str(tag) for tag in document.get("tags") or []),
        )


@dataclass(frozen=True)
class JournalEntry:
    id: str
    user_id: str
    timestamp: datetime
    content: str
    mood_before: Optional[int] = None
    mood_after: Optional[int] = None
    tags: Tuple[str, ...] = ()
    prompt: Optional[str] = None

    @property
    def mood_change(self) -> Optional[int]:
        if self.mood_before is None or self.mood_after is None:
            return None
        return self.mood_after - self.mood_before

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "timestamp": self.timestamp,
            "content": self.content,
            "prompt": self.prompt,
            "tags": list(self.tags),
            "moodBefore": self.mood_before,
            "moodAfter": self.mood_after,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, object]) -> "JournalEntry":
        _require(document, "id", "userId", "timestamp", "content")
        mood_before = document.get("moodBefore")
        mood_after = document.get("moodAfter")
        return cls(
            id=str(document["id"]),
            user_id=str(document["userId"]),
            timestamp=parse_timestamp(document["timestamp"]),
            content=str(document["content"]),
            mood_before=int(mood_before) if mood_before is not None else None,
            mood_after=int(mood_after) if mood_after is not None else None,
            tags=tuple(str(tag) for tag in document.get("tags") or []),
            prompt=_optional_text(document.get("prompt")),
        )


def _decode_enum_values(enum_cls, values: Iterable[object]) -> List:
    decoded = []
    for value in values:
        try:
            decoded.append(enum_cls(value))
        except ValueError:
            continue
    return decoded
