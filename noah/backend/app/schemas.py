from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel, field_validator

from .errors import ValidationError
from .models import SCALE_MAX, SCALE_MIN, Activity, Mood, Question, normalize_tags

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _check_scale(value: Optional[int], label: str) -> Optional[int]:
    if value is None:
        return value
    if value < SCALE_MIN or value > SCALE_MAX:
        raise ValueError(f"{label} must be between {SCALE_MIN} and {SCALE_MAX}")
    return value


def _clean_notes(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class CheckInSubmission(BaseModel):
    responses: Dict[Question, Optional[int]]
    notes: Optional[str] = None

    @field_validator("responses")
    @classmethod
    def responses_in_scale(cls, value: Dict[Question, Optional[int]]) -> Dict[Question, int]:
        # Unanswered questions are dropped here and reported as missing later.
        answered = {}
        for question, answer in value.items():
            if answer is None:
                continue
            answered[question] = _check_scale(answer, f"Answer to '{question.value}'")
        return answered

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, value: Optional[str]) -> Optional[str]:
        return _clean_notes(value)


class MoodEntryCreate(BaseModel):
    mood: Mood
    intensity: int = 3
    activities: List[Activity] = []
    notes: Optional[str] = None
    tags: List[str] = []

    @field_validator("intensity")
    @classmethod
    def intensity_in_scale(cls, value: int) -> int:
        return _check_scale(value, "Intensity")

    @field_validator("activities")
    @classmethod
    def unique_activities(cls, value: List[Activity]) -> List[Activity]:
        return list(dict.fromkeys(value))

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, value: Optional[str]) -> Optional[str]:
        return _clean_notes(value)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: List[str]) -> List[str]:
        return normalize_tags(value)


class JournalCreate(BaseModel):
    content: str
    mood_before: Optional[int] = None
    mood_after: Optional[int] = None
    tags: List[str] = []
    prompt: Optional[str] = None

    @field_validator("content")
    @classmethod
    def content_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Journal content cannot be empty")
        return value

    @field_validator("mood_before", "mood_after")
    @classmethod
    def mood_in_scale(cls, value: Optional[int]) -> Optional[int]:
        return _check_scale(value, "Mood rating")

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: List[str]) -> List[str]:
        return normalize_tags(value)


def load(schema: Type[SchemaT], data: Mapping[str, Any]) -> SchemaT:
    """Validate ``data`` against ``schema``, raising the library's ValidationError."""
    try:
        return schema.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        kind = "EmptyContent" if fields and fields[0] == "content" else "InvalidValue"
        message = "; ".join(error["msg"] for error in exc.errors())
        raise ValidationError(kind, message, fields) from exc
