from __future__ import annotations

from typing import List, Optional, Sequence


class NoahError(Exception):
    """Base class for every error raised by the check-in core."""


class ValidationError(NoahError):
    def __init__(self, kind: str, message: str, fields: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.fields: List[str] = list(fields or [])


class IncompleteSubmission(ValidationError):
    """A check-in is missing answers; the caller should re-prompt."""

    def __init__(self, missing) -> None:
        self.missing = list(missing)
        names = [question.value for question in self.missing]
        super().__init__(
            "IncompleteSubmission",
            f"Please answer all questions. Unanswered: {', '.join(names)}",
            names,
        )


class NotAuthenticatedError(NoahError):
    pass


class StoreError(NoahError):
    pass


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass
