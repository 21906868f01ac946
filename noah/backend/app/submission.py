from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Mapping, Optional, Sequence

from .errors import IncompleteSubmission
from .flagging_policy import evaluate_responses
from .models import QUESTIONS, CheckInEntry, CheckInPayload, Question

logger = logging.getLogger(__name__)


def new_entry_id() -> str:
    return str(uuid.uuid4())


def find_missing_questions(
    responses: Mapping[Question, int],
    questions: Sequence[Question] = QUESTIONS,
) -> List[Question]:
    return [question for question in questions if responses.get(question) is None]


def validate_submission(
    responses: Mapping[Question, int],
    questions: Sequence[Question] = QUESTIONS,
) -> None:
    missing = find_missing_questions(responses, questions)
    if missing:
        raise IncompleteSubmission(missing)


def build_check_in(
    user_id: str,
    responses: Mapping[Question, int],
    notes: Optional[str] = None,
    clock: Callable[[], datetime] = datetime.utcnow,
    id_factory: Callable[[], str] = new_entry_id,
    questions: Sequence[Question] = QUESTIONS,
) -> CheckInEntry:
    """Validate a check-in and return it ready to persist, with its initial flags."""
    validate_submission(responses, questions)
    flags = evaluate_responses(responses)
    entry = CheckInEntry(
        payload=CheckInPayload(
            id=id_factory(),
            user_id=user_id,
            timestamp=clock(),
            responses=responses,
            notes=notes or None,
        ),
        flags=flags,
    )
    logger.info(
        "Built check-in %s for user %s with flags %s",
        entry.id,
        user_id,
        sorted(flag.value for flag in flags),
    )
    return entry
