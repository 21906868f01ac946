from __future__ import annotations

from typing import Mapping, Sequence, Set

from .models import Flag, Question

NEEDS_ATTENTION_AVERAGE = 2.0
CRITICAL_QUESTIONS = (Question.MOOD, Question.ANXIETY)
CRITICAL_THRESHOLD = 2
CRISIS_VALUE = 1
TREND_MIDPOINT = 3.0


def average_response(responses: Mapping[Question, int]) -> float:
    values = list(responses.values())
    if not values:
        return 0.0
    return sum(values) / float(len(values))


def evaluate_responses(responses: Mapping[Question, int]) -> Set[Flag]:
    """Single-entry flags for a fully answered check-in.

    Callers run the submission validator first, so ``responses`` is never
    empty here. Flags may co-occur; the result may be empty.
    """
    flags: Set[Flag] = set()

    if average_response(responses) <= NEEDS_ATTENTION_AVERAGE:
        flags.add(Flag.NEEDS_ATTENTION)

    if any(
        question in responses and responses[question] <= CRITICAL_THRESHOLD
        for question in CRITICAL_QUESTIONS
    ):
        flags.add(Flag.NEEDS_ATTENTION)

    if any(value == CRISIS_VALUE for value in responses.values()):
        flags.add(Flag.CRISIS)

    return flags


def classify_trend(averages: Sequence[float]) -> Flag:
    """Exactly one trend flag for a window of per-entry averages."""
    if all(value < TREND_MIDPOINT for value in averages):
        return Flag.DECLINING
    if all(value > TREND_MIDPOINT for value in averages):
        return Flag.IMPROVEMENT
    return Flag.CONSISTENT
