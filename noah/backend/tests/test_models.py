import dataclasses
import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from noah.backend.app.models import (
    QUESTIONS,
    Activity,
    CheckInEntry,
    CheckInPayload,
    Flag,
    JournalEntry,
    Mood,
    MoodEntry,
    Question,
    normalize_tags,
    parse_timestamp,
)


class QuestionCatalogTests(unittest.TestCase):
    def test_eight_questions_in_display_order(self):
        self.assertEqual(len(QUESTIONS), 8)
        self.assertEqual(QUESTIONS[0], Question.SLEEP)
        self.assertEqual(QUESTIONS[-1], Question.MOTIVATION)

    def test_every_question_has_prompt_text(self):
        for question in QUESTIONS:
            self.assertTrue(question.prompt.endswith("?"))
            self.assertTrue(question.low_label)
            self.assertTrue(question.high_label)
        self.assertEqual(Question.ANXIETY.high_label, "Calm")
        self.assertEqual(Flag.NEEDS_ATTENTION.label, "Needs Attention")


class CheckInDocumentTests(unittest.TestCase):
    def test_from_document_skips_unknown_keys_and_flags(self):
        entry = CheckInEntry.from_document({
            "id": "c1",
            "userId": "user-1",
            "timestamp": "2025-02-01T10:00:00",
            "responses": {"mood": 2, "anxiety": 4, "weather": 3},
            "notes": "",
            "flags": ["needsAttention", "retired"],
        })
        self.assertEqual(dict(entry.responses), {Question.MOOD: 2, Question.ANXIETY: 4})
        self.assertEqual(entry.flags, {Flag.NEEDS_ATTENTION})
        self.assertIsNone(entry.notes)
        self.assertEqual(entry.timestamp, datetime(2025, 2, 1, 10, 0))

    def test_aware_timestamps_become_naive_utc(self):
        document = {"id": "c1", "userId": "user-1", "responses": {"mood": 3}}
        zulu = CheckInEntry.from_document(dict(document, timestamp="2025-02-01T10:00:00Z"))
        offset = CheckInEntry.from_document(dict(document, timestamp="2025-02-01T12:00:00+02:00"))
        self.assertEqual(zulu.timestamp, datetime(2025, 2, 1, 10, 0))
        self.assertEqual(offset.timestamp, datetime(2025, 2, 1, 10, 0))
        self.assertIsNone(zulu.timestamp.tzinfo)

    def test_parse_timestamp_normalizes_aware_datetime(self):
        aware = datetime(2025, 2, 1, 5, 0, tzinfo=timezone(timedelta(hours=-5)))
        self.assertEqual(parse_timestamp(aware), datetime(2025, 2, 1, 10, 0))
        with self.assertRaises(ValueError):
            parse_timestamp("")

    def test_from_document_requires_fields(self):
        with self.assertRaises(ValueError):
            CheckInEntry.from_document({"id": "c1", "userId": "user-1", "responses": {}})

    def test_to_document_uses_wire_names(self):
        entry = CheckInEntry(
            payload=CheckInPayload(
                id="c1",
                user_id="user-1",
                timestamp=datetime(2025, 2, 1, 10, 0),
                responses={Question.SOCIAL_CONNECTION: 5},
            ),
            flags={Flag.CRISIS, Flag.DECLINING},
        )
        document = entry.to_document()
        self.assertEqual(document["responses"], {"socialConnection": 5})
        self.assertEqual(document["flags"], ["crisis", "declining"])

    def test_payload_is_immutable(self):
        payload = CheckInPayload(
            id="c1",
            user_id="user-1",
            timestamp=datetime(2025, 2, 1),
            responses={Question.MOOD: 3},
        )
        with self.assertRaises(dataclasses.FrozenInstanceError):
            payload.notes = "changed"
        with self.assertRaises(TypeError):
            payload.responses[Question.MOOD] = 1


class MoodAndJournalDocumentTests(unittest.TestCase):
    def test_mood_entry_from_document(self):
        entry = MoodEntry.from_document({
            "id": "m1",
            "userId": "user-1",
            "timestamp": datetime(2025, 2, 1, 9, 0),
            "mood": "overwhelmed",
            "intensity": 4,
            "activities": ["work", "juggling"],
            "tags": ["deadline"],
        })
        self.assertEqual(entry.mood, Mood.OVERWHELMED)
        self.assertEqual(entry.activities, (Activity.WORK,))
        self.assertEqual(entry.tags, ("deadline",))

    def test_journal_mood_change(self):
        entry = JournalEntry.from_document({
            "id": "j1",
            "userId": "user-1",
            "timestamp": datetime(2025, 2, 1, 9, 0),
            "content": "Talked it through.",
            "moodBefore": 2,
            "moodAfter": 4,
        })
        self.assertEqual(entry.mood_change, 2)
        self.assertIsNone(dataclasses.replace(entry, mood_before=None).mood_change)

    def test_normalize_tags(self):
        self.assertEqual(normalize_tags([" work", "work", "", "  ", "sleep "]), ["work", "sleep"])


if __name__ == "__main__":
    unittest.main()
