from __future__ import annotations

import random
from datetime import date, datetime
from hashlib import sha256
from typing import Iterable, List, Optional

from .aggregator import JournalAnalytics, MoodAnalytics
from .models import POSITIVE_MOODS, Flag, MoodEntry, normalize_tags

MAX_INSIGHTS = 5
PROMPT_SALT = "NOAH_JOURNAL_PROMPTS"

JOURNAL_PROMPTS = [
    {"category": "selfDiscovery", "text": "What are three things that make you unique, and how do they contribute to your personal growth?"},
    {"category": "gratitude", "text": "Describe a recent moment of joy or kindness that you experienced. What made it special?"},
    {"category": "emotions", "text": "How did your [activity] today influence your feeling of [emotion]?"},
    {"category": "emotions", "text": "What thoughts were going through your mind when you felt [emotion]?"},
    {"category": "reflection", "text": "What would you like to do differently next time you feel this way?"},
    {"category": "reflection", "text": "What are three things that helped you cope with these feelings today?"},
    {"category": "reflection", "text": "How does this mood compare to how you felt yesterday?"},
    {"category": "relationships", "text": "What would you tell a friend who was feeling this way?"},
    {"category": "goals", "text": "What is one small step you can take tomorrow toward something that matters to you?"},
]


def crisis_resources() -> List[dict]:
    return [
        {
            "name": "988 Suicide & Crisis Lifeline",
            "phone": "988",
            "note": "Call or text 988 in the U.S. for immediate support, 24 hours a day.",
        },
        {
            "name": "Crisis Text Line",
            "phone": "741741",
            "note": "Text HOME to 741741 to reach a trained crisis counselor.",
        },
        {
            "name": "Emergency services",
            "phone": "911",
            "note": "If you are in immediate danger, call 911 or your local emergency number.",
        },
    ]


def build_flag_messages(flags: Iterable[Flag]) -> List[str]:
    flags = set(flags)
    messages: List[str] = []
    if Flag.CRISIS in flags:
        messages.append("Some of your answers were very low. You don't have to handle this alone; support is available right now.")
    if Flag.NEEDS_ATTENTION in flags:
        messages.append("Today looks hard. Try a 5-minute breathing exercise or reach out to someone you trust.")
    if Flag.DECLINING in flags:
        messages.append("Your last few check-ins have been lower than usual.")
    if Flag.IMPROVEMENT in flags:
        messages.append("Your recent check-ins are trending up. Keep doing what helps.")
    return messages


def build_insights(
    mood: Optional[MoodAnalytics] = None,
    journal: Optional[JournalAnalytics] = None,
    trend: Optional[Flag] = None,
) -> List[str]:
    messages: List[str] = []

    if trend == Flag.DECLINING:
        messages.append("Your recent check-ins show a downward trend. Consider a grounding exercise or talking to someone.")
    elif trend == Flag.IMPROVEMENT:
        messages.append("Your recent check-ins show an upward trend.")

    if mood is not None and mood.total_entries:
        top_mood = mood.most_frequent_mood
        if top_mood:
            messages.append(f"Your most frequent mood lately was {top_mood[0].label.lower()} ({top_mood[1]} times).")
        top_activity = mood.most_frequent_activity
        if top_activity:
            messages.append(f"{top_activity[0].value.capitalize()} was your most logged activity.")
        if top_mood and top_mood[0] in POSITIVE_MOODS and mood.average_intensity >= 4.0:
            messages.append("You have been feeling strongly positive. Notice what is working.")

    if journal is not None and journal.total_entries:
        if journal.average_mood_change > 0:
            messages.append("Journaling tends to lift your mood.")
        if journal.mood_improvement_rate >= 0.5:
            messages.append("Your mood improved after at least half of your journal entries.")

    if not messages:
        messages.append("Keep checking in. Patterns become clearer with a few more entries.")
    return messages[:MAX_INSIGHTS]


def build_prompt_seed(user_id: str, target_date: date) -> int:
    seed_material = f"{user_id}:{target_date.isoformat()}:{PROMPT_SALT}"
    digest = sha256(seed_material.encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def suggest_journal_prompt(mood_entry: Optional[MoodEntry], user_id: str, target_date: date) -> str:
    rng = random.Random(build_prompt_seed(user_id, target_date))
    template = rng.choice(JOURNAL_PROMPTS)["text"]
    activity = "day"
    emotion = "this way"
    if mood_entry is not None:
        emotion = mood_entry.mood.label.lower()
        if mood_entry.activities:
            activity = mood_entry.activities[0].value
    return template.replace("[activity]", activity).replace("[emotion]", emotion)


def parse_tags(raw: str) -> List[str]:
    return normalize_tags((raw or "").split(","))


def time_based_greeting(now: datetime) -> str:
    if now.hour < 12:
        return "Good morning"
    if now.hour < 17:
        return "Good afternoon"
    return "Good evening"
