# classifier.py
"""Task categorization, urgency and action-word extraction for reminder text."""
import re
import datetime
from enum import Enum


class Category(str, Enum):
    HEALTH = "health"
    WORK = "work"
    PERSONAL = "personal"
    EDUCATION = "education"
    FINANCE = "finance"
    HOUSEHOLD = "household"
    CREATIVE = "creative"
    GENERAL = "general"


class Urgency(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Order matters: first match wins.
CATEGORY_PATTERNS = [
    (Category.HEALTH, re.compile(
        r"\b(gym|workout|exercise|run|running|jog|walk|yoga|doctor|dentist|medicine|meds|pills?|"
        r"vitamins?|water|diet|sleep|meditat\w*|stretch\w*|health\w*)\b")),
    (Category.WORK, re.compile(
        r"\b(work|report|meeting|boss|client|deadline|presentation|email|emails|project|office|"
        r"invoice|slides|proposal|standup|review)\b")),
    (Category.PERSONAL, re.compile(
        r"\b(call|mom|dad|mum|family|friend|friends|birthday|date|partner|wife|husband|kids?|"
        r"grandma|grandpa|text)\b")),
    (Category.EDUCATION, re.compile(
        r"\b(study|studying|homework|exam|test|class|lecture|read|reading|course|learn\w*|"
        r"assignment|essay|thesis)\b")),
    (Category.FINANCE, re.compile(
        r"\b(pay|bill|bills|rent|tax|taxes|budget|bank|invoice|money|savings|insurance|loan|"
        r"mortgage)\b")),
    (Category.HOUSEHOLD, re.compile(
        r"\b(clean|cleaning|laundry|dishes|vacuum|groceries|grocery|cook|cooking|trash|garbage|"
        r"tidy|chores?|garden|plants?|fix)\b")),
    (Category.CREATIVE, re.compile(
        r"\b(write|writing|paint|painting|draw|drawing|music|guitar|piano|sing|practice|blog|"
        r"design|photo\w*|craft)\b")),
]

ACTION_WORDS = [
    "call", "email", "text", "clean", "exercise", "work out", "study", "read", "write",
    "pay", "buy", "cook", "meditate", "practice", "finish", "submit", "review",
    "walk", "run", "drink", "take", "book", "schedule", "organize",
]

ACTION_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(w) for w in sorted(ACTION_WORDS, key=len, reverse=True)) + r")\b"
)


def categorize(task_text):
    text = (task_text or "").lower()
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return Category.GENERAL


def urgency(scheduled_for, now):
    delta = scheduled_for - now
    if delta <= datetime.timedelta(hours=2):
        return Urgency.HIGH
    if delta <= datetime.timedelta(hours=24):
        return Urgency.MEDIUM
    return Urgency.LOW


def extract_action_words(task_text):
    found = []
    for match in ACTION_PATTERN.findall((task_text or "").lower()):
        if match not in found:
            found.append(match)
    return found


def time_of_day(now):
    hour = now.hour
    if hour < 6:
        return "early morning"
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    if hour < 21:
        return "evening"
    return "night"
