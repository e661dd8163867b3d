# responses.py
"""
Template-based response generation.

Produces the "rude" message variants for a reminder without any remote
service. Variety comes from a seed: in stable mode the seed is derived from
the reminder id, so the same reminder always renders the same variants; in
refresh mode it comes from the clock, so every call reshuffles.
"""
import re
import time
import zlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from classifier import Category, Urgency, categorize, extract_action_words, time_of_day, urgency
from database import utc_now


class Mode(str, Enum):
    STABLE = "stable"
    REFRESH = "refresh"


class Style(str, Enum):
    TOUGH_LOVE = "tough-love"
    ENCOURAGING = "encouraging"
    HUMOROUS = "humorous"
    DIRECT = "direct"

    @classmethod
    def parse(cls, value):
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


MAX_BASE_CANDIDATES = 4
MAX_RESPONSES = 5
INTENSIFY_BELOW = 50
MIN_HISTORY_FOR_SCORE = 3

# (indicator, pattern, template). Each template quotes the user's own context back.
CONTEXT_INDICATORS = [
    ("important", re.compile(r"\b(important|crucial|critical|essential|must|deadline|urgent)\b"),
     'You said "{context}". If it is that important, why is "{task}" still sitting there?'),
    ("health", re.compile(r"\b(health|healthy|doctor|weight|fit|fitness|sick|energy|body)\b"),
     'Your words: "{context}". Your body is keeping score, so {task} now.'),
    ("family", re.compile(r"\b(family|mom|dad|mum|kids?|children|wife|husband|partner|parents?)\b"),
     'You told me "{context}". The people you love are counting on you to {task}.'),
    ("work", re.compile(r"\b(job|work|boss|career|promotion|client|team|raise)\b"),
     'Remember "{context}"? Your career will not wait while you dodge "{task}".'),
    ("financial", re.compile(r"\b(money|debt|save|saving|savings|bills?|rent|afford|budget|fee|fees)\b"),
     'You said "{context}". Every hour you skip "{task}" costs you.'),
    ("social", re.compile(r"\b(friends?|people|party|meet|promised|promise|social)\b"),
     'You promised "{context}". Do not be the one who flakes on "{task}".'),
    ("personal-goal", re.compile(r"\b(goal|dream|better|improve|future|want to|habit|myself)\b"),
     'Your goal, in your words: "{context}". Goals without "{task}" are just wishes.'),
]

CONTEXT_FALLBACKS = [
    'You said "{context}". Prove you meant it: {task}.',
    'Your own reason was "{context}". So {task} already.',
]

ACTION_TEMPLATES = {
    "call": "Pick up the phone and call. {task} will not happen by telepathy.",
    "email": "That email will not write itself. {task} before your inbox buries you.",
    "text": "It takes thirty seconds to text. {task} now.",
    "clean": "The mess is not going anywhere unless you do. {task}.",
    "exercise": "Your muscles filed a complaint. {task} today, not someday.",
    "work out": "Your muscles filed a complaint. {task} today, not someday.",
    "study": "The exam will not care about your excuses. {task}.",
    "read": "Those pages will not read themselves. {task}.",
    "write": "A blank page is just procrastination with margins. {task}.",
    "pay": "Late fees love people like you. {task} now.",
    "buy": "The store is open and so are your excuses. {task}.",
    "cook": "Takeout again? {task} and eat like an adult.",
    "meditate": "Sit down, breathe, and {task}. Even that is too hard?",
    "practice": "Talent is overrated. {task} and stop hoping.",
    "finish": "Starting was the easy part. {task} and actually finish this time.",
    "submit": "A draft on your desktop counts for nothing. {task}.",
    "review": "Skimming is not reviewing. {task} properly.",
    "walk": "Your legs still work, right? {task}.",
    "run": "Your running shoes are collecting dust. {task}.",
    "drink": "Hydration is not optional. {task}.",
    "take": "One small step: {task}. Seriously, that is all.",
    "book": "It will not book itself. {task} before the slots vanish.",
    "schedule": "Put it on the calendar and {task}.",
    "organize": "Chaos is not a system. {task}.",
}
DEFAULT_ACTION_TEMPLATE = "You know exactly what to do: {task}."

CATEGORY_TEMPLATES = {
    Category.HEALTH: [
        "{task}. Your body called and it wants a word.",
        "{task}. Future you is begging present you to stop being lazy.",
        "{task}. Health does not come in the mail.",
    ],
    Category.WORK: [
        "{task}. Your boss is not paying you to scroll.",
        "{task}. Professional excellence does not happen by accident.",
        "{task}. That deadline is closer than your excuses think.",
    ],
    Category.PERSONAL: [
        "{task}. The people in your life notice when you forget them.",
        "{task}. Relationships run on showing up.",
        "{task}. Be the person they think you are.",
    ],
    Category.EDUCATION: [
        "{task}. Your grades are watching.",
        "{task}. Knowledge does not download itself into your head.",
        "{task}. Cramming later is just suffering with extra steps.",
    ],
    Category.FINANCE: [
        "{task}. Your wallet is crying.",
        "{task}. Money problems grow interest, literally.",
        "{task}. Your bank account deserves better than you.",
    ],
    Category.HOUSEHOLD: [
        "{task}. Your home is judging you.",
        "{task}. The dust bunnies have unionized.",
        "{task}. Adults live in clean places. Be an adult.",
    ],
    Category.CREATIVE: [
        "{task}. Inspiration shows up for people who show up.",
        "{task}. Your masterpiece is stuck in your head. Get it out.",
        "{task}. Artists make things. Make the thing.",
    ],
    Category.GENERAL: [
        "{task}. No more stalling.",
        "{task}. You have been putting this off long enough.",
        "{task}. It is not going to do itself.",
    ],
}

CONSEQUENCE_TEMPLATES = [
    "Skip {task} and tomorrow-you inherits the mess.",
    "Every minute you delay {task}, it gets heavier.",
    "Ignore {task} now, pay for it double later.",
    "Put off {task} again and it becomes a habit of failing.",
]

INTENSIFIED_TEMPLATES = {
    Category.HEALTH: ["{task}. Your couch has your shape memorized. Get up.",
                      "{task}. Stop negotiating with your own laziness."],
    Category.WORK: ["{task}. You are one excuse away from a very awkward meeting.",
                    "{task}. Nobody gets promoted for 'almost'."],
    Category.PERSONAL: ["{task}. Ghosting your own life is not a strategy.",
                        "{task}. They will remember that you forgot."],
    Category.EDUCATION: ["{task}. Failing is a choice and you are making it.",
                         "{task}. The syllabus does not grade on potential."],
    Category.FINANCE: ["{task}. Broke is a lifestyle you are actively choosing.",
                       "{task}. Your creditors are more reliable than you."],
    Category.HOUSEHOLD: ["{task}. Your place looks like a crime scene.",
                         "{task}. Even the mold is embarrassed for you."],
    Category.CREATIVE: ["{task}. Talking about your art is not making art.",
                        "{task}. Your 'someday' project is dying of neglect."],
    Category.GENERAL: ["{task}. Enough. Do it now.",
                       "{task}. You have run out of excuses and patience."],
}

STAKES = {
    Category.HEALTH: "body",
    Category.WORK: "career",
    Category.PERSONAL: "relationships",
    Category.EDUCATION: "grades",
    Category.FINANCE: "bank account",
    Category.HOUSEHOLD: "home",
    Category.CREATIVE: "craft",
    Category.GENERAL: "future",
}

STYLE_TEMPLATES = {
    Style.TOUGH_LOVE: [
        "{task}. No excuses, just results. Your {stake} is counting on you.",
        "{task}. Stop overthinking and start doing. Your {stake} will not fix itself.",
        "{task}. Nobody is coming to save your {stake}. Move.",
    ],
    Style.ENCOURAGING: [
        "{task}. You have got this, one step at a time. Your {stake} will thank you.",
        "{task}. Every small step counts for your {stake}. Let's go!",
        "{task}. Believe in yourself and do it for your {stake}.",
    ],
    Style.HUMOROUS: [
        "{task}. Your {stake} just sent a strongly worded letter.",
        "{task}. Even your coffee is judging what you are doing to your {stake}.",
        "{task}. Time to adult harder than your {stake} has ever seen.",
    ],
    Style.DIRECT: [
        "{task}. Clear goal. Clear action. Your {stake}. Now.",
        "{task}. Simple task. Simple execution. Go.",
        "{task}. Less thinking about your {stake}, more doing.",
    ],
}

URGENCY_CUES = {
    Urgency.HIGH: [" Do it NOW.", " The clock is ticking.", " No time left to waste.", " Right now, not later."],
    Urgency.MEDIUM: [" Today, not tomorrow.", " Before the day is over.", " You still have time, barely.",
                     " Get it done today."],
    Urgency.LOW: [" Start now so you are not scrambling later.", " Future you will thank you.",
                  " Plenty of time, zero excuses.", " Plan it, then do it."],
}

TIME_REMARKS = {
    "early morning": ["Early bird gets the worm, and finishes their tasks!",
                      "Up before the sun? Use it."],
    "morning": ["Morning productivity is the best productivity!",
                "Coffee in hand, excuses out the window."],
    "afternoon": ["Afternoon slump is not a medical condition.",
                  "Half the day is gone. Make the other half count."],
    "evening": ["Evening already? Finish strong.",
                "The day is not over until this is done."],
    "night": ["Burning the midnight oil? Let's make it count!",
              "Night owl mode activated, time to conquer this task!"],
}

CATEGORY_REMARKS = {
    Category.HEALTH: ["No pain, no gain! Your muscles are waiting!", "Sweat now, smile later!"],
    Category.WORK: ["Professional excellence does not happen by accident!",
                    "Your career depends on crushing these tasks!"],
    Category.PERSONAL: ["Your loved ones deserve your attention!", "Family first, make that call!"],
    Category.EDUCATION: ["Your brain is a muscle. Train it."],
    Category.FINANCE: ["A penny saved is a penny you did not pay in late fees."],
    Category.HOUSEHOLD: ["A clean space is a clear mind."],
    Category.CREATIVE: ["Create first, critique later."],
    Category.GENERAL: [],
}


@dataclass
class BehaviorProfile:
    """How a user reacts to reminders: effectiveness (0-100) per rudeness level, and a preferred style."""
    effectiveness: Dict[int, float] = field(default_factory=dict)
    preferred_style: Optional[Style] = None

    @classmethod
    def from_history(cls, reminders, preferred_style=None, now=None):
        now = now or utc_now()
        by_level: Dict[int, List] = {}
        for r in reminders:
            if r.scheduled_for <= now:
                by_level.setdefault(r.rudeness_level, []).append(r)
        effectiveness = {}
        for level, items in by_level.items():
            if len(items) >= MIN_HISTORY_FOR_SCORE:
                done = sum(1 for r in items if r.completed)
                effectiveness[level] = round(100.0 * done / len(items), 1)
        return cls(effectiveness=effectiveness, preferred_style=Style.parse(preferred_style))


def seed_from_text(text):
    try:
        return int(text, 16)
    except ValueError:
        return zlib.crc32(text.encode("utf-8"))


def derive_seed(reminder_id, mode, now_ms=None):
    if Mode(mode) is Mode.REFRESH:
        return now_ms if now_ms is not None else int(time.time() * 1000)
    return seed_from_text(str(reminder_id)[-8:])


def seeded_shuffle(items, seed):
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = (seed + i) % (i + 1)
        out[i], out[j] = out[j], out[i]
    return out


def render_phrase(message, phrase):
    return f"{message}{phrase}"


def _dedupe(items):
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def context_candidates(task, context):
    context = (context or "").strip()
    if not context:
        return []
    lowered = context.lower()
    out = [template.format(context=context, task=task)
           for _, pattern, template in CONTEXT_INDICATORS if pattern.search(lowered)]
    if not out:
        out = [t.format(context=context, task=task) for t in CONTEXT_FALLBACKS]
    return out


def generate_with_seed(reminder, seed, profile=None, style=None, now=None):
    """Build 1-5 message variants for a reminder from an explicit seed."""
    now = now or utc_now()
    task = reminder.original_message.strip()
    category = categorize(task)

    candidates = context_candidates(task, getattr(reminder, "context", None))
    for verb in extract_action_words(task):
        candidates.append(ACTION_TEMPLATES.get(verb, DEFAULT_ACTION_TEMPLATE).format(task=task))
    category_templates = CATEGORY_TEMPLATES.get(category, CATEGORY_TEMPLATES[Category.GENERAL])
    candidates.append(category_templates[seed % len(category_templates)].format(task=task))
    candidates.append(CONSEQUENCE_TEMPLATES[seed % len(CONSEQUENCE_TEMPLATES)].format(task=task))
    base = _dedupe(candidates)[:MAX_BASE_CANDIDATES]

    extras = []
    level = reminder.rudeness_level
    if profile is not None and level in profile.effectiveness and profile.effectiveness[level] < INTENSIFY_BELOW:
        harsh = INTENSIFIED_TEMPLATES.get(category, INTENSIFIED_TEMPLATES[Category.GENERAL])
        extras.append(harsh[seed % len(harsh)].format(task=task))
    style = Style.parse(style) or (profile.preferred_style if profile else None)
    if style is not None:
        stake = STAKES.get(category, STAKES[Category.GENERAL])
        styled = [t.format(task=task, stake=stake) for t in STYLE_TEMPLATES[style]]
        extras.extend(seeded_shuffle(styled, seed))

    variants = _dedupe(base + extras)[:MAX_RESPONSES]
    if not variants:
        return [f"Time to {task}!"]

    cues = URGENCY_CUES[urgency(reminder.scheduled_for, now)]
    seed_index = seed % len(cues)
    return [v + cues[(seed_index + i) % len(cues)] for i, v in enumerate(variants)]


class ResponseGenerator:
    """Seeds and runs template generation; the clock is injectable for tests."""

    def __init__(self, clock_ms=None):
        self.clock_ms = clock_ms or (lambda: int(time.time() * 1000))

    def generate(self, reminder, mode=Mode.STABLE, profile=None, style=None, now=None):
        seed = derive_seed(reminder.id, mode, self.clock_ms() if Mode(mode) is Mode.REFRESH else None)
        return generate_with_seed(reminder, seed, profile=profile, style=style, now=now)


def contextual_remarks(reminder, now=None):
    now = now or utc_now()
    category = categorize(reminder.original_message)
    return TIME_REMARKS[time_of_day(now)] + CATEGORY_REMARKS.get(category, [])
