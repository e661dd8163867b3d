# personalizer.py
"""
AI personalization for premium reminders.

Talks to an OpenAI-compatible chat-completions endpoint (DeepSeek by
default). Every failure collapses into local fallback content, so callers
always get something usable back and never see an error.
"""
import re
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp

import config
from quotes import fallback_quote

logger = logging.getLogger(__name__)

RESPONSES_SYSTEM_PROMPT = (
    "You are a motivational reminder assistant that generates fresh, personalized reminder messages. "
    "Be creative, engaging, and avoid repetitive patterns."
)
QUOTE_SYSTEM_PROMPT = (
    "You are a motivational quote generator that creates inspiring, personalized quotes. "
    "Generate only the quote and attribution, nothing else."
)

TONES = {
    1: "gentle and encouraging",
    2: "friendly but motivating",
    3: "direct and no-nonsense",
    4: "tough love and brutally honest",
    5: "harshly motivating and unfiltered",
}

NUMBERED_LINE = re.compile(r"^\d+[.)]\s*(.+)$")
MIN_RESPONSE_LENGTH = 10
PAD_LEADS = ["Now's the time to", "Right now, it's time to", "No more waiting. Time to"]
PAD_PREFIXES = ["Seriously,", "Listen,", "Last call:"]


class AIUnavailable(Exception):
    pass


@dataclass
class PersonalizationContext:
    task: str
    category: str
    rudeness_level: int
    time_of_day: str
    gender: Optional[str] = None
    cultural_background: Optional[str] = None


@dataclass
class QuoteContext:
    category: Optional[str] = None
    ethnicity: Optional[str] = None
    gender: Optional[str] = None
    time_of_day: Optional[str] = None


def _value(v):
    return getattr(v, "value", v)


def build_responses_prompt(ctx, count):
    tone = TONES.get(ctx.rudeness_level, "motivating")
    category = _value(ctx.category)
    lines = [
        f'Generate {count} unique, personalized reminder messages for this task: "{ctx.task}"',
        "",
        "Context:",
        f"- Category: {category}",
        f"- Tone: {tone} (level {ctx.rudeness_level}/5)",
        f"- Time: {ctx.time_of_day}",
    ]
    if ctx.gender:
        lines.append(f"- User identifies as: {ctx.gender}")
    if ctx.cultural_background:
        lines.append(f"- Cultural background: {ctx.cultural_background}")
    lines += [
        "",
        "Requirements:",
        '1. Each message should start with "Time to" or similar action-oriented phrasing',
        "2. Make each response unique and fresh - no repetitive patterns",
        f"3. Consider the specific category context ({category})",
        "4. Match the requested tone level",
        "5. Keep responses concise but impactful (1-2 sentences max)",
        "6. Make it feel personal and motivational, not generic",
        "",
        f"Format: Return exactly {count} messages, one per line, numbered 1-{count}.",
    ]
    return "\n".join(lines)


def build_quote_prompt(ctx):
    prompt = (
        "Generate a motivational quote that is:\n"
        "- Inspiring and uplifting\n"
        "- Brief but impactful (1-2 sentences max)\n"
        f"- Relevant to {ctx.time_of_day or 'daily motivation'}"
    )
    if ctx.category:
        prompt += f"\n- Related to {_value(ctx.category)} (work, health, personal growth, etc.)"
    if ctx.ethnicity:
        prompt += f"\n- Culturally resonant for someone from a {ctx.ethnicity} background"
    if ctx.gender:
        prompt += f"\n- Appropriate and inspiring for a {ctx.gender} individual"
    prompt += (
        '\n\nFormat: "Quote text" - Author Name\n'
        'Example: "The best time to plant a tree was 20 years ago. The second best time is now." - Chinese Proverb\n'
        "\nGenerate ONE unique quote now:"
    )
    return prompt


def vary(text, n):
    """Reword a response so padding does not repeat it verbatim."""
    if re.match(r"time to\b", text, re.I):
        return f"{PAD_LEADS[n % len(PAD_LEADS)]}{text[len('time to'):]}"
    return f"{PAD_PREFIXES[n % len(PAD_PREFIXES)]} {text[:1].lower()}{text[1:]}"


def parse_responses(content, count):
    responses = []
    for line in content.splitlines():
        line = line.strip()
        if not line:
            continue
        match = NUMBERED_LINE.match(line)
        text = (match.group(1) if match else line).strip().strip('"')
        if len(text) > MIN_RESPONSE_LENGTH:
            responses.append(text)
    if not responses:
        return []
    pad = 0
    while len(responses) < count:
        responses.append(vary(responses[-1], pad))
        pad += 1
    return responses[:count]


def fallback_responses(ctx, count):
    task = ctx.task
    fallbacks = [
        f"Time to {task} - your future self will thank you!",
        f'Ready to tackle "{task}"? Let\'s make it happen!',
        f"{task} is calling your name - time to answer!",
        f'Every moment you delay "{task}" is a missed opportunity!',
    ]
    if ctx.rudeness_level >= 4:
        fallbacks += [
            f"Seriously, {task} isn't going to do itself!",
            f"Stop procrastinating and just {task} already!",
        ]
    return fallbacks[:count]


class Personalizer:
    def __init__(self, api_key=None, api_url=None, model=None, timeout=None):
        self.api_key = api_key if api_key is not None else config.AI_API_KEY
        self.api_url = api_url or config.AI_API_URL
        self.model = model or config.AI_MODEL
        self.timeout = timeout or config.AI_TIMEOUT_SECONDS

    @property
    def available(self):
        return bool(self.api_key)

    async def _chat(self, system_prompt, prompt, temperature=0.8, max_tokens=500):
        if not self.available:
            raise AIUnavailable("no AI API key configured")
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        data = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt}
            ],
            "max_tokens": max_tokens,
            "temperature": temperature
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.api_url, headers=headers, json=data) as resp:
                if resp.status != 200:
                    raise AIUnavailable(f"AI API error: {resp.status}")
                result = await resp.json()
        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AIUnavailable(f"malformed AI response: {e}") from e
        if not content or not content.strip():
            raise AIUnavailable("empty AI response")
        return content.strip()

    async def generate_responses(self, ctx, count=4):
        try:
            content = await self._chat(RESPONSES_SYSTEM_PROMPT, build_responses_prompt(ctx, count))
            responses = parse_responses(content, count)
            if responses:
                return responses
            logger.warning("AI response had no usable lines, using fallback responses")
        except (AIUnavailable, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"AI response generation failed, using fallback: {e}")
        return fallback_responses(ctx, count)

    async def generate_quote(self, ctx):
        try:
            return await self._chat(QUOTE_SYSTEM_PROMPT, build_quote_prompt(ctx), max_tokens=150)
        except (AIUnavailable, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"AI quote generation failed, using fallback quote: {e}")
        return fallback_quote(category=ctx.category, ethnicity=ctx.ethnicity)
