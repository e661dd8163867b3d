import asyncio

import aiohttp
import pytest

from personalizer import (
    AIUnavailable, PersonalizationContext, Personalizer, QuoteContext, build_responses_prompt,
    fallback_responses, parse_responses,
)
from quotes import CATEGORY_QUOTES, CULTURAL_QUOTES, GENERAL_QUOTES


def ctx(level=3, **kwargs):
    return PersonalizationContext(task="finish report", category="work", rudeness_level=level,
                                  time_of_day="morning", **kwargs)


def test_prompt_mentions_tone_and_optional_attributes():
    prompt = build_responses_prompt(ctx(level=5, gender="female", cultural_background="hispanic"), 4)
    assert '"finish report"' in prompt
    assert "harshly motivating and unfiltered" in prompt
    assert "User identifies as: female" in prompt
    assert "Cultural background: hispanic" in prompt
    assert "Cultural background" not in build_responses_prompt(ctx(), 4)


def test_parse_numbered_lines_and_pad():
    content = '1. Time to finish that report already!\n2) "Your boss is waiting on this one."\n3. ok'
    parsed = parse_responses(content, 4)
    assert parsed[:2] == ["Time to finish that report already!", "Your boss is waiting on this one."]
    assert len(parsed) == 4
    assert len(set(parsed)) == 4


def test_parse_returns_empty_when_nothing_usable():
    assert parse_responses("1. no\n2. nope", 3) == []


def test_fallback_responses_grow_with_rudeness():
    assert len(fallback_responses(ctx(level=2), 10)) == 4
    assert len(fallback_responses(ctx(level=4), 10)) == 6
    assert fallback_responses(ctx(), 2)[0] == "Time to finish report - your future self will thank you!"


async def test_missing_key_falls_back():
    personalizer = Personalizer(api_key="")
    assert not personalizer.available
    responses = await personalizer.generate_responses(ctx(), 4)
    assert responses == fallback_responses(ctx(), 4)
    quote = await personalizer.generate_quote(QuoteContext(category="work"))
    assert quote in CATEGORY_QUOTES["work"]


async def test_generate_responses_uses_chat_content(monkeypatch):
    personalizer = Personalizer(api_key="key")

    async def fake_chat(system_prompt, prompt, temperature=0.8, max_tokens=500):
        return "1. Time to finish report before lunch!\n2. Report. Now. No more scrolling, please."

    monkeypatch.setattr(personalizer, "_chat", fake_chat)
    responses = await personalizer.generate_responses(ctx(), 2)
    assert responses == ["Time to finish report before lunch!", "Report. Now. No more scrolling, please."]


@pytest.mark.parametrize("error", [
    AIUnavailable("AI API error: 500"),
    aiohttp.ClientError("boom"),
    asyncio.TimeoutError(),
])
async def test_errors_fall_back(monkeypatch, error):
    personalizer = Personalizer(api_key="key")

    async def failing_chat(*args, **kwargs):
        raise error

    monkeypatch.setattr(personalizer, "_chat", failing_chat)
    assert await personalizer.generate_responses(ctx(), 3) == fallback_responses(ctx(), 3)
    quote = await personalizer.generate_quote(QuoteContext(ethnicity="asian"))
    assert quote in CULTURAL_QUOTES["asian"]


async def test_quote_without_hints_uses_general_pool():
    quote = await Personalizer(api_key="").generate_quote(QuoteContext())
    assert quote in GENERAL_QUOTES
