import datetime
from types import SimpleNamespace

from responses import (
    BehaviorProfile, Mode, ResponseGenerator, Style, URGENCY_CUES, contextual_remarks, derive_seed,
    generate_with_seed, render_phrase, seeded_shuffle,
)
from classifier import Urgency

NOW = datetime.datetime(2026, 3, 10, 9, 0)


def reminder(message="finish report", context=None, level=3, minutes=30, rid="3f2a9c1e-0000-4000-8000-00000000beef"):
    return SimpleNamespace(
        id=rid, original_message=message, context=context, rudeness_level=level,
        scheduled_for=NOW + datetime.timedelta(minutes=minutes),
    )


def test_stable_mode_is_deterministic():
    gen = ResponseGenerator()
    r = reminder()
    assert gen.generate(r, Mode.STABLE, now=NOW) == gen.generate(r, Mode.STABLE, now=NOW)


def test_refresh_mode_changes_with_the_clock():
    ticks = iter([1000, 1001, 1002, 1003])
    gen = ResponseGenerator(clock_ms=lambda: next(ticks))
    r = reminder(message="call the dentist and book a cleaning")
    outputs = {tuple(gen.generate(r, Mode.REFRESH, now=NOW)) for _ in range(4)}
    assert len(outputs) > 1


def test_stable_seed_comes_from_reminder_id():
    assert derive_seed("abc-0000beef", Mode.STABLE) == 0xbeef
    assert derive_seed("abc-0000beef", Mode.STABLE, now_ms=5) == 0xbeef
    assert derive_seed("anything", Mode.REFRESH, now_ms=42) == 42
    # non-hex ids still seed deterministically
    assert derive_seed("not-hex!", Mode.STABLE) == derive_seed("not-hex!", Mode.STABLE)


def test_seeded_shuffle_reproduces_swap_order():
    # i=3: j=(0+3)%4=3; i=2: j=2%3=2; i=1: j=1%2=1 -> identity for seed 0
    assert seeded_shuffle([1, 2, 3, 4], 0) == [1, 2, 3, 4]
    # seed 1: i=3 j=0 -> [4,2,3,1]; i=2 j=0 -> [3,2,4,1]; i=1 j=0 -> [2,3,4,1]
    assert seeded_shuffle([1, 2, 3, 4], 1) == [2, 3, 4, 1]
    assert seeded_shuffle([], 7) == []


def test_variants_are_bounded_and_carry_urgency_cue():
    r = reminder(message="call mom and pay the rent", context="family is important to me")
    variants = generate_with_seed(r, seed=3, now=NOW)
    assert 1 <= len(variants) <= 5
    assert len(set(variants)) == len(variants)
    assert all(any(v.endswith(cue) for cue in URGENCY_CUES[Urgency.HIGH]) for v in variants)


def test_context_is_quoted_back():
    r = reminder(context="my health matters")
    variants = generate_with_seed(r, seed=0, now=NOW)
    assert any('"my health matters"' in v for v in variants)


def test_style_and_low_effectiveness_add_variants():
    r = reminder(message="tidy up")
    plain = generate_with_seed(r, seed=1, now=NOW)
    profile = BehaviorProfile(effectiveness={3: 20.0}, preferred_style=Style.HUMOROUS)
    styled = generate_with_seed(r, seed=1, profile=profile, now=NOW)
    assert len(styled) > len(plain)
    assert len(styled) <= 5


def test_behavior_profile_needs_three_due_reminders():
    def r(level, completed, days_ago=1):
        return SimpleNamespace(rudeness_level=level, completed=completed,
                               scheduled_for=NOW - datetime.timedelta(days=days_ago))
    history = [r(2, True), r(2, False), r(2, True), r(2, True), r(4, False), r(4, False)]
    profile = BehaviorProfile.from_history(history, "direct", now=NOW)
    assert profile.effectiveness == {2: 75.0}
    assert profile.preferred_style is Style.DIRECT
    assert BehaviorProfile.from_history([], "bogus", now=NOW).preferred_style is None


def test_render_phrase_appends():
    assert render_phrase("finish report", ", no excuses now!") == "finish report, no excuses now!"


def test_contextual_remarks_mix_time_and_category():
    remarks = contextual_remarks(reminder(message="go to the gym"), NOW)
    assert "Morning productivity is the best productivity!" in remarks
    assert "Sweat now, smile later!" in remarks
