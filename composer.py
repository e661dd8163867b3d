# composer.py
"""Tier-aware message content: rude phrases and templates for free users, AI for premium."""
import logging

from classifier import categorize, time_of_day
from database import utc_now
from personalizer import PersonalizationContext, QuoteContext
from quotes import fallback_quote
from responses import BehaviorProfile, Mode, ResponseGenerator, derive_seed, render_phrase

logger = logging.getLogger(__name__)

AI_RESPONSE_COUNT = 4
MAX_RESPONSES = 5


class Composer:
    def __init__(self, repository, personalizer, generator=None, now=utc_now):
        self.repository = repository
        self.personalizer = personalizer
        self.generator = generator or ResponseGenerator()
        self.now = now

    def _ai_context(self, reminder, user):
        return PersonalizationContext(
            task=reminder.original_message,
            category=categorize(reminder.original_message).value,
            rudeness_level=reminder.rudeness_level,
            time_of_day=time_of_day(self.now()),
            gender=user.gender if user.gender_specific_reminders else None,
            cultural_background=user.ethnicity if user.ethnicity_specific_quotes else None,
        )

    async def behavior_profile(self, user):
        history = await self.repository.get_reminders(user.id)
        return BehaviorProfile.from_history(history, user.preferred_motivation_style, now=self.now())

    async def template_variants(self, reminder, user, mode):
        profile = await self.behavior_profile(user)
        return self.generator.generate(reminder, mode, profile=profile, now=self.now())

    async def _ai_variants(self, reminder, user):
        try:
            responses = await self.personalizer.generate_responses(
                self._ai_context(reminder, user), AI_RESPONSE_COUNT
            )
        except Exception as e:
            logger.error(f"AI personalization failed for reminder {reminder.id}, using templates: {e}")
            return []
        return [r for r in responses if r]

    async def initial_message(self, reminder, user, premium):
        """Returns (rude_message, responses) for a reminder about to be saved."""
        if premium:
            responses = await self._ai_variants(reminder, user)
            if responses:
                return responses[0], responses[:MAX_RESPONSES]
        variants = await self.template_variants(reminder, user, Mode.STABLE)
        phrases = await self.repository.get_rude_phrases_for_level(reminder.rudeness_level)
        if phrases:
            seed = derive_seed(reminder.id, Mode.STABLE)
            rude_message = render_phrase(reminder.original_message, phrases[seed % len(phrases)].phrase)
        else:
            rude_message = variants[0]
        responses = [rude_message] + [v for v in variants if v != rude_message]
        return rude_message, responses[:MAX_RESPONSES]

    async def fresh_variants(self, reminder, user, premium):
        if premium:
            responses = await self._ai_variants(reminder, user)
            if responses:
                return responses[:MAX_RESPONSES]
        return await self.template_variants(reminder, user, Mode.REFRESH)

    async def quote_for(self, user, task, premium):
        category = categorize(task).value
        ethnicity = user.ethnicity if user.ethnicity_specific_quotes else None
        if premium:
            ctx = QuoteContext(
                category=category,
                ethnicity=ethnicity,
                gender=user.gender if user.gender_specific_reminders else None,
                time_of_day=time_of_day(self.now()),
            )
            try:
                return await self.personalizer.generate_quote(ctx)
            except Exception as e:
                logger.error(f"AI quote failed for user {user.id}, using static quotes: {e}")
        return fallback_quote(category=category, ethnicity=ethnicity)
