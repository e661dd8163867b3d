# service.py
"""
Reminder operations behind the HTTP API.

Creation runs validation, quota, tier, content generation, persistence and
arming in that order; a request rejected at any step leaves nothing behind.
"""
import datetime
import logging

from database import to_utc, utc_now
from errors import MonthlyLimitExceeded, ReminderNotFound, ValidationFailed
from models import Reminder, new_id
from responses import Mode, contextual_remarks, derive_seed, render_phrase, seeded_shuffle
from schemas import WEEKDAYS
from tiers import UNLIMITED, month_key
from voices import VoiceCharacter

logger = logging.getLogger(__name__)

MIN_LEAD = datetime.timedelta(minutes=1)
MAX_AHEAD = datetime.timedelta(days=7)
ADDITIONAL_PHRASES = 3
CONTENT_FIELDS = ("original_message", "context", "rudeness_level")
NULLABLE_FIELDS = ("context", "motivational_quote")


def next_occurrences(base, days, now):
    """Next future occurrence of each weekday at the time of day of ``base``."""
    out = []
    for day in days:
        when = base + datetime.timedelta(days=(WEEKDAYS.index(day) - base.weekday()) % 7)
        if when <= now:
            when += datetime.timedelta(days=7)
        out.append(when)
    return sorted(out)


def _value(v):
    return getattr(v, "value", v)


class ReminderService:
    def __init__(self, repository, tiers, composer, scheduler, followups=None, now=utc_now):
        self.repository = repository
        self.tiers = tiers
        self.composer = composer
        self.scheduler = scheduler
        self.followups = followups
        self.now = now

    def validate_schedule(self, scheduled_for):
        now = self.now()
        if scheduled_for < now + MIN_LEAD:
            raise ValidationFailed("Reminder must be scheduled at least 1 minute in the future")
        if scheduled_for > now + MAX_AHEAD:
            raise ValidationFailed("Reminders can be scheduled at most 7 days ahead")

    async def create(self, user, data):
        """Create one reminder, or one per selected weekday for multi-day requests."""
        message = data.original_message.strip()
        if not message:
            raise ValidationFailed("originalMessage is required")
        base = to_utc(data.scheduled_for)
        self.validate_schedule(base)

        multi_day = bool(data.is_multi_day and data.selected_days)
        times = next_occurrences(base, data.selected_days, self.now()) if multi_day else [base]

        limit = await self.tiers.check_monthly_limit(user.id)
        if limit.exceeded or (limit.limit != UNLIMITED and limit.count + len(times) > limit.limit):
            logger.info(f"User {user.id} hit the monthly limit ({limit.count}/{limit.limit})")
            raise MonthlyLimitExceeded(limit.count, limit.limit)
        premium = await self.tiers.is_premium(user.id)

        rudeness = data.rudeness_level or user.default_rudeness_level or 3
        voice = data.voice_character or VoiceCharacter.parse(user.default_voice_character)
        quote = data.motivational_quote or await self.composer.quote_for(user, message, premium)

        created = []
        for when in times:
            reminder = Reminder(
                id=new_id(),
                user_id=user.id,
                title=(data.title or "").strip() or message,
                original_message=message,
                context=data.context,
                rudeness_level=rudeness,
                voice_character=_value(voice),
                motivational_quote=quote,
                scheduled_for=when,
                completed=False,
                is_multi_day=multi_day,
                selected_days=list(data.selected_days) if multi_day else [],
                browser_notification=self._flag(data.browser_notification, user.browser_notifications),
                voice_notification=self._flag(data.voice_notification, user.voice_notifications),
                email_notification=self._flag(data.email_notification, user.email_notifications),
                attachments=list(data.attachments),
            )
            reminder.rude_message, reminder.responses = await self.composer.initial_message(reminder, user, premium)
            reminder = await self.repository.create_reminder(reminder)
            await self.tiers.increment_monthly_count(user.id)
            self.scheduler.schedule(reminder)
            created.append(reminder)
        logger.info(f"Created {len(created)} reminder(s) for user {user.id}: {message}")
        return created

    @staticmethod
    def _flag(requested, preference):
        return bool(preference) if requested is None else requested

    async def list(self, user):
        return await self.repository.get_reminders(user.id)

    async def get(self, user, reminder_id):
        reminder = await self.repository.get_reminder(reminder_id, user.id)
        if not reminder:
            raise ReminderNotFound(reminder_id)
        return reminder

    async def update(self, user, reminder_id, data):
        reminder = await self.get(user, reminder_id)
        changes = {
            k: _value(v) for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }
        if "original_message" in changes:
            changes["original_message"] = changes["original_message"].strip()
            if not changes["original_message"]:
                raise ValidationFailed("originalMessage is required")
        if "scheduled_for" in changes:
            changes["scheduled_for"] = to_utc(changes["scheduled_for"])
            self.validate_schedule(changes["scheduled_for"])
        if not changes:
            return reminder
        # A title defaulted from the message follows it.
        if ("original_message" in changes and "title" not in changes
                and reminder.title == reminder.original_message):
            changes["title"] = changes["original_message"]

        if any(k in changes for k in CONTENT_FIELDS):
            for key, value in changes.items():
                setattr(reminder, key, value)
            premium = await self.tiers.is_premium(user.id)
            changes["rude_message"], changes["responses"] = await self.composer.initial_message(
                reminder, user, premium
            )

        updated = await self.repository.update_reminder(reminder_id, user.id, changes)
        if updated is None:
            raise ReminderNotFound(reminder_id)
        self.scheduler.reschedule(updated)
        return updated

    async def complete(self, user, reminder_id):
        reminder = await self.repository.complete_reminder(reminder_id, user.id)
        if not reminder:
            raise ReminderNotFound(reminder_id)
        self._disarm(reminder_id)
        logger.info(f"Reminder {reminder_id} completed")
        return reminder

    async def delete(self, user, reminder_id):
        if not await self.repository.delete_reminder(reminder_id, user.id):
            raise ReminderNotFound(reminder_id)
        self._disarm(reminder_id)
        logger.info(f"Reminder {reminder_id} deleted")

    def _disarm(self, reminder_id):
        self.scheduler.unschedule(reminder_id)
        if self.followups is not None:
            self.followups.cancel_follow_ups(reminder_id)

    async def regenerate(self, user, reminder_id):
        """Replace the active message with a fresh set of variants."""
        reminder = await self.get(user, reminder_id)
        premium = await self.tiers.is_premium(user.id)
        variants = await self.composer.fresh_variants(reminder, user, premium)
        if not variants:
            return reminder
        return await self.repository.update_reminder(
            reminder_id, user.id, {"rude_message": variants[0], "responses": variants}
        )

    async def more_responses(self, user, reminder_id, refresh=False):
        reminder = await self.get(user, reminder_id)
        mode = Mode.REFRESH if refresh else Mode.STABLE
        premium = await self.tiers.is_premium(user.id)
        if refresh and premium:
            personalized = await self.composer.fresh_variants(reminder, user, premium)
        else:
            personalized = await self.composer.template_variants(reminder, user, mode)

        phrases = await self.repository.get_rude_phrases_for_level(reminder.rudeness_level)
        seed = derive_seed(reminder.id, mode, self.composer.generator.clock_ms())
        additional = [
            render_phrase(reminder.original_message, p.phrase)
            for p in seeded_shuffle(phrases, seed)[:ADDITIONAL_PHRASES]
        ]
        now = self.now()
        return {
            "personalized_responses": personalized,
            "contextual_remarks": contextual_remarks(reminder, now),
            "additional_responses": additional,
            "total_count": len(personalized) + len(additional),
            "generated_at": now,
        }

    async def stats(self, user):
        return await self.repository.get_user_stats(user.id, self.now())

    async def usage(self, user):
        limit = await self.tiers.check_monthly_limit(user.id)
        return {
            "month": month_key(self.now()),
            "count": limit.count,
            "limit": limit.limit,
            "is_premium": limit.limit == UNLIMITED,
        }
