# dispatcher.py
"""
Fire-time delivery.

When a reminder comes due the dispatcher refreshes its content and fans it
out to every enabled channel. A channel is enabled only when both the
reminder's own flag and the user's global preference are on. Channels fail
independently: an error is logged and the others still go out. Nothing is
retried.
"""
import asyncio
import logging

from classifier import categorize
from database import utc_now
from mailer import render_email
from responses import contextual_remarks
from voices import speech_payload

logger = logging.getLogger(__name__)


def reminder_summary(reminder):
    return {
        "id": reminder.id,
        "userId": reminder.user_id,
        "title": reminder.title,
        "originalMessage": reminder.original_message,
        "rudeMessage": reminder.rude_message,
        "rudenessLevel": reminder.rudeness_level,
        "voiceCharacter": reminder.voice_character,
        "scheduledFor": reminder.scheduled_for.isoformat(),
        "browserNotification": reminder.browser_notification,
        "voiceNotification": reminder.voice_notification,
        "emailNotification": reminder.email_notification,
    }


class Dispatcher:
    def __init__(self, repository, tiers, composer, realtime, mailer, followups=None, now=utc_now):
        self.repository = repository
        self.tiers = tiers
        self.composer = composer
        self.realtime = realtime
        self.mailer = mailer
        self.followups = followups
        self.now = now

    async def fire(self, reminder):
        user = await self.repository.get_user(reminder.user_id)
        if not user:
            logger.info(f"User {reminder.user_id} for reminder {reminder.id} no longer exists, skipping")
            return None

        premium = await self.tiers.is_premium(user.id)
        variants = await self.composer.fresh_variants(reminder, user, premium)
        current = variants[0] if variants else reminder.rude_message
        payload = {
            "reminder": reminder_summary(reminder),
            "userId": user.id,
            "currentResponse": current,
            "responseVariations": variants,
            "contextualRemarks": contextual_remarks(reminder, self.now()),
            "motivationalQuote": reminder.motivational_quote,
            "attachments": list(reminder.attachments or []),
        }

        # The browser notification rides on the realtime event: one broadcast, flagged for display.
        payload["showBrowserNotification"] = bool(reminder.browser_notification and user.browser_notifications)

        deliveries = [self._deliver("realtime", reminder, self.realtime.broadcast({"type": "reminder", **payload}))]
        if reminder.voice_notification and user.voice_notifications:
            deliveries.append(self._deliver("voice", reminder, self._send_voice(reminder, payload)))
        if reminder.email_notification and user.email_notifications and user.email:
            deliveries.append(self._deliver("email", reminder, self._send_email(reminder, user, current)))
        await asyncio.gather(*deliveries)

        if self.followups is not None:
            self.followups.schedule_follow_ups(reminder)
        logger.info(f"Fired reminder {reminder.id}: {reminder.title}")
        return payload

    async def _deliver(self, channel, reminder, send):
        try:
            await send
        except Exception as e:
            logger.error(f"{channel} delivery failed for reminder {reminder.id}: {e}")

    async def _send_voice(self, reminder, payload):
        speech = speech_payload(payload["currentResponse"], reminder.voice_character)
        await self.realtime.broadcast({
            "type": "voice_notification",
            **payload,
            **speech,
            "voiceCharacter": speech["speechData"]["character"],
        })

    async def _send_email(self, reminder, user, current):
        subject, html_body, text_body = render_email(
            reminder.title, current, reminder.motivational_quote,
            categorize(reminder.original_message), reminder.scheduled_for,
        )
        if not await self.mailer.send(user.email, subject, html_body, text_body):
            logger.warning(f"Email for reminder {reminder.id} was not delivered")
