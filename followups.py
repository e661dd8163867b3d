# followups.py
"""Best-effort nags after a reminder fires. Held only in the scheduler, never persisted."""
import datetime
import logging
from dataclasses import dataclass
from enum import Enum

import pytz
from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.date import DateTrigger

from database import utc_now

logger = logging.getLogger(__name__)

FOLLOW_UP_DELAYS = [15, 30, 60, 120]  # minutes


class ResponseType(str, Enum):
    ENCOURAGING = "encouraging"
    MOTIVATIONAL = "motivational"
    STERN = "stern"
    SARCASTIC = "sarcastic"
    HUMOROUS = "humorous"


FOLLOW_UP_TEMPLATES = {
    1: [  # gentle
        (ResponseType.ENCOURAGING, "Hey there! Just checking in - how's {task} going?"),
        (ResponseType.MOTIVATIONAL, "You've got this! {task} is totally doable."),
        (ResponseType.ENCOURAGING, "No pressure, but {task} is still waiting for you."),
    ],
    2: [  # firm
        (ResponseType.STERN, "Friendly reminder: {task} isn't going to complete itself."),
        (ResponseType.MOTIVATIONAL, "Come on, you can knock out {task} right now!"),
        (ResponseType.STERN, "Still working on {task}? Time to buckle down."),
    ],
    3: [  # sarcastic
        (ResponseType.SARCASTIC, 'Oh, are we still "getting around" to {task}?'),
        (ResponseType.HUMOROUS, "I see {task} has become a decorative item on your to-do list."),
        (ResponseType.SARCASTIC, "Wow, {task} must be REALLY hard if it's taking this long."),
    ],
    4: [  # harsh
        (ResponseType.STERN, "Seriously? {task} is STILL not done? What's your excuse this time?"),
        (ResponseType.SARCASTIC, "At this rate, {task} will be done sometime next century."),
        (ResponseType.STERN, "Stop making excuses and just DO {task} already!"),
    ],
    5: [  # savage
        (ResponseType.SARCASTIC, "Congrats! You've officially turned {task} into a procrastination masterpiece!"),
        (ResponseType.STERN, "Are you kidding me?! {task} is laughing at you right now!"),
        (ResponseType.HUMOROUS, "I've seen glaciers move faster than your progress on {task}!"),
    ],
}
DEFAULT_LEVEL = 3


@dataclass
class FollowUp:
    id: str
    reminder_id: str
    user_id: str
    message: str
    response_type: ResponseType
    delay_minutes: int


def follow_ups_for(reminder):
    templates = FOLLOW_UP_TEMPLATES.get(reminder.rudeness_level, FOLLOW_UP_TEMPLATES[DEFAULT_LEVEL])
    return [
        FollowUp(
            id=f"followup_{reminder.id}_{i}",
            reminder_id=reminder.id,
            user_id=reminder.user_id,
            message=template.format(task=reminder.original_message),
            response_type=response_type,
            delay_minutes=delay,
        )
        for i, ((response_type, template), delay) in enumerate(zip(templates, FOLLOW_UP_DELAYS))
    ]


class FollowUpScheduler:
    def __init__(self, repository, realtime, scheduler, now=utc_now):
        self.repository = repository
        self.realtime = realtime
        self.scheduler = scheduler
        self.now = now
        self._armed = {}  # reminder id -> follow-up job ids

    def schedule_follow_ups(self, reminder):
        follow_ups = follow_ups_for(reminder)
        now = self.now()
        for follow_up in follow_ups:
            self.scheduler.add_job(
                self.send_follow_up,
                trigger=DateTrigger(
                    run_date=now + datetime.timedelta(minutes=follow_up.delay_minutes), timezone=pytz.UTC
                ),
                args=[follow_up],
                id=follow_up.id,
                replace_existing=True,
                misfire_grace_time=None,
            )
        self._armed[reminder.id] = [f.id for f in follow_ups]
        logger.info(f"Scheduled {len(follow_ups)} follow-ups for reminder {reminder.id}")
        return follow_ups

    def cancel_follow_ups(self, reminder_id):
        cancelled = 0
        for job_id in self._armed.pop(reminder_id, []):
            try:
                self.scheduler.remove_job(job_id)
                cancelled += 1
            except JobLookupError:
                pass
        return cancelled

    async def send_follow_up(self, follow_up):
        try:
            reminder = await self.repository.get_reminder(follow_up.reminder_id, follow_up.user_id)
            if not reminder or reminder.completed:
                return False
            logger.info(f"Follow-up for {follow_up.reminder_id}: {follow_up.message}")
            await self.realtime.broadcast({
                "type": "follow_up",
                "userId": follow_up.user_id,
                "reminderId": follow_up.reminder_id,
                "message": follow_up.message,
                "responseType": follow_up.response_type.value,
                "delayMinutes": follow_up.delay_minutes,
            })
            return True
        except Exception as e:
            logger.error(f"Error sending follow-up {follow_up.id}: {e}")
            return False
        finally:
            ids = self._armed.get(follow_up.reminder_id)
            if ids and follow_up.id in ids:
                ids.remove(follow_up.id)
                if not ids:
                    self._armed.pop(follow_up.reminder_id, None)
