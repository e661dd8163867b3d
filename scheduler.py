# scheduler.py
"""
Reminder timers.

SchedulerState owns one APScheduler job per pending reminder
(id ``reminder_<reminder id>``) plus the periodic catch-up ``scanner`` job.
The job map lives only in memory and is rebuilt from the database on start.
"""
import logging

import pytz
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

import config
from database import utc_now

logger = logging.getLogger(__name__)

SCANNER_JOB_ID = "scanner"


def job_id(reminder_id):
    return f"reminder_{reminder_id}"


class SchedulerState:
    def __init__(self, repository, dispatcher=None, scheduler=None, now=utc_now,
                 lookahead_minutes=None, lookback_minutes=None, sweep_seconds=None):
        self.repository = repository
        self.dispatcher = dispatcher
        self.scheduler = scheduler or AsyncIOScheduler(timezone=pytz.UTC)
        self.now = now
        self.lookahead_minutes = lookahead_minutes if lookahead_minutes is not None else config.LOOKAHEAD_MINUTES
        self.lookback_minutes = lookback_minutes if lookback_minutes is not None else config.MISSED_LOOKBACK_MINUTES
        self.sweep_seconds = sweep_seconds or config.SWEEP_INTERVAL_SECONDS
        self._in_flight = set()

    def is_armed(self, reminder_id):
        return self.scheduler.get_job(job_id(reminder_id)) is not None

    def schedule(self, reminder):
        """Arm a timer for a future, incomplete reminder. Returns False when nothing was armed."""
        if reminder.completed or reminder.scheduled_for <= self.now():
            return False
        self.scheduler.add_job(
            self.fire,
            trigger=DateTrigger(run_date=reminder.scheduled_for, timezone=pytz.UTC),
            args=[reminder.id, reminder.user_id],
            id=job_id(reminder.id),
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.info(f"Scheduled reminder {reminder.id} for {reminder.scheduled_for}")
        return True

    def unschedule(self, reminder_id):
        try:
            self.scheduler.remove_job(job_id(reminder_id))
        except JobLookupError:
            return False
        logger.info(f"Unscheduled reminder {reminder_id}")
        return True

    def reschedule(self, reminder):
        self.unschedule(reminder.id)
        return self.schedule(reminder)

    async def fire(self, reminder_id, user_id):
        if reminder_id in self._in_flight:
            return False
        self._in_flight.add(reminder_id)
        try:
            reminder = await self.repository.get_reminder(reminder_id, user_id)
            if not reminder or reminder.completed:
                return False
            await self.repository.mark_fired(reminder_id, self.now())
            logger.info(f"Triggering reminder: {reminder.title}")
            await self.dispatcher.fire(reminder)
            return True
        except Exception as e:
            logger.error(f"Error triggering reminder {reminder_id}: {e}")
            return False
        finally:
            self._in_flight.discard(reminder_id)

    async def sweep(self):
        """Fire due reminders with no armed timer and arm upcoming ones that lost theirs."""
        try:
            upcoming = await self.repository.get_upcoming_reminders(
                self.lookahead_minutes, self.lookback_minutes, now=self.now()
            )
        except Exception as e:
            logger.error(f"Error checking reminders: {e}")
            return 0
        fired = 0
        for reminder in upcoming:
            if self.is_armed(reminder.id) or reminder.id in self._in_flight:
                continue
            if reminder.scheduled_for <= self.now():
                if await self.fire(reminder.id, reminder.user_id):
                    fired += 1
            else:
                self.schedule(reminder)
        return fired

    async def start(self):
        upcoming = await self.repository.get_upcoming_reminders(self.lookahead_minutes, 0, now=self.now())
        armed = sum(1 for reminder in upcoming if self.schedule(reminder))
        self.scheduler.add_job(
            self.sweep, "interval", seconds=self.sweep_seconds,
            id=SCANNER_JOB_ID, replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"Scheduler started with {armed} armed reminders")
        return armed

    def shutdown(self):
        self.scheduler.remove_all_jobs()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
