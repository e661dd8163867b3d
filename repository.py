# repository.py
import datetime
import logging

from sqlalchemy import or_

from database import SessionLocal, utc_now
from models import Reminder, User, RudePhrase, WhitelistEntry

logger = logging.getLogger(__name__)

RUDE_PHRASES = [
    # Level 1 - gentle
    (1, ", you've got this! 💪", "encouraging"),
    (1, ", take your time but don't forget! ⏰", "gentle"),
    (1, ", friendly reminder! 😊", "polite"),
    (1, ", just a gentle nudge! 👋", "soft"),
    # Level 2 - firm
    (2, ", don't let this slip by!", "firm"),
    (2, ", time to get moving!", "assertive"),
    (2, ", no excuses now!", "direct"),
    (2, ", make it happen!", "motivational"),
    # Level 3 - sarcastic
    (3, ", because apparently you need reminding...", "sarcastic"),
    (3, ", shocking that you haven't done this yet!", "ironic"),
    (3, ", what a surprise, still not done!", "witty"),
    (3, ", let me guess, you 'forgot' again?", "cynical"),
    # Level 4 - harsh
    (4, ", stop procrastinating like a lazy sloth!", "harsh"),
    (4, ", get your act together already!", "demanding"),
    (4, ", quit being such a slacker!", "critical"),
    (4, ", enough with the excuses!", "impatient"),
    # Level 5 - savage
    (5, ", you absolute couch potato!", "savage"),
    (5, ", stop being such a useless lump!", "brutal"),
    (5, ", what's wrong with you?!", "offensive"),
    (5, ", you're pathetic at this point!", "insulting"),
]

REMINDER_FIELDS = {c.name for c in Reminder.__table__.columns} - {"id", "user_id", "created_at"}
USER_FIELDS = {c.name for c in User.__table__.columns} - {"id", "created_at"}


class Repository:
    """Storage operations the reminder engine needs, over a SQLAlchemy session factory.

    Sessions are synchronous, so each call blocks the event loop for the
    length of its query. That is accepted for the local SQLite store.
    """

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    # --- Reminders ---

    async def create_reminder(self, reminder):
        with self.session_factory() as db:
            db.add(reminder)
            db.commit()
            db.refresh(reminder)
        return reminder

    async def get_reminder(self, reminder_id, user_id):
        with self.session_factory() as db:
            return db.query(Reminder).filter(
                Reminder.id == reminder_id,
                Reminder.user_id == user_id
            ).first()

    async def get_reminders(self, user_id):
        with self.session_factory() as db:
            return db.query(Reminder).filter(
                Reminder.user_id == user_id
            ).order_by(Reminder.scheduled_for.asc()).all()

    async def update_reminder(self, reminder_id, user_id, patch):
        unknown = set(patch) - REMINDER_FIELDS
        if unknown:
            raise ValueError(f"Unknown reminder fields: {sorted(unknown)}")
        with self.session_factory() as db:
            reminder = db.query(Reminder).filter(
                Reminder.id == reminder_id,
                Reminder.user_id == user_id
            ).first()
            if not reminder:
                return None
            for key, value in patch.items():
                setattr(reminder, key, value)
            db.commit()
            db.refresh(reminder)
            return reminder

    async def delete_reminder(self, reminder_id, user_id):
        with self.session_factory() as db:
            deleted = db.query(Reminder).filter(
                Reminder.id == reminder_id,
                Reminder.user_id == user_id
            ).delete()
            db.commit()
        return deleted > 0

    async def complete_reminder(self, reminder_id, user_id):
        with self.session_factory() as db:
            reminder = db.query(Reminder).filter(
                Reminder.id == reminder_id,
                Reminder.user_id == user_id
            ).first()
            if not reminder:
                return None
            if not reminder.completed:
                reminder.completed = True
                reminder.completed_at = utc_now()
                db.commit()
                db.refresh(reminder)
            return reminder

    async def get_upcoming_reminders(self, window_minutes, lookback_minutes=0, now=None):
        """Incomplete, not-yet-fired reminders due between now - lookback and now + window."""
        now = now or utc_now()
        with self.session_factory() as db:
            return db.query(Reminder).filter(
                Reminder.completed.is_(False),
                Reminder.scheduled_for >= now - datetime.timedelta(minutes=lookback_minutes),
                Reminder.scheduled_for <= now + datetime.timedelta(minutes=window_minutes),
                or_(Reminder.last_fired_at.is_(None), Reminder.last_fired_at < Reminder.scheduled_for)
            ).order_by(Reminder.scheduled_for.asc()).all()

    async def mark_fired(self, reminder_id, at=None):
        with self.session_factory() as db:
            db.query(Reminder).filter(Reminder.id == reminder_id).update(
                {"last_fired_at": at or utc_now()}
            )
            db.commit()

    # --- Users ---

    async def get_user(self, user_id):
        with self.session_factory() as db:
            return db.get(User, user_id)

    async def upsert_user(self, user_id, email=None, **attrs):
        with self.session_factory() as db:
            user = db.get(User, user_id)
            if user is None:
                attrs.setdefault("monthly_reminder_usage", {})
                user = User(id=user_id, email=email, **attrs)
                db.add(user)
            else:
                if email:
                    user.email = email
                for key, value in attrs.items():
                    setattr(user, key, value)
            db.commit()
            db.refresh(user)
            return user

    async def update_user(self, user_id, patch):
        unknown = set(patch) - USER_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        with self.session_factory() as db:
            user = db.get(User, user_id)
            if not user:
                return None
            for key, value in patch.items():
                setattr(user, key, value)
            db.commit()
            db.refresh(user)
            return user

    async def get_user_stats(self, user_id, now=None):
        now = now or utc_now()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        tomorrow = today + datetime.timedelta(days=1)
        reminders = await self.get_reminders(user_id)
        active = [r for r in reminders if not r.completed and r.scheduled_for >= now]
        completed_today = [
            r for r in reminders
            if r.completed and r.completed_at and today <= r.completed_at < tomorrow
        ]
        avg = sum(r.rudeness_level for r in reminders) / len(reminders) if reminders else 0
        return {
            "activeReminders": len(active),
            "completedToday": len(completed_today),
            "avgRudeness": round(avg, 1),
        }

    # --- Rude phrases ---

    async def get_rude_phrases_for_level(self, level):
        with self.session_factory() as db:
            return db.query(RudePhrase).filter(
                RudePhrase.rudeness_level == level
            ).order_by(RudePhrase.id.asc()).all()

    async def seed_rude_phrases(self):
        with self.session_factory() as db:
            if db.query(RudePhrase).first() is not None:
                return
            db.add_all([
                RudePhrase(rudeness_level=level, phrase=phrase, category=category)
                for level, phrase, category in RUDE_PHRASES
            ])
            db.commit()
        logger.info(f"Seeded {len(RUDE_PHRASES)} rude phrases")

    # --- Premium whitelist ---

    async def add_to_whitelist(self, email):
        email = email.strip().lower()
        with self.session_factory() as db:
            if not db.query(WhitelistEntry).filter(WhitelistEntry.email == email).first():
                db.add(WhitelistEntry(email=email))
                db.commit()
        return email

    async def remove_from_whitelist(self, email):
        with self.session_factory() as db:
            deleted = db.query(WhitelistEntry).filter(
                WhitelistEntry.email == email.strip().lower()
            ).delete()
            db.commit()
        return deleted > 0

    async def list_whitelist(self):
        with self.session_factory() as db:
            return [e.email for e in db.query(WhitelistEntry).order_by(WhitelistEntry.email).all()]

    async def is_whitelisted(self, email):
        if not email:
            return False
        with self.session_factory() as db:
            return db.query(WhitelistEntry).filter(
                WhitelistEntry.email == email.strip().lower()
            ).first() is not None
