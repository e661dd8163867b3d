# models.py
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON
from sqlalchemy.sql import func

from database import Base


def new_id():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True)
    first_name = Column(String)
    # global channel preferences
    browser_notifications = Column(Boolean, default=True)
    voice_notifications = Column(Boolean, default=True)
    email_notifications = Column(Boolean, default=False)
    default_rudeness_level = Column(Integer, default=3)
    default_voice_character = Column(String, default="default")
    # personalization
    gender = Column(String)
    gender_specific_reminders = Column(Boolean, default=False)
    ethnicity = Column(String)
    ethnicity_specific_quotes = Column(Boolean, default=False)
    preferred_motivation_style = Column(String)  # tough-love / encouraging / humorous / direct
    # subscription
    subscription_status = Column(String, default="free")  # free, active, canceled, past_due
    subscription_plan = Column(String, default="free")    # free, premium
    subscription_ends_at = Column(DateTime)
    is_whitelisted = Column(Boolean, default=False)
    monthly_reminder_usage = Column(JSON, default=dict)   # {"YYYY-MM": count}
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Reminder(Base):
    __tablename__ = "reminders"
    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, index=True, nullable=False)
    title = Column(Text, nullable=False)
    original_message = Column(Text, nullable=False)
    context = Column(Text)
    rude_message = Column(Text, nullable=False)
    responses = Column(JSON, default=list)
    rudeness_level = Column(Integer, nullable=False)
    voice_character = Column(String, default="default")
    motivational_quote = Column(Text)
    scheduled_for = Column(DateTime, nullable=False, index=True)
    completed = Column(Boolean, default=False)
    completed_at = Column(DateTime)
    last_fired_at = Column(DateTime)
    is_multi_day = Column(Boolean, default=False)
    selected_days = Column(JSON, default=list)
    browser_notification = Column(Boolean, default=True)
    voice_notification = Column(Boolean, default=False)
    email_notification = Column(Boolean, default=False)
    attachments = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Reminder(id='{self.id}', message='{self.original_message[:30]}', scheduled_for='{self.scheduled_for}')>"


class RudePhrase(Base):
    __tablename__ = "rude_phrases"
    id = Column(Integer, primary_key=True)
    rudeness_level = Column(Integer, index=True, nullable=False)
    phrase = Column(Text, nullable=False)
    category = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class WhitelistEntry(Base):
    __tablename__ = "premium_whitelist"
    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
