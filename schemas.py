# schemas.py
"""
Request and response bodies for the HTTP API.

JSON is camelCase on the wire; the models accept either spelling on input.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from voices import VoiceCharacter

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
MAX_ATTACHMENTS = 5


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _clean_days(days):
    cleaned = []
    for day in days or []:
        day = day.strip().lower()
        if day not in WEEKDAYS:
            raise ValueError(f"unknown weekday: {day}")
        if day not in cleaned:
            cleaned.append(day)
    return cleaned


class ReminderCreate(CamelModel):
    original_message: str = Field(..., min_length=1)
    title: Optional[str] = None
    context: Optional[str] = None
    rudeness_level: Optional[int] = Field(None, ge=1, le=5)
    voice_character: Optional[VoiceCharacter] = None
    motivational_quote: Optional[str] = None
    scheduled_for: datetime
    is_multi_day: bool = False
    selected_days: List[str] = Field(default_factory=list)
    # None means "use the user's global preference"
    browser_notification: Optional[bool] = None
    voice_notification: Optional[bool] = None
    email_notification: Optional[bool] = None
    attachments: List[str] = Field(default_factory=list, max_length=MAX_ATTACHMENTS)

    @field_validator("selected_days")
    @classmethod
    def check_days(cls, v):
        return _clean_days(v)


class ReminderUpdate(CamelModel):
    title: Optional[str] = None
    original_message: Optional[str] = Field(None, min_length=1)
    context: Optional[str] = None
    rudeness_level: Optional[int] = Field(None, ge=1, le=5)
    voice_character: Optional[VoiceCharacter] = None
    motivational_quote: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    browser_notification: Optional[bool] = None
    voice_notification: Optional[bool] = None
    email_notification: Optional[bool] = None
    attachments: Optional[List[str]] = Field(None, max_length=MAX_ATTACHMENTS)


class ReminderOut(CamelModel):
    id: str
    user_id: str
    title: str
    original_message: str
    context: Optional[str] = None
    rude_message: str
    responses: List[str] = Field(default_factory=list)
    rudeness_level: int
    voice_character: str
    motivational_quote: Optional[str] = None
    scheduled_for: datetime
    completed: bool
    completed_at: Optional[datetime] = None
    is_multi_day: bool = False
    selected_days: List[str] = Field(default_factory=list)
    browser_notification: bool
    voice_notification: bool
    email_notification: bool
    attachments: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("responses", "selected_days", "attachments", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []


class ReminderCreated(ReminderOut):
    additional_reminders: List[ReminderOut] = Field(default_factory=list)


class MoreResponses(CamelModel):
    personalized_responses: List[str]
    contextual_remarks: List[str]
    additional_responses: List[str]
    total_count: int
    generated_at: datetime


class VoiceTest(CamelModel):
    voice_character: VoiceCharacter = VoiceCharacter.DEFAULT
    # Clients send testMessage.
    message: Optional[str] = Field(None, validation_alias=AliasChoices("testMessage", "message"))


class Usage(CamelModel):
    month: str
    count: int
    limit: int
    is_premium: bool


class Stats(CamelModel):
    active_reminders: int
    completed_today: int
    avg_rudeness: float
