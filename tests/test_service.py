import datetime

import pytest
import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from composer import Composer
from conftest import FakeHub, FakeMailer, FakePersonalizer, run_due_jobs
from dispatcher import Dispatcher
from errors import MonthlyLimitExceeded, ReminderNotFound, ValidationFailed
from followups import FollowUpScheduler
from scheduler import SchedulerState
from schemas import ReminderCreate, ReminderUpdate
from service import ReminderService, next_occurrences
from tiers import TierResolver


@pytest.fixture
def hub():
    return FakeHub()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def build(repository, clock, hub, mailer):
    def _build(personalizer=None, tiers_repository=None):
        tiers = TierResolver(tiers_repository or repository, now=clock)
        composer = Composer(repository, personalizer or FakePersonalizer(), now=clock)
        jobs = AsyncIOScheduler(timezone=pytz.UTC)
        followups = FollowUpScheduler(repository, hub, jobs, now=clock)
        dispatcher = Dispatcher(repository, tiers, composer, hub, mailer, followups, now=clock)
        state = SchedulerState(repository, dispatcher, jobs, now=clock)
        return ReminderService(repository, tiers, composer, state, followups, now=clock)
    return _build


def request(clock, **kwargs):
    fields = dict(
        original_message="finish report",
        rudeness_level=3,
        scheduled_for=clock() + datetime.timedelta(seconds=70),
        browser_notification=True,
        voice_notification=False,
        email_notification=False,
    )
    fields.update(kwargs)
    return ReminderCreate(**fields)


async def test_create_then_fire_end_to_end(build, make_user, repository, clock, hub, mailer):
    user = await make_user()
    service = build()

    [reminder] = await service.create(user, request(clock))

    assert "finish report" in reminder.rude_message
    assert reminder.responses[0] == reminder.rude_message
    assert reminder.motivational_quote
    assert service.scheduler.is_armed(reminder.id)
    assert (await repository.get_user(user.id)).monthly_reminder_usage == {"2026-03": 1}

    clock.advance(seconds=70)
    await run_due_jobs(service.scheduler, clock())

    assert len(hub.messages) == 1
    assert hub.messages[0]["reminder"]["id"] == reminder.id
    assert isinstance(hub.messages[0]["currentResponse"], str)
    assert mailer.sent == []


async def test_multi_day_fans_out_to_next_occurrences(build, make_user, repository, clock):
    user = await make_user()
    base = clock() + datetime.timedelta(hours=1)  # Tuesday 10:00
    created = await build().create(
        user, request(clock, scheduled_for=base, is_multi_day=True, selected_days=["monday", "wednesday"])
    )

    assert [r.scheduled_for for r in created] == [
        datetime.datetime(2026, 3, 11, 10, 0),  # Wednesday
        datetime.datetime(2026, 3, 16, 10, 0),  # next Monday
    ]
    assert all(r.is_multi_day for r in created)
    assert len({r.id for r in created}) == 2
    assert len(await repository.get_reminders(user.id)) == 2
    assert (await repository.get_user(user.id)).monthly_reminder_usage == {"2026-03": 2}


def test_same_weekday_keeps_today_only_while_in_future():
    now = datetime.datetime(2026, 3, 10, 9, 0)
    assert next_occurrences(now + datetime.timedelta(hours=1), ["tuesday"], now) == [
        datetime.datetime(2026, 3, 10, 10, 0)
    ]
    assert next_occurrences(now - datetime.timedelta(hours=1), ["tuesday"], now) == [
        datetime.datetime(2026, 3, 17, 8, 0)
    ]


async def test_quota_rejection_leaves_nothing_behind(build, make_user, repository, clock):
    user = await make_user(monthly_reminder_usage={"2026-03": 12})
    service = build()

    with pytest.raises(MonthlyLimitExceeded) as exc:
        await service.create(user, request(clock))

    assert exc.value.to_dict()["code"] == "MONTHLY_LIMIT_EXCEEDED"
    assert (exc.value.count, exc.value.limit) == (12, 12)
    assert await repository.get_reminders(user.id) == []
    assert service.scheduler.scheduler.get_jobs() == []


async def test_multi_day_cannot_overshoot_quota(build, make_user, clock):
    user = await make_user(monthly_reminder_usage={"2026-03": 11})
    with pytest.raises(MonthlyLimitExceeded):
        await build().create(
            user, request(clock, scheduled_for=clock() + datetime.timedelta(hours=1),
                          is_multi_day=True, selected_days=["monday", "friday"])
        )


async def test_premium_ai_failure_falls_back(build, make_user, clock):
    user = await make_user(subscription_status="active")
    [reminder] = await build(FakePersonalizer(fail=True)).create(user, request(clock))
    assert reminder.rude_message
    assert reminder.motivational_quote


async def test_premium_uses_ai_content(build, make_user, clock):
    user = await make_user(subscription_status="active")
    ai = FakePersonalizer(responses=["Time to finish report, champ!", "That report is not optional."])
    [reminder] = await build(ai).create(user, request(clock, motivational_quote="Keep going."))
    assert reminder.rude_message == "Time to finish report, champ!"
    assert reminder.responses == ["Time to finish report, champ!", "That report is not optional."]
    assert reminder.motivational_quote == "Keep going."


@pytest.mark.parametrize("delta", [datetime.timedelta(seconds=30), datetime.timedelta(days=8)])
async def test_schedule_bounds(build, make_user, clock, delta):
    user = await make_user()
    with pytest.raises(ValidationFailed):
        await build().create(user, request(clock, scheduled_for=clock() + delta))


async def test_blank_message_is_rejected(build, make_user, clock):
    user = await make_user()
    with pytest.raises(ValidationFailed):
        await build().create(user, request(clock, original_message="   "))


async def test_defaults_come_from_user(build, make_user, clock):
    user = await make_user(default_rudeness_level=5, default_voice_character="mom",
                           voice_notifications=True, email_notifications=True)
    [reminder] = await build().create(
        user, ReminderCreate(original_message="call grandma", scheduled_for=clock() + datetime.timedelta(hours=2))
    )
    assert (reminder.rudeness_level, reminder.voice_character) == (5, "mom")
    assert (reminder.browser_notification, reminder.voice_notification, reminder.email_notification) == (
        True, True, True
    )
    assert reminder.title == "call grandma"


async def test_update_reschedules_and_regenerates(build, make_user, clock):
    user = await make_user()
    service = build()
    [reminder] = await service.create(user, request(clock))

    later = clock() + datetime.timedelta(hours=3)
    updated = await service.update(user, reminder.id, ReminderUpdate(scheduled_for=later))
    job = service.scheduler.scheduler.get_job(f"reminder_{reminder.id}")
    assert job.trigger.run_date == pytz.UTC.localize(later)
    assert updated.rude_message == reminder.rude_message

    updated = await service.update(user, reminder.id, ReminderUpdate(original_message="water the plants"))
    assert "water the plants" in updated.rude_message

    with pytest.raises(ValidationFailed):
        await service.update(user, reminder.id, ReminderUpdate(scheduled_for=clock()))


async def test_defaulted_title_follows_message_edits(build, make_user, clock):
    user = await make_user()
    service = build()
    [defaulted] = await service.create(user, request(clock))
    [custom] = await service.create(user, request(clock, title="Q3 report"))

    updated = await service.update(user, defaulted.id, ReminderUpdate(original_message="water the plants"))
    assert updated.title == "water the plants"

    updated = await service.update(user, custom.id, ReminderUpdate(original_message="water the plants"))
    assert updated.title == "Q3 report"

    updated = await service.update(user, defaulted.id, ReminderUpdate(original_message="feed the cat",
                                                                      title="Pets"))
    assert updated.title == "Pets"


class LockedUsers:
    """Delegates to a real repository but every user read fails."""

    def __init__(self, repository):
        self.repository = repository

    async def get_user(self, user_id):
        raise RuntimeError("database is locked")

    def __getattr__(self, name):
        return getattr(self.repository, name)


async def test_usage_errors_do_not_fail_creation(build, make_user, repository, clock):
    user = await make_user()
    service = build(tiers_repository=LockedUsers(repository))

    [reminder] = await service.create(user, request(clock))

    assert await repository.get_reminder(reminder.id, user.id) is not None
    assert service.scheduler.is_armed(reminder.id)
    assert not (await repository.get_user(user.id)).monthly_reminder_usage


async def test_complete_disarms_timer_and_follow_ups(build, make_user, clock):
    user = await make_user()
    service = build()
    [reminder] = await service.create(user, request(clock))
    service.followups.schedule_follow_ups(reminder)

    done = await service.complete(user, reminder.id)

    assert done.completed
    assert service.scheduler.scheduler.get_jobs() == []


async def test_delete_and_missing(build, make_user, repository, clock):
    user = await make_user()
    service = build()
    [reminder] = await service.create(user, request(clock))

    await service.delete(user, reminder.id)
    assert not service.scheduler.is_armed(reminder.id)
    assert await repository.get_reminders(user.id) == []
    with pytest.raises(ReminderNotFound):
        await service.delete(user, reminder.id)
    with pytest.raises(ReminderNotFound):
        await service.get(user, "nope")


async def test_more_responses_stable_and_refresh(build, make_user, clock):
    user = await make_user()
    service = build()
    [reminder] = await service.create(user, request(clock))

    first = await service.more_responses(user, reminder.id)
    assert first == await service.more_responses(user, reminder.id)
    assert 1 <= len(first["personalized_responses"]) <= 5
    assert len(first["additional_responses"]) == 3
    assert all(r.startswith("finish report") for r in first["additional_responses"])
    assert first["total_count"] == len(first["personalized_responses"]) + 3

    refreshed = await service.more_responses(user, reminder.id, refresh=True)
    assert refreshed["personalized_responses"]


async def test_regenerate_replaces_message(build, make_user, clock):
    user = await make_user(subscription_status="active")
    ai = FakePersonalizer(responses=["Time to finish report, right now please!"])
    service = build(ai)
    [reminder] = await service.create(user, request(clock))

    ai.responses = ["Fresh take: that report is overdue in spirit."]
    updated = await service.regenerate(user, reminder.id)
    assert updated.rude_message == "Fresh take: that report is overdue in spirit."
    assert updated.responses == ["Fresh take: that report is overdue in spirit."]
