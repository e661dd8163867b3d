import datetime

import pytest
import pytz
from sqlalchemy.orm import sessionmaker

from database import init_db, make_engine
from models import Reminder, new_id
from repository import Repository

# A Tuesday morning.
NOW = datetime.datetime(2026, 3, 10, 9, 0)


class Clock:
    def __init__(self, now=NOW):
        self.current = now

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += datetime.timedelta(**kwargs)


class FakeHub:
    def __init__(self, fail=False):
        self.messages = []
        self.fail = fail

    async def broadcast(self, payload):
        if self.fail:
            raise ConnectionError("socket closed")
        self.messages.append(payload)
        return 1


class FakeMailer:
    def __init__(self, ok=True, fail=False):
        self.sent = []
        self.ok = ok
        self.fail = fail

    async def send(self, to, subject, html_body, text_body):
        if self.fail:
            raise OSError("smtp down")
        self.sent.append({"to": to, "subject": subject, "html": html_body, "text": text_body})
        return self.ok


class FakePersonalizer:
    def __init__(self, responses=None, quote='"Just do it." - Somebody', fail=False):
        self.responses = responses or []
        self.quote = quote
        self.fail = fail
        self.calls = 0

    async def generate_responses(self, ctx, count=4):
        self.calls += 1
        if self.fail:
            raise RuntimeError("AI is down")
        return self.responses[:count]

    async def generate_quote(self, ctx):
        if self.fail:
            raise RuntimeError("AI is down")
        return self.quote


async def run_due_jobs(state, now):
    """Run every reminder job whose trigger is due at ``now``, as the scheduler loop would."""
    aware_now = pytz.UTC.localize(now)
    for job in state.scheduler.get_jobs():
        if job.id == "scanner":
            continue
        fire_at = job.trigger.get_next_fire_time(None, aware_now)
        if fire_at is not None and fire_at <= aware_now:
            state.scheduler.remove_job(job.id)
            await job.func(*job.args)


class RecordingDispatcher:
    def __init__(self, fail=False):
        self.fired = []
        self.fail = fail

    async def fire(self, reminder):
        self.fired.append(reminder.id)
        if self.fail:
            raise RuntimeError("dispatch exploded")


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
async def repository(session_factory):
    repo = Repository(session_factory)
    await repo.seed_rude_phrases()
    return repo


@pytest.fixture
def make_user(repository):
    async def _make(user_id="user-1", **attrs):
        attrs.setdefault("email", f"{user_id}@example.com")
        return await repository.upsert_user(user_id, **attrs)
    return _make


@pytest.fixture
def make_reminder(repository, clock):
    async def _make(user_id="user-1", save=True, **attrs):
        fields = dict(
            id=new_id(),
            user_id=user_id,
            title="finish report",
            original_message="finish report",
            rude_message="finish report, no excuses now!",
            responses=[],
            rudeness_level=3,
            voice_character="default",
            scheduled_for=clock() + datetime.timedelta(minutes=2),
            completed=False,
            is_multi_day=False,
            selected_days=[],
            browser_notification=True,
            voice_notification=False,
            email_notification=False,
            attachments=[],
        )
        fields.update(attrs)
        reminder = Reminder(**fields)
        if save:
            reminder = await repository.create_reminder(reminder)
        return reminder
    return _make
