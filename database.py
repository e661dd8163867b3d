# database.py
import datetime

import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

import config

DB_URL = config.DATABASE_URL

Base = declarative_base()


def make_engine(url):
    if not url.startswith("sqlite"):
        return create_engine(url)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(DB_URL)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def init_db(bind=None):
    from models import Reminder, User, RudePhrase, WhitelistEntry  # noqa
    Base.metadata.create_all(bind=bind or engine)


def utc_now():
    """Current time as naive UTC, the form every timestamp is stored in."""
    return datetime.datetime.now(pytz.UTC).replace(tzinfo=None)


def to_utc(dt):
    if dt.tzinfo is not None:
        dt = dt.astimezone(pytz.UTC).replace(tzinfo=None)
    return dt
