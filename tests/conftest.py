import os
import sys
from datetime import datetime, timedelta

import pytest
import pytz

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

# Keep test runs off the real database file and log directory.
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('LOG_TO_FILE', 'false')

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from models.base import Base
from schemas.classroom import AuthUser
from utils.classroom_manager import ClassroomManager
from utils.classroom_store import MemoryClassroomStore
from utils.durable_classroom_store import DurableClassroomStore


class FakeClock:
    """Controllable replacement for utc_now."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 5, 1, 9, 0, 0, tzinfo=pytz.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def memory_store(clock):
    return MemoryClassroomStore(vote_threshold=3, clock=clock)


@pytest.fixture
def durable_store(db_session, clock):
    return DurableClassroomStore(db_session, clock=clock)


@pytest.fixture
def manager(memory_store, durable_store):
    return ClassroomManager(memory_store, durable_store)


@pytest.fixture
def teacher():
    return AuthUser(uid='teacher-1', email='teacher@example.com')


@pytest.fixture
def student_user():
    return AuthUser(uid='student-1', email='alice@example.com')
