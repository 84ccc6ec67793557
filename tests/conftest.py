# tests/conftest.py
import fakeredis
import pytest
from fastapi.testclient import TestClient

from marketplace.cache import EstateIdCache
from marketplace.db import Base, make_engine, make_session_factory
from marketplace.main import create_app
from marketplace.ranges import RangeCatalog
from marketplace.config import DEFAULT_FIXTURE_DIR, Settings

from factories import FillRecorder, InlineScheduler


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def catalog():
    return RangeCatalog.load(DEFAULT_FIXTURE_DIR)


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def scheduler():
    return InlineScheduler()


@pytest.fixture
def fill_recorder():
    return FillRecorder()


@pytest.fixture
def cache(redis_client, session_factory, scheduler, fill_recorder):
    return EstateIdCache(redis_client, session_factory, scheduler, on_fill=fill_recorder)


@pytest.fixture
def client(engine, redis_client, scheduler, fill_recorder):
    app = create_app(
        Settings(database_url="sqlite://"),
        engine=engine,
        redis_client=redis_client,
        scheduler=scheduler,
        on_fill=fill_recorder,
    )
    with TestClient(app) as c:
        yield c
