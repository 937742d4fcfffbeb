import os

# Must be set before any mindmesh settings are read.
os.environ["FF_USE_AUTH"] = "false"
os.environ["GROQ_API_KEY"] = "test-groq-key"
os.environ["FF_LLM_PROVIDER"] = "groq"
os.environ["DATABASE_URL"] = ""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from mindmesh.core import dependencies
from mindmesh.core.config import get_settings
from mindmesh.core.database import Base
from mindmesh.core.flags import get_flags
from mindmesh.models import Event, Memory, Resume  # noqa: F401
from mindmesh.services import llm


def _create_tables(db_path: Path) -> None:
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    get_settings.cache_clear()
    get_flags.cache_clear()
    monkeypatch.setattr(llm, "BASE_DELAY", 0.0)
    yield
    get_settings.cache_clear()
    get_flags.cache_clear()
    llm._client = None


@pytest.fixture
def session_factory(tmp_path):
    db_path = tmp_path / "mindmesh-test.db"
    _create_tables(db_path)
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory):
    from mindmesh.factory import create_app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application = create_app()
    application.dependency_overrides[dependencies.get_db] = _override_get_db
    application.dependency_overrides[dependencies.get_optional_db] = _override_get_db
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_llm(monkeypatch):
    """
    Replace llm.complete with canned replies, consumed in order.
    The calls are recorded on `.calls` as (messages, task) pairs.
    """

    class FakeLLM:
        def __init__(self):
            self.replies = []
            self.calls = []

        async def complete(self, messages, task="chat", temperature=None, max_tokens=None):
            self.calls.append((messages, task))
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply

    fake = FakeLLM()
    monkeypatch.setattr(llm, "complete", fake.complete)
    return fake
