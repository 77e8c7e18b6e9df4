from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import db.models  # noqa: F401  registers all ORM models on Base.metadata
from db.base import Base
from db.session import build_session_factory, create_db_engine


@pytest.fixture()
def engine(tmp_path) -> Iterator[Engine]:
    """File-backed SQLite so separate sessions see real transactions."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'strings.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
