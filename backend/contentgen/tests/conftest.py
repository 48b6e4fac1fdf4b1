import uuid
from collections.abc import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from contentgen import crud
from contentgen.core.db import init_db
from contentgen.data_service import SqlDataService
from contentgen.models import User, UserCreate
from contentgen.realtime import ChangeFeed


@pytest.fixture
def engine():
    # One shared in-memory connection, usable from the data service's worker threads.
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_user(session):
    def _make_user(email: str | None = None, *, is_superuser: bool = False) -> User:
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        return crud.create_user(
            session=session,
            user_create=UserCreate(email=email, full_name=email.split("@")[0], is_superuser=is_superuser),
        )

    return _make_user


@pytest.fixture
def user(make_user) -> User:
    return make_user("writer@example.com")


@pytest.fixture
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture
def data_service(engine, feed, user) -> SqlDataService:
    return SqlDataService(engine, feed=feed, user=user)
