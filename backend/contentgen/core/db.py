from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from contentgen.core.config import settings


def _engine_connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine: Engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    connect_args=_engine_connect_args(settings.SQLALCHEMY_DATABASE_URI),
)


def init_db(bind: Engine | None = None) -> None:
    # Tables are registered on SQLModel.metadata when the models module is imported.
    from contentgen import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
