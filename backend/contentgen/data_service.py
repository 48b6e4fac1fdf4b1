import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel

from contentgen import crud
from contentgen.errors import PersistenceError
from contentgen.models import (
    BrandAsset,
    EcommerceProduct,
    GeneratedBlog,
    SeoAnalysis,
    SocialMediaPost,
    User,
    WebsiteAudit,
    WebsiteProject,
)
from contentgen.realtime import ANY_EVENT, ChangeCallback, ChangeEvent, ChangeFeed, Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Owner-scoped tables reachable through the data service, keyed by change-feed name.
TABLES: dict[str, type[SQLModel]] = {
    model.__tablename__: model
    for model in (
        GeneratedBlog,
        SocialMediaPost,
        EcommerceProduct,
        SeoAnalysis,
        WebsiteProject,
        WebsiteAudit,
        BrandAsset,
    )
}

NOT_AUTHENTICATED = "Not authenticated"


@dataclass(frozen=True)
class OwnerScope:
    """Whose rows a read covers: one user, the members of a team, or every user (admin only)."""

    user_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    all_users: bool = False

    @classmethod
    def team(cls, team_id: uuid.UUID) -> "OwnerScope":
        return cls(team_id=team_id)

    @classmethod
    def everyone(cls) -> "OwnerScope":
        return cls(all_users=True)


class BackendDataService(ABC):
    """Tables with row-level ownership, the session user, and the change feed."""

    @abstractmethod
    async def get_user(self) -> User | None:
        pass

    @abstractmethod
    async def select(
        self, table: str, *, scope: OwnerScope | None = None, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Rows newest first. scope=None means the session user's own rows."""
        pass

    @abstractmethod
    async def insert(self, table: str, rows: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def delete(self, table: str, record_id: uuid.UUID) -> bool:
        pass

    @abstractmethod
    async def upsert(
        self, table: str, row: dict[str, Any], *, on_conflict: Sequence[str] = ("user_id",)
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def list_users(self, user_ids: Sequence[uuid.UUID] | None = None) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def subscribe(self, table: str, callback: ChangeCallback, *, event_type: str = ANY_EVENT) -> Subscription:
        pass


class SqlDataService(BackendDataService):
    """
    BackendDataService over SQLModel.

    Blocking database work runs in a worker thread with a fresh Session per
    call; change events are published on the caller's thread after commit.
    """

    def __init__(self, engine: Engine, *, feed: ChangeFeed, user: User | None = None):
        self.engine = engine
        self.feed = feed
        self._user = user

    def sign_in(self, user: User) -> None:
        self._user = user

    def sign_out(self) -> None:
        self._user = None

    async def _run(self, fn: Callable[[Session], T]) -> T:
        def work() -> T:
            with Session(self.engine) as session:
                return fn(session)

        try:
            return await asyncio.to_thread(work)
        except SQLAlchemyError as exc:
            logger.error("Data service operation failed: %s", exc)
            raise PersistenceError(str(exc.__cause__ or exc)) from exc
        except ValidationError as exc:
            raise PersistenceError(f"Invalid row: {exc.errors()[0]['msg']}", status_code=400) from exc

    @staticmethod
    def _model(table: str) -> type[SQLModel]:
        model = TABLES.get(table)
        if model is None:
            raise PersistenceError(f"Unknown table: {table}", status_code=404)
        return model

    def _require_user(self) -> User:
        if self._user is None:
            raise PersistenceError(NOT_AUTHENTICATED, status_code=401)
        return self._user

    def _owner_ids(self, session: Session, scope: OwnerScope | None) -> list[uuid.UUID] | None:
        user = self._require_user()
        if scope is None or (scope.user_id is not None and scope.user_id == user.id):
            return [user.id]
        if scope.all_users:
            if not user.is_superuser:
                raise PersistenceError("Not enough permissions", status_code=403)
            return None
        if scope.team_id is not None:
            if crud.get_team_membership(session=session, team_id=scope.team_id, user_id=user.id) is None:
                raise PersistenceError("Not a member of this team", status_code=403)
            return crud.list_team_member_ids(session=session, team_id=scope.team_id)
        # Another user's rows are never visible.
        return []

    def _publish(self, table: str, event_type: str, rows: Sequence[dict[str, Any]]) -> None:
        for row in rows:
            self.feed.publish(
                ChangeEvent(table=table, event_type=event_type, record_id=row.get("id"), user_id=row.get("user_id"))
            )

    async def get_user(self) -> User | None:
        return self._user

    async def select(
        self, table: str, *, scope: OwnerScope | None = None, limit: int | None = None
    ) -> list[dict[str, Any]]:
        model = self._model(table)

        def work(session: Session) -> list[dict[str, Any]]:
            owner_ids = self._owner_ids(session, scope)
            rows = crud.list_content(session=session, model=model, owner_ids=owner_ids, limit=limit)
            return [row.model_dump() for row in rows]

        return await self._run(work)

    async def insert(self, table: str, rows: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        model = self._model(table)
        user = self._require_user()

        def work(session: Session) -> list[dict[str, Any]]:
            created = crud.create_contents(session=session, model=model, contents_in=list(rows), owner_id=user.id)
            return [row.model_dump() for row in created]

        inserted = await self._run(work)
        logger.info("Inserted %s row(s) into %s for %s", len(inserted), table, user.id)
        self._publish(table, "INSERT", inserted)
        return inserted

    async def delete(self, table: str, record_id: uuid.UUID) -> bool:
        model = self._model(table)
        user = self._require_user()

        def work(session: Session) -> dict[str, Any] | None:
            deleted = crud.delete_content(session=session, model=model, record_id=record_id, owner_id=user.id)
            return deleted.model_dump() if deleted else None

        deleted = await self._run(work)
        if deleted is None:
            logger.info("Delete of %s/%s matched no row owned by %s", table, record_id, user.id)
            return False
        self._publish(table, "DELETE", [deleted])
        return True

    async def upsert(
        self, table: str, row: dict[str, Any], *, on_conflict: Sequence[str] = ("user_id",)
    ) -> dict[str, Any]:
        model = self._model(table)
        user = self._require_user()

        def work(session: Session) -> tuple[dict[str, Any], bool]:
            db_obj, created = crud.upsert_content(
                session=session, model=model, content_in=row, owner_id=user.id, conflict_keys=on_conflict
            )
            return db_obj.model_dump(), created

        saved, created = await self._run(work)
        self._publish(table, "INSERT" if created else "UPDATE", [saved])
        return saved

    async def list_users(self, user_ids: Sequence[uuid.UUID] | None = None) -> list[dict[str, Any]]:
        self._require_user()

        def work(session: Session) -> list[dict[str, Any]]:
            return [user.model_dump() for user in crud.list_users(session=session, user_ids=user_ids)]

        return await self._run(work)

    def subscribe(self, table: str, callback: ChangeCallback, *, event_type: str = ANY_EVENT) -> Subscription:
        return self.feed.subscribe(table, callback, event_type=event_type)
