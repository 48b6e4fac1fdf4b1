import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from contentgen.core.config import settings
from contentgen.dashboard.controller import GenerationController
from contentgen.dashboard.domains import ContentDomain, get_domain
from contentgen.dashboard.sync import RealtimeSync
from contentgen.data_service import BackendDataService, OwnerScope
from contentgen.errors import PersistenceError
from contentgen.models import EcommerceProduct, GeneratedBlog, SeoAnalysis, SocialMediaPost

logger = logging.getLogger(__name__)


def _timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        return datetime.min.replace(tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def newest_first(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """created_at descending, equal timestamps broken by id descending."""
    return sorted(rows, key=lambda row: (_timestamp(row.get("created_at")), str(row.get("id"))), reverse=True)


class HistoryView:
    """Newest-first list of one domain's saved rows for an owner scope."""

    def __init__(
        self,
        data: BackendDataService,
        domain: ContentDomain | str,
        *,
        scope: OwnerScope | None = None,
        limit: int | None = None,
    ):
        self.data = data
        self.domain = get_domain(domain) if isinstance(domain, str) else domain
        self.scope = scope
        self.limit = settings.HISTORY_LIMIT if limit is None else limit
        self.items: list[dict[str, Any]] = []
        self.selected: dict[str, Any] | None = None
        self.error: PersistenceError | None = None
        self.loading = False

    async def refresh(self) -> list[dict[str, Any]]:
        """Re-query the whole list; on failure the previous snapshot stays visible."""
        self.loading = True
        try:
            items = await self.list()
        except PersistenceError as exc:
            self.error = exc
            logger.warning("Could not load %s history: %s", self.domain.name, exc.message)
            return self.items
        finally:
            self.loading = False

        self.items = items
        self.error = None
        if self.selected is not None and self._find(self.selected["id"]) is None:
            self.selected = None
        return self.items

    def _find(self, record_id: uuid.UUID) -> dict[str, Any] | None:
        for item in self.items:
            if item["id"] == record_id:
                return item
        return None

    def view(self, record_id: uuid.UUID) -> dict[str, Any]:
        item = self._find(record_id)
        if item is None:
            raise KeyError(record_id)
        self.selected = item
        return item

    def close_detail(self) -> None:
        self.selected = None

    def titles(self) -> list[str]:
        return [self.domain.describe(item) for item in self.items]

    async def delete(self, record_id: uuid.UUID) -> bool:
        try:
            deleted = await self.data.delete(self.domain.table, record_id)
        except PersistenceError as exc:
            self.error = exc
            raise
        if self.selected is not None and self.selected["id"] == record_id:
            self.selected = None
        await self.refresh()
        return deleted

    def bind(self, controller: GenerationController):
        """Refresh whenever the controller saves or deletes; returns the unbind callable."""
        return controller.add_refresh_listener(self.refresh)

    def realtime(self, *, debounce: float | None = None) -> RealtimeSync:
        return RealtimeSync(self.data, [self.domain.table], self.refresh, debounce=debounce)

    # Keep last: shadows the builtin `list` for annotations in this class body.
    async def list(self, scope: OwnerScope | None = None):
        rows = await self.data.select(self.domain.table, scope=scope or self.scope, limit=self.limit)
        return newest_first(rows)[: self.limit]


@dataclass(frozen=True)
class ActivitySource:
    table: str
    kind: str
    title: str
    describe_field: str


ACTIVITY_SOURCES = (
    ActivitySource(GeneratedBlog.__tablename__, "blog", "New Blog Created", "title"),
    ActivitySource(SocialMediaPost.__tablename__, "social", "Social Post Created", "platform"),
    ActivitySource(EcommerceProduct.__tablename__, "product", "Product Listing Created", "product_name"),
    ActivitySource(SeoAnalysis.__tablename__, "seo", "SEO Analysis Completed", "target_keywords"),
)

# Tables whose inserts refresh the activity feed.
ACTIVITY_REALTIME_TABLES = (
    GeneratedBlog.__tablename__,
    SocialMediaPost.__tablename__,
    EcommerceProduct.__tablename__,
)


@dataclass
class ActivityItem:
    id: str
    record_id: uuid.UUID
    type: str
    title: str
    description: str
    user_email: str
    created_at: datetime


class ActivityLog:
    """Admin feed: the latest rows of several tables across every user, merged."""

    def __init__(self, data: BackendDataService, *, per_table_limit: int = 20, limit: int | None = None):
        self.data = data
        self.per_table_limit = per_table_limit
        self.limit = settings.ACTIVITY_LOG_LIMIT if limit is None else limit
        self.items: list[ActivityItem] = []
        self.error: PersistenceError | None = None

    async def _fetch(self) -> list[ActivityItem]:
        users, *per_table = await asyncio.gather(
            self.data.list_users(),
            *(
                self.data.select(source.table, scope=OwnerScope.everyone(), limit=self.per_table_limit)
                for source in ACTIVITY_SOURCES
            ),
        )
        emails = {user["id"]: user["email"] for user in users}

        items = []
        for source, rows in zip(ACTIVITY_SOURCES, per_table):
            for row in rows:
                description = row.get(source.describe_field)
                if source.kind == "social" and description:
                    description = f"{description.capitalize()} post: {row.get('topic', '')}"
                items.append(
                    ActivityItem(
                        id=f"{source.kind}-{row['id']}",
                        record_id=row["id"],
                        type=source.kind,
                        title=source.title,
                        description=description or "Content analysis",
                        user_email=emails.get(row["user_id"], "Unknown"),
                        created_at=_timestamp(row["created_at"]),
                    )
                )
        items.sort(key=lambda item: (item.created_at, str(item.record_id)), reverse=True)
        return items[: self.limit]

    async def refresh(self) -> list[ActivityItem]:
        try:
            self.items = await self._fetch()
        except PersistenceError as exc:
            self.error = exc
            logger.warning("Could not load activity log: %s", exc.message)
            return self.items
        self.error = None
        return self.items

    def realtime(self, *, debounce: float | None = None) -> RealtimeSync:
        return RealtimeSync(
            self.data, ACTIVITY_REALTIME_TABLES, self.refresh, event_type="INSERT", debounce=debounce
        )
