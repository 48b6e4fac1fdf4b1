import asyncio
import logging
from collections.abc import AsyncIterator, Sequence

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from contentgen.api.deps import CurrentUser, FeedDep
from contentgen.core.config import settings
from contentgen.data_service import TABLES
from contentgen.models import User
from contentgen.realtime import ANY_EVENT, EVENT_TYPES, ChangeEvent, ChangeFeed

router = APIRouter(prefix="/realtime", tags=["realtime"])
logger = logging.getLogger(__name__)


async def change_stream(
    feed: ChangeFeed,
    tables: Sequence[str],
    user: User,
    *,
    event_type: str = ANY_EVENT,
    queue_size: int | None = None,
) -> AsyncIterator[dict]:
    """
    SSE events for changes on `tables` that the user may see.

    Subscriptions live exactly as long as the stream: they are opened on the
    first iteration and closed when the client disconnects. Events that
    arrive while `queue_size` are already waiting for a slow client are dropped.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(
        maxsize=settings.REALTIME_STREAM_QUEUE_SIZE if queue_size is None else queue_size
    )

    def enqueue(event: ChangeEvent) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Change stream for %s is full, dropping %s on %s", user.id, event.event_type, event.table)

    def on_change(event: ChangeEvent) -> None:
        if user.is_superuser or event.user_id == user.id:
            loop.call_soon_threadsafe(enqueue, event)

    subscriptions = [feed.subscribe(table, on_change, event_type=event_type) for table in tables]
    logger.info("User %s streaming changes on %s", user.id, ", ".join(tables))
    try:
        while True:
            event = await queue.get()
            yield {"event": event.event_type, "data": event.to_public().model_dump_json()}
    finally:
        for subscription in subscriptions:
            subscription.close()
        logger.info("Change stream for %s closed", user.id)


@router.get("/")
async def stream_changes(tables: str, current_user: CurrentUser, feed: FeedDep, event_type: str = ANY_EVENT):
    names = list(dict.fromkeys(name.strip() for name in tables.split(",") if name.strip()))
    if not names:
        raise HTTPException(status_code=400, detail="At least one table is required")
    unknown = [name for name in names if name not in TABLES]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown table: {unknown[0]}")
    event_type = event_type.upper()
    if event_type != ANY_EVENT and event_type not in EVENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported change event type: {event_type}")

    return EventSourceResponse(change_stream(feed, names, current_user, event_type=event_type))
