import asyncio
import json
import uuid

import pytest

from contentgen.api.routes.realtime import change_stream
from contentgen.realtime import ChangeEvent


@pytest.mark.asyncio
async def test_change_stream_yields_own_events_and_releases_subscriptions(feed, user, make_user):
    stranger = make_user("stranger@example.com")
    stream = change_stream(feed, ["generated_blogs", "social_media_posts"], user)

    pending = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    assert feed.active_subscriptions == 2

    feed.publish(ChangeEvent(table="generated_blogs", event_type="INSERT", user_id=stranger.id))
    feed.publish(ChangeEvent(table="social_media_posts", event_type="DELETE", user_id=user.id))
    message = await asyncio.wait_for(pending, timeout=1)

    assert message["event"] == "DELETE"
    payload = json.loads(message["data"])
    assert payload["table"] == "social_media_posts"
    assert payload["user_id"] == str(user.id)

    await stream.aclose()
    assert feed.active_subscriptions == 0


@pytest.mark.asyncio
async def test_admins_see_every_users_events(feed, make_user):
    admin = make_user("admin@example.com", is_superuser=True)
    stream = change_stream(feed, ["generated_blogs"], admin, event_type="INSERT")

    pending = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    feed.publish(ChangeEvent(table="generated_blogs", event_type="INSERT"))
    message = await asyncio.wait_for(pending, timeout=1)
    await stream.aclose()

    assert message["event"] == "INSERT"


def test_stream_rejects_unknown_tables_and_event_types(client, user, auth_headers):
    headers = auth_headers(user)

    unknown = client.get("/api/v1/realtime/?tables=profiles", headers=headers)
    bad_event = client.get("/api/v1/realtime/?tables=generated_blogs&event_type=TRUNCATE", headers=headers)

    assert (unknown.status_code, unknown.json()["detail"]) == (400, "Unknown table: profiles")
    assert bad_event.status_code == 400


@pytest.mark.asyncio
async def test_slow_client_drops_events_beyond_the_queue_size(feed, user):
    ids = [uuid.uuid4() for _ in range(5)]
    stream = change_stream(feed, ["generated_blogs"], user, queue_size=2)

    pending = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    for record_id in ids[:4]:
        feed.publish(ChangeEvent(table="generated_blogs", event_type="INSERT", record_id=record_id, user_id=user.id))
    first = await asyncio.wait_for(pending, timeout=1)
    second = await asyncio.wait_for(stream.__anext__(), timeout=1)

    feed.publish(ChangeEvent(table="generated_blogs", event_type="INSERT", record_id=ids[4], user_id=user.id))
    third = await asyncio.wait_for(stream.__anext__(), timeout=1)
    await stream.aclose()

    received = [json.loads(message["data"])["record_id"] for message in (first, second, third)]
    assert received == [str(ids[0]), str(ids[1]), str(ids[4])]
