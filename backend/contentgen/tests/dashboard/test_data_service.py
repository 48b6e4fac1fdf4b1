import pytest

from contentgen import crud
from contentgen.data_service import OwnerScope, SqlDataService
from contentgen.errors import PersistenceError
from contentgen.models import TeamCreate, TeamMember
from contentgen.realtime import ChangeEvent


@pytest.mark.asyncio
async def test_insert_publishes_insert_events_after_commit(data_service, feed):
    events: list[ChangeEvent] = []
    feed.subscribe("website_projects", events.append, event_type="INSERT")

    rows = await data_service.insert(
        "website_projects",
        [{"name": "Snap", "template": "portfolio"}, {"name": "Crumbs", "template": "business"}],
    )

    assert [event.record_id for event in events] == [row["id"] for row in rows]
    assert all(event.user_id == data_service._user.id for event in events)


@pytest.mark.asyncio
async def test_batch_insert_is_all_or_nothing(data_service):
    with pytest.raises(PersistenceError):
        await data_service.insert("website_projects", [{"name": "Ok", "template": "saas"}, {"template": "saas"}])

    assert await data_service.select("website_projects") == []


@pytest.mark.asyncio
async def test_delete_of_someone_elses_row_is_a_no_op(data_service, engine, feed, make_user):
    events: list[ChangeEvent] = []
    feed.subscribe("generated_blogs", events.append, event_type="DELETE")
    [row] = await data_service.insert("generated_blogs", [{"title": "t", "content": "c", "topic": "t"}])
    stranger = SqlDataService(engine, feed=feed, user=make_user("stranger@example.com"))

    assert await stranger.delete("generated_blogs", row["id"]) is False
    assert events == []
    assert await data_service.delete("generated_blogs", row["id"]) is True
    assert [event.event_type for event in events] == ["DELETE"]


@pytest.mark.asyncio
async def test_brand_kit_upsert_keeps_one_row_per_user(data_service, feed):
    events: list[ChangeEvent] = []
    feed.subscribe("brand_assets", events.append)

    first = await data_service.upsert("brand_assets", {"brand_colors": ["#000000"], "heading_font": "Poppins"})
    second = await data_service.upsert("brand_assets", {"brand_colors": ["#FFFFFF"], "body_font": "Inter"})

    rows = await data_service.select("brand_assets")
    assert len(rows) == 1
    assert second["id"] == first["id"]
    assert rows[0]["brand_colors"] == ["#FFFFFF"]
    assert rows[0]["body_font"] == "Inter"
    assert [event.event_type for event in events] == ["INSERT", "UPDATE"]


@pytest.mark.asyncio
async def test_team_scope_covers_every_member(data_service, engine, feed, session, make_user, user):
    teammate = make_user("teammate@example.com")
    outsider = make_user("outsider@example.com")
    team = crud.create_team(session=session, team_in=TeamCreate(name="Marketing"), owner_id=user.id)
    session.add(TeamMember(team_id=team.id, user_id=teammate.id))
    session.commit()

    await data_service.insert("seo_analyses", [{"content": "mine"}])
    await SqlDataService(engine, feed=feed, user=teammate).insert("seo_analyses", [{"content": "teammate"}])
    await SqlDataService(engine, feed=feed, user=outsider).insert("seo_analyses", [{"content": "outsider"}])

    rows = await data_service.select("seo_analyses", scope=OwnerScope.team(team.id))
    assert sorted(row["content"] for row in rows) == ["mine", "teammate"]

    with pytest.raises(PersistenceError, match="Not a member"):
        await SqlDataService(engine, feed=feed, user=outsider).select("seo_analyses", scope=OwnerScope.team(team.id))


@pytest.mark.asyncio
async def test_unauthenticated_and_unknown_table(engine, feed):
    anonymous = SqlDataService(engine, feed=feed)

    assert await anonymous.get_user() is None
    with pytest.raises(PersistenceError) as exc_info:
        await anonymous.select("generated_blogs")
    assert exc_info.value.status_code == 401
    with pytest.raises(PersistenceError, match="Unknown table"):
        await anonymous.select("profiles")


@pytest.mark.asyncio
async def test_everyone_scope_is_admin_only(data_service):
    with pytest.raises(PersistenceError) as exc_info:
        await data_service.select("generated_blogs", scope=OwnerScope.everyone())
    assert exc_info.value.status_code == 403
