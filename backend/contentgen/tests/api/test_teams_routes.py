import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, patch

from contentgen.models import TeamInvitation, get_datetime_utc


def _create_team(client, owner, auth_headers, name="Marketing"):
    response = client.post("/api/v1/teams/", json={"name": name}, headers=auth_headers(owner))
    assert response.status_code == 200
    return response.json()


def _invite(client, session, team_id, owner, auth_headers, email, role="member") -> tuple[dict, str]:
    response = client.post(
        f"/api/v1/teams/{team_id}/invitations",
        json={"email": email, "role": role},
        headers=auth_headers(owner),
    )
    assert response.status_code == 200
    invitation = response.json()
    # the token only travels by email, never in the API response
    assert "token" not in invitation
    return invitation, session.get(TeamInvitation, uuid.UUID(invitation["id"])).token


def test_creator_becomes_owner(client, user, auth_headers):
    team = _create_team(client, user, auth_headers)

    members = client.get(f"/api/v1/teams/{team['id']}/members", headers=auth_headers(user)).json()

    assert [(m["user_id"], m["role"]) for m in members] == [(str(user.id), "owner")]


def test_invite_and_accept_flow(client, session, user, make_user, auth_headers):
    team = _create_team(client, user, auth_headers)
    invitee = make_user("new.member@example.com")
    invitation, token = _invite(client, session, team["id"], user, auth_headers, "New.Member@example.com", role="admin")
    assert invitation["email"] == "new.member@example.com"
    assert invitation["status"] == "pending"

    accepted = client.post("/api/v1/teams/invitations/accept", json={"token": token}, headers=auth_headers(invitee))

    assert accepted.status_code == 200
    assert accepted.json() == {"success": True, "team_id": team["id"]}
    members = client.get(f"/api/v1/teams/{team['id']}/members", headers=auth_headers(invitee)).json()
    assert sorted(m["role"] for m in members) == ["admin", "owner"]

    again = client.post("/api/v1/teams/invitations/accept", json={"token": token}, headers=auth_headers(invitee))
    assert again.status_code == 400
    assert again.json()["detail"] == "Invitation is not pending"


def test_invitation_for_another_email_is_forbidden(client, session, user, make_user, auth_headers):
    team = _create_team(client, user, auth_headers)
    _, token = _invite(client, session, team["id"], user, auth_headers, "someone@example.com")
    intruder = make_user("intruder@example.com")

    response = client.post("/api/v1/teams/invitations/accept", json={"token": token}, headers=auth_headers(intruder))

    assert response.status_code == 403


def test_expired_and_unknown_invitations(client, session, user, make_user, auth_headers):
    team = _create_team(client, user, auth_headers)
    invitee = make_user("late@example.com")
    invitation, token = _invite(client, session, team["id"], user, auth_headers, "late@example.com")
    db_invitation = session.get(TeamInvitation, uuid.UUID(invitation["id"]))
    db_invitation.expires_at = get_datetime_utc() - timedelta(minutes=1)
    session.add(db_invitation)
    session.commit()

    expired = client.post("/api/v1/teams/invitations/accept", json={"token": token}, headers=auth_headers(invitee))
    unknown = client.post("/api/v1/teams/invitations/accept", json={"token": "nope"}, headers=auth_headers(invitee))

    assert (expired.status_code, expired.json()["detail"]) == (400, "Invitation expired")
    assert unknown.status_code == 404


def test_reject_marks_invitation(client, session, user, make_user, auth_headers):
    team = _create_team(client, user, auth_headers)
    invitee = make_user("maybe@example.com")
    invitation, token = _invite(client, session, team["id"], user, auth_headers, "maybe@example.com")

    response = client.post("/api/v1/teams/invitations/reject", json={"token": token}, headers=auth_headers(invitee))

    assert response.json() == {"message": "Invitation rejected"}
    assert session.get(TeamInvitation, uuid.UUID(invitation["id"])).status == "rejected"
    assert client.get(f"/api/v1/teams/{team['id']}/members", headers=auth_headers(invitee)).status_code == 403


def test_members_cannot_invite_and_owner_cannot_be_removed(client, session, user, make_user, auth_headers):
    team = _create_team(client, user, auth_headers)
    member = make_user("plain@example.com")
    _, token = _invite(client, session, team["id"], user, auth_headers, "plain@example.com")
    client.post("/api/v1/teams/invitations/accept", json={"token": token}, headers=auth_headers(member))

    invite = client.post(
        f"/api/v1/teams/{team['id']}/invitations", json={"email": "x@example.com"}, headers=auth_headers(member)
    )
    remove_owner = client.delete(f"/api/v1/teams/{team['id']}/members/{user.id}", headers=auth_headers(member))
    leave = client.delete(f"/api/v1/teams/{team['id']}/members/{member.id}", headers=auth_headers(member))

    assert invite.status_code == 403
    assert remove_owner.status_code == 403
    assert leave.json() == {"message": "Member removed"}


def test_invitation_email_is_sent_when_configured(client, session, user, auth_headers):
    team = _create_team(client, user, auth_headers, name="Sales")
    sender = AsyncMock(return_value=True)

    with patch("contentgen.api.routes.teams.send_invitation_email", sender):
        _invite(client, session, team["id"], user, auth_headers, "rep@example.com")

    kwargs = sender.await_args.kwargs
    assert kwargs["email"] == "rep@example.com"
    assert kwargs["team_name"] == "Sales"
    assert kwargs["role"] == "member"
