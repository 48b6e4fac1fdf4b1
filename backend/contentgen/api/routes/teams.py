import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException

from contentgen import crud
from contentgen.api.deps import CurrentUser, SessionDep
from contentgen.mailer import EmailError, send_invitation_email
from contentgen.models import (
    InvitationAccepted,
    InvitationDecision,
    Message,
    Team,
    TeamCreate,
    TeamInvitationCreate,
    TeamInvitationPublic,
    TeamMember,
    TeamMemberPublic,
    TeamPublic,
    TeamRole,
)

router = APIRouter(prefix="/teams", tags=["teams"])
logger = logging.getLogger(__name__)

MANAGER_ROLES = (TeamRole.owner, TeamRole.admin)


def _membership_or_403(session: SessionDep, team_id: uuid.UUID, user_id: uuid.UUID) -> TeamMember:
    if session.get(Team, team_id) is None:
        raise HTTPException(status_code=404, detail="Team not found")
    membership = crud.get_team_membership(session=session, team_id=team_id, user_id=user_id)
    if membership is None:
        raise HTTPException(status_code=403, detail="Not a member of this team")
    return membership


@router.post("/", response_model=TeamPublic)
def create_team(*, session: SessionDep, current_user: CurrentUser, team_in: TeamCreate) -> Any:
    team = crud.create_team(session=session, team_in=team_in, owner_id=current_user.id)
    logger.info("Team %s created by %s", team.id, current_user.id)
    return team


@router.get("/{team_id}/members", response_model=list[TeamMemberPublic])
def read_team_members(team_id: uuid.UUID, session: SessionDep, current_user: CurrentUser) -> Any:
    _membership_or_403(session, team_id, current_user.id)
    return crud.list_team_members(session=session, team_id=team_id)


@router.post("/{team_id}/invitations", response_model=TeamInvitationPublic)
async def invite_team_member(
    team_id: uuid.UUID,
    invitation_in: TeamInvitationCreate,
    session: SessionDep,
    current_user: CurrentUser,
) -> Any:
    membership = _membership_or_403(session, team_id, current_user.id)
    if membership.role not in MANAGER_ROLES:
        raise HTTPException(status_code=403, detail="Only team owners and admins can invite members")
    if invitation_in.role == TeamRole.owner:
        raise HTTPException(status_code=400, detail="Invitations cannot grant the owner role")

    invitation = crud.create_team_invitation(
        session=session, team_id=team_id, invitation_in=invitation_in, invited_by=current_user.id
    )
    team = session.get(Team, team_id)
    try:
        await send_invitation_email(
            email=invitation.email,
            team_name=team.name,
            inviter_name=current_user.full_name or str(current_user.email),
            role=invitation.role.value,
            token=invitation.token,
        )
    except EmailError as exc:
        # The invitation stays valid; the link can be shared by other means.
        logger.error("Invitation %s created but email failed: %s", invitation.id, exc)
    return invitation


@router.post("/invitations/accept", response_model=InvitationAccepted)
def accept_invitation(decision: InvitationDecision, session: SessionDep, current_user: CurrentUser) -> Any:
    try:
        invitation = crud.accept_team_invitation(session=session, token=decision.token, user=current_user)
    except crud.InvitationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    logger.info("User %s joined team %s", current_user.id, invitation.team_id)
    return InvitationAccepted(team_id=invitation.team_id)


@router.post("/invitations/reject", response_model=Message)
def reject_invitation(decision: InvitationDecision, session: SessionDep, current_user: CurrentUser) -> Message:
    try:
        crud.reject_team_invitation(session=session, token=decision.token, user=current_user)
    except crud.InvitationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return Message(message="Invitation rejected")


@router.delete("/{team_id}/members/{user_id}", response_model=Message)
def remove_member(team_id: uuid.UUID, user_id: uuid.UUID, session: SessionDep, current_user: CurrentUser) -> Message:
    membership = _membership_or_403(session, team_id, current_user.id)
    if user_id != current_user.id and membership.role not in MANAGER_ROLES:
        raise HTTPException(status_code=403, detail="Not enough permissions")

    target = crud.get_team_membership(session=session, team_id=team_id, user_id=user_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Member not found")
    if target.role == TeamRole.owner:
        raise HTTPException(status_code=400, detail="The team owner cannot be removed")
    crud.remove_team_member(session=session, team_id=team_id, user_id=user_id)
    return Message(message="Member removed")
