import secrets
import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from sqlmodel import Session, SQLModel, col, func, select

from contentgen.core.config import settings
from contentgen.models import (
    InvitationStatus,
    Team,
    TeamCreate,
    TeamInvitation,
    TeamInvitationCreate,
    TeamMember,
    TeamRole,
    User,
    UserCreate,
    get_datetime_utc,
)

RecordT = TypeVar("RecordT", bound=SQLModel)


def create_user(*, session: Session, user_create: UserCreate) -> User:
    db_obj = User.model_validate(user_create)
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def get_user_by_email(*, session: Session, email: str) -> User | None:
    statement = select(User).where(User.email == email)
    return session.exec(statement).first()


# Generated content. Every table carries id, user_id and created_at.

def create_contents(
    *,
    session: Session,
    model: type[RecordT],
    contents_in: Sequence[SQLModel | dict[str, Any]],
    owner_id: uuid.UUID,
) -> list[RecordT]:
    """Insert all rows in one transaction."""
    db_objs = [model.model_validate(content_in, update={"user_id": owner_id}) for content_in in contents_in]
    session.add_all(db_objs)
    session.commit()
    for db_obj in db_objs:
        session.refresh(db_obj)
    return db_objs


def create_content(
    *, session: Session, model: type[RecordT], content_in: SQLModel | dict[str, Any], owner_id: uuid.UUID
) -> RecordT:
    return create_contents(session=session, model=model, contents_in=[content_in], owner_id=owner_id)[0]


def list_content(
    *,
    session: Session,
    model: type[RecordT],
    owner_ids: Sequence[uuid.UUID] | None,
    limit: int | None = None,
) -> list[RecordT]:
    """Newest first; equal timestamps fall back to id descending. owner_ids=None lists every owner."""
    statement = select(model)
    if owner_ids is not None:
        statement = statement.where(col(model.user_id).in_(list(owner_ids)))
    statement = statement.order_by(col(model.created_at).desc(), col(model.id).desc())
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def delete_content(
    *, session: Session, model: type[RecordT], record_id: uuid.UUID, owner_id: uuid.UUID
) -> RecordT | None:
    db_obj = session.get(model, record_id)
    # Rows owned by someone else are invisible, same as a missing row.
    if not db_obj or db_obj.user_id != owner_id:
        return None
    session.delete(db_obj)
    session.commit()
    return db_obj


def upsert_content(
    *,
    session: Session,
    model: type[RecordT],
    content_in: dict[str, Any],
    owner_id: uuid.UUID,
    conflict_keys: Sequence[str] = ("user_id",),
) -> tuple[RecordT, bool]:
    """Insert, or overwrite the row matching `conflict_keys` wholesale. Returns (row, created)."""
    values = {**content_in, "user_id": owner_id}
    statement = select(model)
    for key in conflict_keys:
        statement = statement.where(getattr(model, key) == values.get(key))
    db_obj = session.exec(statement).first()

    created = db_obj is None
    if created:
        db_obj = model.model_validate(values)
    else:
        db_obj.sqlmodel_update({k: v for k, v in values.items() if k not in ("id", "created_at")})
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj, created


def list_users(*, session: Session, user_ids: Sequence[uuid.UUID] | None = None) -> list[User]:
    statement = select(User)
    if user_ids is not None:
        statement = statement.where(col(User.id).in_(list(user_ids)))
    return list(session.exec(statement).all())


def count_rows(*, session: Session, model: type[SQLModel], since: datetime | None = None) -> int:
    statement = select(func.count()).select_from(model)
    if since is not None:
        statement = statement.where(col(model.created_at) >= since)
    return session.exec(statement).one()


# Teams

class InvitationError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def create_team(*, session: Session, team_in: TeamCreate, owner_id: uuid.UUID) -> Team:
    db_team = Team.model_validate(team_in, update={"created_by": owner_id})
    session.add(db_team)
    session.flush()
    session.add(TeamMember(team_id=db_team.id, user_id=owner_id, role=TeamRole.owner))
    session.commit()
    session.refresh(db_team)
    return db_team


def get_team_membership(*, session: Session, team_id: uuid.UUID, user_id: uuid.UUID) -> TeamMember | None:
    statement = select(TeamMember).where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
    return session.exec(statement).first()


def list_team_members(*, session: Session, team_id: uuid.UUID) -> list[TeamMember]:
    statement = select(TeamMember).where(TeamMember.team_id == team_id).order_by(col(TeamMember.created_at))
    return list(session.exec(statement).all())


def list_team_member_ids(*, session: Session, team_id: uuid.UUID) -> list[uuid.UUID]:
    return [member.user_id for member in list_team_members(session=session, team_id=team_id)]


def create_team_invitation(
    *, session: Session, team_id: uuid.UUID, invitation_in: TeamInvitationCreate, invited_by: uuid.UUID
) -> TeamInvitation:
    db_invitation = TeamInvitation(
        team_id=team_id,
        email=str(invitation_in.email).lower(),
        role=invitation_in.role,
        token=secrets.token_urlsafe(32),
        invited_by=invited_by,
        expires_at=get_datetime_utc() + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
    )
    session.add(db_invitation)
    session.commit()
    session.refresh(db_invitation)
    return db_invitation


def get_invitation_by_token(*, session: Session, token: str) -> TeamInvitation | None:
    statement = select(TeamInvitation).where(TeamInvitation.token == token)
    return session.exec(statement).first()


def _pending_invitation_for(*, session: Session, token: str, user: User) -> TeamInvitation:
    invitation = get_invitation_by_token(session=session, token=token)
    if invitation is None:
        raise InvitationError(404, "Invitation not found")
    if invitation.status != InvitationStatus.pending:
        raise InvitationError(400, "Invitation is not pending")
    expires_at = invitation.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= get_datetime_utc():
        raise InvitationError(400, "Invitation expired")
    if str(user.email).lower() != invitation.email.lower():
        raise InvitationError(403, "This invitation is not for your account")
    return invitation


def accept_team_invitation(*, session: Session, token: str, user: User) -> TeamInvitation:
    invitation = _pending_invitation_for(session=session, token=token, user=user)

    # Membership is upserted so a repeated accept never duplicates the row.
    membership = get_team_membership(session=session, team_id=invitation.team_id, user_id=user.id)
    if membership is None:
        membership = TeamMember(team_id=invitation.team_id, user_id=user.id, role=invitation.role)
    else:
        membership.role = invitation.role
    session.add(membership)
    invitation.status = InvitationStatus.accepted
    session.add(invitation)
    session.commit()
    session.refresh(invitation)
    return invitation


def reject_team_invitation(*, session: Session, token: str, user: User) -> TeamInvitation:
    invitation = _pending_invitation_for(session=session, token=token, user=user)
    invitation.status = InvitationStatus.rejected
    session.add(invitation)
    session.commit()
    session.refresh(invitation)
    return invitation


def remove_team_member(*, session: Session, team_id: uuid.UUID, user_id: uuid.UUID) -> TeamMember | None:
    membership = get_team_membership(session=session, team_id=team_id, user_id=user_id)
    if membership:
        session.delete(membership)
        session.commit()
    return membership
