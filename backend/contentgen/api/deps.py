import uuid
from collections.abc import Generator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlmodel import Session

from contentgen.core.db import engine
from contentgen.core.security import decode_access_token
from contentgen.data_service import SqlDataService
from contentgen.models import TokenPayload, User
from contentgen.realtime import ChangeFeed, get_change_feed

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def get_feed() -> ChangeFeed:
    return get_change_feed()


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]
FeedDep = Annotated[ChangeFeed, Depends(get_feed)]


def get_current_user(session: SessionDep, credentials: TokenDep) -> User:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload(**payload)
        user_id = uuid.UUID(str(token_data.sub))
    except (jwt.InvalidTokenError, ValidationError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_current_active_superuser(current_user: CurrentUser) -> User:
    if not current_user.is_superuser:
        raise HTTPException(status_code=403, detail="The user doesn't have enough privileges")
    return current_user


def get_data_service(session: SessionDep, current_user: CurrentUser, feed: FeedDep) -> SqlDataService:
    # Same engine as the request session, so overriding get_db redirects both.
    return SqlDataService(session.get_bind(), feed=feed, user=current_user)


DataServiceDep = Annotated[SqlDataService, Depends(get_data_service)]
