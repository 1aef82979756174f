"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from notification_dispatch.application.use_cases.messages import BatchDispatcher, StreamPublisher
from notification_dispatch.domain.entities import User
from notification_dispatch.infrastructure.database import get_db
from notification_dispatch.infrastructure.delivery import message_dispatcher
from notification_dispatch.infrastructure.notifications import stream_item_publisher
from notification_dispatch.infrastructure.repositories import UserRepository
from notification_dispatch.infrastructure.security import user_id_from_token

bearer_scheme = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str, db: Session) -> User:
    """Resolve the user identified by ``token``."""

    try:
        user_id = user_id_from_token(token)
    except ValueError as exc:
        raise _unauthorized("Invalid credentials") from exc

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the bearer token."""

    return resolve_current_user(credentials.credentials, db)


def get_message_dispatcher() -> BatchDispatcher:
    """Return the dispatcher that delivers staged messages."""

    return message_dispatcher


def get_stream_publisher() -> StreamPublisher:
    """Return the publisher pushing stream items to websocket subscribers."""

    return stream_item_publisher


__all__ = [
    "bearer_scheme",
    "get_current_user",
    "get_message_dispatcher",
    "get_stream_publisher",
    "resolve_current_user",
]
