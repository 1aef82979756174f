"""JWT helpers for the endpoints that expose a user's dashboard stream."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from notification_dispatch.config import get_settings

ALGORITHM = "HS256"

settings = get_settings()


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode({"sub": str(user_id), "exp": expire}, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def user_id_from_token(token: str) -> int:
    """Return the user id carried in the ``sub`` claim of ``token``."""

    subject = decode_access_token(token).get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as exc:
        raise ValueError("Token does not identify a user") from exc


__all__ = ["create_access_token", "decode_access_token", "user_id_from_token"]
