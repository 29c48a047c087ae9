"""Bearer token helpers."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from tourhub.config import get_settings

ALGORITHM = "HS256"


def create_access_token(
    user_id: str, role: str, expires_delta: timedelta | None = None
) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode(
        {"sub": user_id, "role": role, "exp": expire},
        settings.secret_key,
        algorithm=ALGORITHM,
    )


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc
