"""FastAPI dependency utilities."""

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from tourhub.application.use_cases import ActivityLogger, NotificationEmitter
from tourhub.domain.entities import CurrentUser
from tourhub.infrastructure.security import decode_access_token
from tourhub.infrastructure.stores import SqlNotificationStore
from tourhub.services import Services

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str | None) -> CurrentUser:
    """Resolve the authenticated user for the provided token."""

    if not token:
        raise _credentials_error()
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _credentials_error() from exc

    user_id = payload.get("sub")
    role = payload.get("role")
    if not isinstance(user_id, str) or not user_id or not isinstance(role, str):
        raise _credentials_error()
    return CurrentUser(id=user_id, role=role)


def get_current_user(token: str | None = Depends(oauth2_scheme)) -> CurrentUser:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token)


def require_role(*roles: str) -> Callable[[CurrentUser], CurrentUser]:
    """Build a dependency that only admits users holding one of ``roles``."""

    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not any(current_user.has_role(role) for role in roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized",
            )
        return current_user

    return dependency


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_activity_logger(services: Services = Depends(get_services)) -> ActivityLogger:
    return services.activity_logger


def get_notification_emitter(
    services: Services = Depends(get_services),
) -> NotificationEmitter:
    return services.notification_emitter


def get_notification_store(
    services: Services = Depends(get_services),
) -> SqlNotificationStore:
    return services.notification_store
