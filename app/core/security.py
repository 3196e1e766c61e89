"""Bearer-token authentication and role guards."""

import logging
from dataclasses import dataclass

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ForbiddenError
from app.core.storage import get_session_factory
from app.models.enums import UserRole
from app.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller resolved from the access token."""

    id: int
    role: UserRole
    email: str
    full_name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def decode_access_token(token: str) -> int:
    """Verify ``token`` and return the user id it was issued for."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired.")
    except JWTError:
        raise AuthenticationError("Invalid token.")

    user_id = payload.get("userId") or payload.get("sub")
    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise AuthenticationError("Token verification failed.")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    token: str | None = Cookie(None),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> CurrentUser:
    """Resolve the caller from the Authorization header or the token cookie."""
    raw_token = credentials.credentials if credentials else token
    if not raw_token:
        raise AuthenticationError("Access denied. No token provided.")

    user_id = decode_access_token(raw_token)

    async with session_factory() as session:
        user = await session.get(User, user_id)

    if user is None:
        raise AuthenticationError("Token is valid but user no longer exists.")
    if not user.is_active:
        raise ForbiddenError("Account is deactivated.")

    return CurrentUser(
        id=user.id, role=user.role, email=user.email, full_name=user.full_name
    )


def require_roles(*roles: UserRole):
    """Build a dependency that only admits callers with one of ``roles``."""

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            logger.info(f"User {user.id} with role {user.role.value} denied access")
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return user

    return dependency


require_job_seeker = require_roles(UserRole.JOBSEEKER)
require_employer = require_roles(UserRole.EMPLOYER)
require_admin = require_roles(UserRole.ADMIN)
require_employer_or_admin = require_roles(UserRole.EMPLOYER, UserRole.ADMIN)
