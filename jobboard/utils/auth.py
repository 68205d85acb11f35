import logging
from typing import Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jobboard.database import to_object_id
from jobboard.errors import (
    AccountNotApproved,
    EmailNotVerified,
    InsufficientRole,
    Unauthenticated,
)
from jobboard.models.user import Role, UserStatus
from jobboard.utils.security import TokenService

logger = logging.getLogger(__name__)

SESSION_COOKIE = "token"

# Header is optional: the cookie may carry the token instead
security = HTTPBearer(auto_error=False)


async def authenticate(token: Optional[str], users, tokens: TokenService) -> dict:
    """
    Resolve a session token to the stored user document.

    Bad signatures, expired tokens and tokens naming a deleted user all fail
    the same way.
    """
    if not token:
        raise Unauthenticated("No token provided")

    payload = tokens.decode_session_token(token)
    user_id = to_object_id(payload.get("id"))
    user = await users.find_one({"_id": user_id}) if user_id else None
    if user is None:
        raise Unauthenticated("Invalid token")

    if user.get("status") != UserStatus.APPROVED.value:
        raise AccountNotApproved(status=user.get("status"))

    if not user.get("email_verified"):
        raise EmailNotVerified()

    return user


def check_role(user: dict, roles: Iterable[Role]):
    """Raise InsufficientRole unless the principal's role is one of ``roles``."""
    if user.get("role") not in {Role(r).value for r in roles}:
        raise InsufficientRole()


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    token = request.cookies.get(SESSION_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials

    state = request.app.state
    return await authenticate(token, state.db.users, state.tokens)


def require_roles(*roles: Role):
    """Dependency factory: the current user, provided their role is allowed."""
    async def checker(current_user: dict = Depends(get_current_user)) -> dict:
        check_role(current_user, roles)
        return current_user
    return checker
