"""Authentication for the admin: JWT, password hashing, capability checks."""
from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Cookie, Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy import select

import config
from theme.models import User
from theme.models.base import async_session_factory

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
http_bearer = HTTPBearer(auto_error=False)

ROLES = ("user", "moderator", "admin")

ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    "admin": frozenset({"manage_options", "edit_theme_options"}),
    "moderator": frozenset({"edit_theme_options"}),
    "user": frozenset(),
}


def _prepare_password(password: str) -> str:
    """Bcrypt has a 72-byte limit. Pre-hash longer passwords with SHA256."""
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        return hashlib.sha256(encoded).hexdigest()
    return password


def hash_password(password: str) -> str:
    return pwd_context.hash(_prepare_password(password))


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(_prepare_password(plain), hashed)


def create_access_token(username: str, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=config.JWT_EXPIRE_DAYS)
    payload = {"sub": username, "role": role, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def user_can(user: User, capability: str) -> bool:
    return capability in ROLE_CAPABILITIES.get(user.role, frozenset())


async def get_user_by_username(username: str) -> Optional[User]:
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    x_auth_token: Optional[str] = Header(None, alias="X-Auth-Token"),
    access_token: Optional[str] = Cookie(None),
) -> Optional[User]:
    """Return current user from JWT, or None if not authenticated.

    Accepts Authorization: Bearer, X-Auth-Token (for proxies that strip Authorization)
    or the access_token cookie set at login (for plain HTML form posts).
    """
    token = None
    if credentials and credentials.credentials:
        token = credentials.credentials
    elif x_auth_token:
        token = x_auth_token
    elif access_token:
        token = access_token
    if not token:
        return None
    payload = decode_token(token)
    # Form nonces are signed with the same key but never authenticate a request
    if not payload or "action" in payload:
        return None
    username = payload.get("sub")
    if not username:
        return None
    return await get_user_by_username(username)


async def require_user(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """Require authenticated user. Raises 401 if not logged in."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_capability(capability: str):
    """Dependency factory: require a logged-in user whose role grants capability. Raises 403 otherwise."""

    async def dependency(user: User = Depends(require_user)) -> User:
        if not user_can(user, capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Sorry, you are not allowed to manage options for this site.",
            )
        return user

    return dependency


require_admin_user = require_capability("manage_options")


def create_nonce(username: str, action: str) -> str:
    """Signed, expiring token tying a form post to the user and the action that rendered it."""
    expire = datetime.now(timezone.utc) + timedelta(hours=config.NONCE_LIFETIME_HOURS)
    payload = {"sub": username, "action": action, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def verify_nonce(nonce: Optional[str], username: str, action: str) -> bool:
    if not nonce:
        return False
    payload = decode_token(nonce)
    if not payload:
        return False
    return payload.get("sub") == username and payload.get("action") == action
