"""
Bearer token identity for checkout and order routes.

Tokens are issued by the marketplace auth service; this service only needs
to read them. ``create_access_token`` exists for local tooling and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlmodel import Session

from marketplace.config import settings
from marketplace.database import get_session
from marketplace.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": str(user_id), "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> User:
    """The customer placing the request. Disabled accounts cannot check out."""
    claims = decode_access_token(token)
    if claims is None:
        raise _unauthorized("Could not validate credentials")

    subject = claims.get("sub")
    if subject is None or not str(subject).isdigit():
        raise _unauthorized("Invalid token payload")

    user = session.get(User, int(subject))
    if user is None:
        raise _unauthorized("User not found")

    if not user.can_login:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "User account is disabled")

    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "admin":
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return current_user
