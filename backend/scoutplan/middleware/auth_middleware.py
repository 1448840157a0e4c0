"""Bearer-token dependencies for leaders (required, optional and role-gated)."""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from scoutplan.database import get_db
from scoutplan.models.user import User
from scoutplan.config import settings
from scoutplan.services.auth_service import ALGORITHM

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _subject(payload: dict) -> Optional[int]:
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def _load_active_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.user_id == user_id, User.is_active == True).first()  # noqa: E712


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    user_id = _subject(decode_token(credentials.credentials))
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    leader = _load_active_user(db, user_id)
    if not leader:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return leader


def require_roles(*roles: str):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(roles)}",
            )
        return current_user
    return checker


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Anonymous callers (no token or a bad one) may still read public programs."""
    if credentials is None:
        return None
    try:
        payload = jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    user_id = _subject(payload)
    return _load_active_user(db, user_id) if user_id is not None else None
