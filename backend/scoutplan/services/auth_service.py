"""Leader sign-in: mock SSO by e-mail address and JWT issuing."""

import logging
from datetime import datetime, timedelta, timezone
from jose import jwt
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from scoutplan.models.user import User, normalize_email
from scoutplan.config import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    lifetime = timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def mock_sso_login(db: Session, email: str) -> User:
    """Sign in an active leader by address; no password, like the SSO stub it stands in for."""
    address = normalize_email(email)
    leader = db.query(User).filter(User.email == address, User.is_active == True).first()  # noqa: E712
    if not leader:
        logger.info("[auth] login rejected for %s", address)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"No active user found for '{address}'.",
        )
    logger.info("[auth] user_id=%s signed in", leader.user_id)
    return leader
