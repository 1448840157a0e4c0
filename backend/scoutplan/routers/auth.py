"""Leader sign-in endpoints. Tokens are stateless, so logout is acknowledged only."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from scoutplan.database import get_db
from scoutplan.schemas.user import LoginRequest, TokenResponse, UserOut
from scoutplan.services import auth_service
from scoutplan.middleware.auth_middleware import get_current_user
from scoutplan.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    leader = auth_service.mock_sso_login(db, request.email)
    return TokenResponse(
        access_token=auth_service.create_access_token(leader.user_id),
        user=UserOut.model_validate(leader),
    )


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    logger.info("[auth] user_id=%s signed out", current_user.user_id)
    return {"message": "Signed out."}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
