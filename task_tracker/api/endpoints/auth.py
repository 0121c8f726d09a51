import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from task_tracker.api import deps
from task_tracker.api.validation import EMAIL_TAKEN, validate_registration
from task_tracker.core.errors import InvalidCredentials, ValidationFailed
from task_tracker.core.security import TokenService, verify_password
from task_tracker.db import users as user_repo
from task_tracker.schemas.users import (
    MessageOut, RegisterOut, TokenOut, UserLogin, UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"], prefix="/auth", dependencies=[Depends(deps.auth_rate_limit)])


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(deps.get_db),
    tokens: TokenService = Depends(deps.get_token_service),
):
    user_in = validate_registration(db, payload)

    try:
        user = user_repo.create_user(
            db,
            name=user_in.name,
            email=user_in.email,
            password=user_in.password,
        )
    except user_repo.DuplicateEmail:
        raise ValidationFailed(errors={"email": [EMAIL_TAKEN]})

    issued = tokens.issue(user.id)
    logger.info("Registered user %s", user.id)
    return {
        "message": "User successfully registered",
        "user": user,
        "token": issued.token,
        "token_type": "bearer",
        "expires_in": issued.expires_in,
    }


@router.post("/login", response_model=TokenOut)
def login(
    user_in: UserLogin,
    db: Session = Depends(deps.get_db),
    tokens: TokenService = Depends(deps.get_token_service),
):
    # одинаковый ответ для "нет такого email" и "неверный пароль"
    user = user_repo.get_user_by_email(db, user_in.email)
    if not user or not verify_password(user_in.password, user.password_hash):
        logger.info("Failed login attempt")
        raise InvalidCredentials()

    issued = tokens.issue(user.id)
    logger.info("User %s logged in", user.id)
    return {
        "token": issued.token,
        "token_type": "bearer",
        "expires_in": issued.expires_in,
        "user": user,
    }


@router.get("/me", response_model=UserOut)
def me(principal: deps.Principal = Depends(deps.get_current_principal)):
    return principal.user


@router.post("/logout", response_model=MessageOut)
def logout(
    principal: deps.Principal = Depends(deps.get_current_principal),
    tokens: TokenService = Depends(deps.get_token_service),
):
    tokens.revoke(principal.token)
    return {"message": "Successfully logged out"}
