"""
Dashboard authentication (JWT). Login is rate limited per client IP and email.
"""
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from wifidash.db.session import get_db
from wifidash.models.user import User
from wifidash.payments.models import Actor
from wifidash.schemas.auth import LoginRequest, Token, UserInfo
from wifidash.services.auth.jwt import authenticate_user, create_access_token, get_current_actor
from wifidash.services.auth.login_rate_limit import (
    check_login_rate_limit,
    get_client_ip,
    reset_login_attempts,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        status=user.status,
    )


@router.post("/login", response_model=Token)
def login(request: Request, body: LoginRequest = Body(...), db: Session = Depends(get_db)):
    client_ip = get_client_ip(request)
    if not check_login_rate_limit(client_ip, body.email):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Try again later.",
        )

    user = authenticate_user(db, body.email, body.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    reset_login_attempts(client_ip, body.email)
    access_token = create_access_token(data={"sub": user.id, "role": user.role})
    return Token(access_token=access_token, token_type="bearer", user=_user_info(user))


@router.get("/me", response_model=UserInfo)
def get_me(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == actor.user_id).one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return _user_info(user)
