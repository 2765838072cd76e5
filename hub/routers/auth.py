import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from hub.crud.users import get_user_by_username
from hub.database import get_db
from hub.models import User
from hub.schemas.auth import AuthUserRead, LoginRequest, LoginResponse
from hub.security import (
    clear_auth_cookie, create_access_token, get_current_user, set_auth_cookie, verify_password,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    if not credentials.username.strip() or not credentials.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    # 1. Look up the user
    user = get_user_by_username(db, credentials.username)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    # 2. Deactivated accounts are told so
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

    # 3. Check the password
    if not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login for '%s'", user.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    # 4. Issue the token as an http-only cookie
    token = create_access_token(user)
    set_auth_cookie(response, token)
    logger.info("User '%s' logged in", user.username)

    return {"user": user, "access_token": token, "token_type": "bearer"}


@router.post("/logout")
def logout(response: Response):
    clear_auth_cookie(response)
    return {"success": True}


@router.get("/me", response_model=AuthUserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
