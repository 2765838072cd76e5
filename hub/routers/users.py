import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from hub.crud.users import get_user_by_username
from hub.database import get_db
from hub.models import User
from hub.schemas.auth import UserCreate, UserRead, UserUpdate
from hub.security import get_password_hash, require_admin

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# --- 1. LIST ---
@router.get("/", response_model=List[UserRead])
def read_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return db.query(User).order_by(User.username).offset(skip).limit(limit).all()


@router.get("/{user_id}", response_model=UserRead)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return _get_or_404(db, user_id)


# --- 2. CREATE ---
@router.post("/", response_model=UserRead, status_code=201)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    username = user_in.username.lower().strip()
    if not username or not user_in.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    if get_user_by_username(db, username):
        raise HTTPException(status_code=409, detail="Username already exists")

    new_user = User(
        username=username,
        display_name=user_in.display_name,
        role=user_in.role,
        is_active=user_in.is_active,
        password_hash=get_password_hash(user_in.password),
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("User '%s' (%s) created by %s", username, new_user.role.value, current_user.username)
    return new_user


# --- 3. UPDATE (role, display name, password, active flag) ---
@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user_db = _get_or_404(db, user_id)

    update_data = user_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    if user_db.id == current_user.id and update_data.get("is_active") is False:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    # Empty password means "keep the current one"
    if "password" in update_data:
        password_raw = update_data.pop("password")
        if password_raw:
            user_db.password_hash = get_password_hash(password_raw)

    for field, value in update_data.items():
        if value is None and field in ("role", "is_active"):
            continue
        setattr(user_db, field, value)

    db.commit()
    db.refresh(user_db)
    return user_db


# --- 4. DEACTIVATE (soft delete) ---
@router.delete("/{user_id}", response_model=UserRead)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Users are never removed; their sales keep pointing at them."""
    user_db = _get_or_404(db, user_id)
    if user_db.id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    if not user_db.is_active:
        raise HTTPException(status_code=400, detail="User is already deactivated")

    user_db.is_active = False
    db.commit()
    db.refresh(user_db)
    logger.info("User '%s' deactivated by %s", user_db.username, current_user.username)
    return user_db
