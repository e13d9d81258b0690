"""Profile endpoints for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import UserService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=schemas.Profile)
def get_profile(
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> schemas.Profile:
    """Get the account with its student or instructor profile."""
    return UserService.get_profile(current_user)


@router.put("", response_model=schemas.Profile)
def update_profile(
    profile_update: schemas.ProfileUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.Profile:
    """Update account fields and the role profile; unset fields are kept."""
    return UserService.update_profile(db, current_user, profile_update)


@router.put("/password", response_model=schemas.MessageResponse)
def change_password(
    password_change: schemas.PasswordChange,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.MessageResponse:
    """Change the password after verifying the current one."""
    UserService.change_password(
        db,
        current_user,
        password_change.current_password,
        password_change.new_password,
    )
    return schemas.MessageResponse(message="Password changed successfully")
