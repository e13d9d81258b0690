from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[schemas.Category])
def get_categories(db: Session = Depends(get_db)):
    """
    Get approved categories.

    Categories are few in number, so pagination is not needed.
    """
    return CategoryService.get_approved_categories(db)


@router.post("", response_model=schemas.Category, status_code=201)
def create_category(
    category: schemas.CategoryCreate,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Create an approved category (admin only)."""
    return CategoryService.create_category(db, category.name, current_user)


@router.post("/request", response_model=schemas.Category, status_code=201)
def request_category(
    category: schemas.CategoryCreate,
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Suggest a new category; it stays pending until an admin reviews it."""
    return CategoryService.create_category(db, category.name, current_user)


@router.get("/check", response_model=schemas.CategoryCheck)
def check_category(
    name: str = Query(..., min_length=1, max_length=100),
    db: Session = Depends(get_db),
):
    """Check whether a category name is already taken."""
    return CategoryService.check_name(db, name)


@router.get("/my-requests", response_model=List[schemas.Category])
def get_my_requests(
    current_user: db_models.User = Depends(auth.get_instructor_user),
    db: Session = Depends(get_db),
):
    """Categories the current instructor suggested."""
    return CategoryService.get_my_requests(db, current_user.id)


@router.get("/pending", response_model=List[schemas.Category])
def get_pending_categories(
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Suggestions waiting for review (admin only)."""
    return CategoryService.get_pending_categories(db)


@router.put("/{category_id}/approve", response_model=schemas.Category)
def approve_category(
    category_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return CategoryService.set_status(
        db, category_id, db_models.CategoryStatus.APPROVED
    )


@router.put("/{category_id}/reject", response_model=schemas.Category)
def reject_category(
    category_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return CategoryService.set_status(
        db, category_id, db_models.CategoryStatus.REJECTED
    )


@router.put("/{category_id}", response_model=schemas.Category)
def rename_category(
    category_id: int,
    category: schemas.CategoryUpdate,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Rename a category (admin only)."""
    return CategoryService.rename_category(db, category_id, category.name)


@router.delete("/{category_id}", response_model=schemas.MessageResponse)
def delete_category(
    category_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """
    Delete a category (admin only).

    Refused while courses still use it.
    """
    CategoryService.delete_category(db, category_id)
    return {"message": "Category deleted"}
