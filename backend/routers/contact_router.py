"""Contact form endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from helpers.rate_limiter import CONTACT_LIMIT, limiter
from repositories.database import get_db
from services.contact_service import ContactService

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=schemas.ContactMessage, status_code=201)
@limiter.limit(CONTACT_LIMIT)
def submit_contact_form(
    request: Request,
    form: schemas.ContactCreate,
    db: Session = Depends(get_db),
):
    """Submit a contact form.

    The message is stored and forwarded to the platform admin. No
    authentication required.

    Args:
        request: FastAPI request object (required for rate limiter)
        form: Contact form data with name, email, subject, and message
    """
    return ContactService.submit(db, form)


@router.get("", response_model=List[schemas.ContactMessage])
def list_contact_messages(
    status: Optional[db_models.ContactStatus] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    """Contact messages, newest first."""
    return ContactService.list_messages(db, status=status, skip=skip, limit=limit)


@router.put("/{message_id}", response_model=schemas.ContactMessage)
def resolve_contact_message(
    message_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
):
    return ContactService.resolve(db, message_id)
