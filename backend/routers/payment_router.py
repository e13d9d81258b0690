"""Checkout endpoints for paid courses."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import PaymentService

router = APIRouter(prefix="/payment", tags=["payment"])


@router.post("/create-order", response_model=schemas.OrderResponse)
def create_order(
    payload: schemas.CreateOrderRequest,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> schemas.OrderResponse:
    """
    Open a checkout order for a paid course.

    The response carries the public key and the amount in minor units for
    the client side checkout widget.
    """
    return PaymentService.create_order(db, payload.course_id, current_user)


@router.post("/verify-payment", response_model=schemas.VerifyPaymentResponse)
def verify_payment(
    payload: schemas.VerifyPaymentRequest,
    current_user: db_models.User = Depends(auth.get_student_user),
    db: Session = Depends(get_db),
) -> schemas.VerifyPaymentResponse:
    """
    Verify the gateway signature, record the payment and enroll.

    Raises 400 on a bad signature and 409 when the order was already paid.
    """
    return PaymentService.verify_payment(db, payload, current_user)
