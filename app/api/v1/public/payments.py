from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, selectinload

from app.db.session import get_db
from app.api.deps import get_current_user
from app.core.exceptions import Unauthorized
from app.models.user import User
from app.models.payment import Payment, PaymentType
from app.schemas.payment import PaymentCreate, Payment as PaymentSchema
from app.schemas.common import PaginatedResponse
from app.services.payments import process_payment

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/", response_model=PaymentSchema, status_code=status.HTTP_201_CREATED)
def pay(
    data: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Pay for one of your bookings or orders.

    Orders are paid in full. Bookings take either the full balance or, when a
    deposit is due and not yet paid, exactly the deposit.
    """
    return process_payment(db, data.model_dump(), current_user)


@router.get("/history", response_model=PaginatedResponse[PaymentSchema])
def payment_history(
    payment_type: Optional[PaymentType] = Query(None, description="booking or order"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = (
        db.query(Payment)
        .options(selectinload(Payment.status_history))
        .filter(Payment.user_id == current_user.id)
    )
    if payment_type:
        query = query.filter(Payment.payment_type == payment_type.value)

    total = query.count()
    payments = (
        query.order_by(Payment.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=[PaymentSchema.model_validate(p) for p in payments],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.get("/{payment_id}", response_model=PaymentSchema)
def get_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    if payment.user_id != current_user.id and not current_user.is_staff:
        raise Unauthorized("Not authorized to view this payment")
    return payment
