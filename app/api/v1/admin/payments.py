from uuid import UUID
from typing import Optional
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.db.session import get_db
from app.api.deps import get_current_staff_user, get_current_admin_user
from app.models.user import User
from app.models.payment import Payment, PaymentType
from app.schemas.payment import Payment as PaymentSchema, PaymentSummary, RefundRequest
from app.schemas.common import PaginatedResponse
from app.services.payments import process_refund

router = APIRouter(prefix="/admin/payments", tags=["Admin - Payments"])


def _filtered(db: Session, status: Optional[str], payment_type: Optional[PaymentType]):
    query = db.query(Payment)
    if status:
        query = query.filter(Payment.status == status)
    if payment_type:
        query = query.filter(Payment.payment_type == payment_type.value)
    return query


@router.get("/", response_model=PaginatedResponse[PaymentSchema])
def list_all_payments(
    status: Optional[str] = Query(None, description="Filter by payment status"),
    payment_type: Optional[PaymentType] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    query = _filtered(db, status, payment_type).options(selectinload(Payment.status_history))

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


@router.get("/summary", response_model=PaymentSummary)
def payment_summary(
    status: Optional[str] = Query(None),
    payment_type: Optional[PaymentType] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Collected amount, refunds and net over the filtered payments."""
    query = _filtered(db, status, payment_type)
    total_amount, total_refunds = query.with_entities(
        func.coalesce(func.sum(Payment.amount), 0),
        func.coalesce(func.sum(Payment.refund_amount), 0),
    ).one()
    total_amount = Decimal(str(total_amount)).quantize(Decimal("0.01"))
    total_refunds = Decimal(str(total_refunds)).quantize(Decimal("0.01"))
    return PaymentSummary(
        total_amount=total_amount,
        total_refunds=total_refunds,
        net_revenue=total_amount - total_refunds,
    )


@router.post("/{payment_id}/refund", response_model=PaymentSchema)
def refund_payment(
    payment_id: UUID,
    data: RefundRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """
    Refund all or part of a successful payment. A full refund also refunds a
    delivered order, or cancels a booking/order that has not started yet.
    """
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return process_refund(db, payment, amount=data.amount, reason=data.reason, actor=current_user)
