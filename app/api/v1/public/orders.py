from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, selectinload

from app.db.session import get_db
from app.api.deps import get_current_user
from app.core.exceptions import Unauthorized
from app.models.user import User
from app.models.order import Order, OrderType
from app.schemas.booking import BookingReview, CancelRequest, ReviewCreate, StatusHistoryEntry
from app.schemas.order import (
    OrderCreate,
    Order as OrderSchema,
    AdminOrder,
    OrderItem as OrderItemSchema,
    OrderTrack,
)
from app.schemas.user import UserSummary
from app.schemas.common import PaginatedResponse
from app.services import lifecycle
from app.services.orders import create_order

router = APIRouter(prefix="/orders", tags=["Orders"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _order_query(db: Session):
    return db.query(Order).options(selectinload(Order.items))


def load_order(order_id: UUID, db: Session) -> Order:
    order = _order_query(db).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _load_owned_order(order_id: UUID, user: User, db: Session) -> Order:
    order = load_order(order_id, db)
    if order.user_id != user.id and not user.is_staff:
        raise Unauthorized("Not authorized to access this order")
    return order


def _order_fields(order: Order) -> dict:
    review = None
    if order.has_review:
        review = BookingReview(
            rating=order.review_rating,
            comment=order.review_comment,
            created_at=order.reviewed_at,
        )
    return dict(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        order_type=order.order_type,
        items=[OrderItemSchema.model_validate(i) for i in order.items],
        subtotal=order.subtotal,
        tax=order.tax,
        tax_rate=order.tax_rate,
        delivery_fee=order.delivery_fee,
        service_charge=order.service_charge,
        discount=order.discount,
        total_amount=order.total_amount,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        status_history=[StatusHistoryEntry.model_validate(h) for h in order.status_history],
        delivery_address=order.delivery_address,
        table_number=order.table_number,
        room_number=order.room_number,
        estimated_time=order.estimated_time,
        actual_time=order.actual_time,
        scheduled_time=order.scheduled_time,
        special_requests=order.special_requests,
        cancellation_reason=order.cancellation_reason,
        cancelled_at=order.cancelled_at,
        has_review=order.has_review,
        review=review,
        created_at=order.created_at,
    )


def serialize_order(order: Order) -> OrderSchema:
    return OrderSchema(**_order_fields(order))


def serialize_admin_order(order: Order) -> AdminOrder:
    user_summary = UserSummary.model_validate(order.user) if order.user else None
    return AdminOrder(**_order_fields(order), internal_notes=order.internal_notes, user=user_summary)


# ---------------------------------------------------------------------------
# GET /orders/track/{order_number}: public, no auth
# ---------------------------------------------------------------------------


@router.get("/track/{order_number}", response_model=OrderTrack)
def track_order(order_number: str, db: Session = Depends(get_db)):
    order = db.query(Order).filter(Order.order_number == order_number).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


# ---------------------------------------------------------------------------
# POST /orders
# ---------------------------------------------------------------------------


@router.post("/", response_model=OrderSchema, status_code=status.HTTP_201_CREATED)
def place_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Place an order. Item names and prices are copied from the menu now, so
    later menu changes never alter this order. Delivery adds a flat 5.00 fee.
    """
    order = create_order(db, data.model_dump(), current_user)
    return serialize_order(order)


@router.get("/", response_model=PaginatedResponse[OrderSchema])
def list_my_orders(
    status: Optional[str] = Query(None, description="Filter by order status"),
    order_type: Optional[OrderType] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = _order_query(db).filter(Order.user_id == current_user.id)
    if status:
        query = query.filter(Order.status == status)
    if order_type:
        query = query.filter(Order.order_type == order_type.value)

    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=[serialize_order(o) for o in orders],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.get("/{order_id}", response_model=OrderSchema)
def get_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return serialize_order(_load_owned_order(order_id, current_user, db))


# ---------------------------------------------------------------------------
# Cancel / review
# ---------------------------------------------------------------------------


@router.patch("/{order_id}/cancel", response_model=OrderSchema)
def cancel_order(
    order_id: UUID,
    data: Optional[CancelRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Only pending or confirmed orders can be cancelled."""
    order = _load_owned_order(order_id, current_user, db)
    lifecycle.cancel(order, reason=data.reason if data else None, actor=current_user)
    db.commit()
    db.refresh(order)
    return serialize_order(order)


@router.post("/{order_id}/review", response_model=OrderSchema, status_code=status.HTTP_201_CREATED)
def review_order(
    order_id: UUID,
    data: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = load_order(order_id, db)
    if order.user_id != current_user.id:
        raise Unauthorized("Only the customer who ordered can review this order")

    lifecycle.add_review(order, data.rating, data.comment)
    db.commit()
    db.refresh(order)
    return serialize_order(order)
