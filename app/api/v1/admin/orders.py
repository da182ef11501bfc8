from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload, selectinload

from app.db.session import get_db
from app.api.deps import get_current_staff_user
from app.api.v1.public.orders import load_order, serialize_admin_order
from app.models.user import User
from app.models.order import Order, OrderType
from app.schemas.order import AdminOrder, OrderStatusUpdate
from app.schemas.common import PaginatedResponse
from app.services import lifecycle

router = APIRouter(prefix="/admin/orders", tags=["Admin - Orders"])


@router.get("/", response_model=PaginatedResponse[AdminOrder])
def list_all_orders(
    status: Optional[str] = Query(None, description="Filter by order status"),
    order_type: Optional[OrderType] = Query(None),
    payment_status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    """Kitchen / front-desk view of every order, newest first."""
    query = db.query(Order).options(joinedload(Order.user), selectinload(Order.items))
    if status:
        query = query.filter(Order.status == status)
    if order_type:
        query = query.filter(Order.order_type == order_type.value)
    if payment_status:
        query = query.filter(Order.payment_status == payment_status)

    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=[serialize_admin_order(o) for o in orders],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.patch("/{order_id}/status", response_model=AdminOrder)
def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    """
    Advance an order: pending → confirmed → preparing → ready → served/delivered.
    Anything outside the allowed next statuses is refused with 409.
    """
    order = load_order(order_id, db)
    lifecycle.transition_order_status(order, data.status, actor=current_user, note=data.note)
    db.commit()
    db.refresh(order)
    return serialize_admin_order(order)
