"""
Order creation.

Menu items are looked up once, and their name and current price are copied
onto the order lines. Totals are always recomputed from those snapshots and
never from the live menu.
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.models.menu_item import MenuItem
from app.models.order import Order, OrderItem, OrderType
from app.models.user import User
from app.services import lifecycle, pricing
from app.utils.reference import ORDER_PREFIX, generate_unique_reference

logger = logging.getLogger(__name__)

BASE_PREPARATION_MINUTES = 20
DELIVERY_EXTRA_MINUTES = 30
ROOM_SERVICE_EXTRA_MINUTES = 15


def estimate_minutes(preparation_times: Iterable[Optional[int]], order_type) -> int:
    """Slowest item (at least the base prep time) plus the hand-over offset."""
    minutes = max([t or 0 for t in preparation_times] + [BASE_PREPARATION_MINUTES])
    order_type = OrderType(order_type)
    if order_type == OrderType.delivery:
        minutes += DELIVERY_EXTRA_MINUTES
    elif order_type == OrderType.room_service:
        minutes += ROOM_SERVICE_EXTRA_MINUTES
    return minutes


def snapshot_lines(db: Session, items) -> list:
    lines = []
    cache = {}
    for position, item in enumerate(items):
        menu_item_id = item["menu_item_id"]
        if menu_item_id not in cache:
            cache[menu_item_id] = (
                db.query(MenuItem)
                .filter(MenuItem.id == menu_item_id, MenuItem.is_active == True)  # noqa: E712
                .first()
            )
        menu_item = cache[menu_item_id]
        if not menu_item:
            raise NotFound(f"Menu item not found: {menu_item_id}", details={"id": str(menu_item_id)})
        if not menu_item.is_available:
            raise ValidationError(f"{menu_item.name} is not available", details={"id": str(menu_item_id)})

        lines.append((
            menu_item,
            OrderItem(
                menu_item_id=menu_item.id,
                position=position,
                name=menu_item.name,
                quantity=item["quantity"],
                unit_price=pricing.to_money(menu_item.current_price),
                special_instructions=item.get("special_instructions"),
            ),
        ))
    return lines


def create_order(
    db: Session,
    data: Mapping[str, Any],
    user: User,
    reference_factory: Optional[Callable[[str], str]] = None,
) -> Order:
    """Create a ``pending`` order with snapshotted line items."""
    try:
        order_type = OrderType(data.get("order_type"))
    except ValueError:
        raise ValidationError(f"Invalid order type: {data.get('order_type')}")

    items = list(data.get("items") or [])
    if not items:
        raise ValidationError("Order must have at least one item")
    if order_type == OrderType.delivery and not data.get("delivery_address"):
        raise ValidationError("Delivery orders need a delivery address")

    lines = snapshot_lines(db, items)
    order_items = [line for _, line in lines]
    breakdown = pricing.price_order(order_items, order_type)

    order = Order(
        order_number=generate_unique_reference(db, Order.order_number, ORDER_PREFIX, reference_factory),
        user_id=user.id,
        order_type=order_type.value,
        subtotal=breakdown.subtotal,
        tax=breakdown.tax,
        tax_rate=breakdown.tax_rate,
        delivery_fee=breakdown.delivery_fee,
        service_charge=breakdown.service_charge,
        discount=breakdown.discount,
        total_amount=breakdown.total_amount,
        delivery_address=data.get("delivery_address"),
        table_number=data.get("table_number"),
        room_number=data.get("room_number"),
        scheduled_time=data.get("scheduled_time"),
        special_requests=data.get("special_requests"),
        estimated_time=estimate_minutes((m.preparation_time for m, _ in lines), order_type),
        items=order_items,
    )
    lifecycle.record_creation(order, actor=user, note="Order placed")

    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(
        "Created %s order %s for user %s (total %s)",
        order.order_type, order.order_number, user.id, order.total_amount,
    )
    return order
