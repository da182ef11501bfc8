"""
Lifecycle state machine for bookings, orders and payments.

All status writes go through ``_apply_status``: it validates the requested
transition against the allow-list for the entity, then sets the status and
appends exactly one history row. Validation happens before any field is
touched, so a refused transition leaves the entity unchanged.

Pricing is never recomputed here.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional, Union

from app.core.exceptions import (
    AlreadyReviewed,
    InvalidTransition,
    NotEligible,
    Unauthorized,
    ValidationError,
)
from app.models.booking import Booking, BookingStatus, BookingStatusHistory, BookingType
from app.models.order import Order, OrderStatus, OrderStatusHistory
from app.models.payment import Payment, PaymentStatus, PaymentStatusHistory
from app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "Customer cancelled"

ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.confirmed, OrderStatus.cancelled}),
    OrderStatus.confirmed: frozenset({OrderStatus.preparing, OrderStatus.cancelled}),
    OrderStatus.preparing: frozenset({OrderStatus.ready, OrderStatus.cancelled}),
    OrderStatus.ready: frozenset({OrderStatus.served, OrderStatus.delivered}),
    OrderStatus.served: frozenset({OrderStatus.delivered}),
    OrderStatus.delivered: frozenset({OrderStatus.refunded}),
    OrderStatus.cancelled: frozenset(),
    OrderStatus.refunded: frozenset(),
}

BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.pending: frozenset({
        BookingStatus.confirmed, BookingStatus.cancelled, BookingStatus.no_show,
    }),
    BookingStatus.confirmed: frozenset({
        BookingStatus.checked_in, BookingStatus.completed,
        BookingStatus.cancelled, BookingStatus.no_show,
    }),
    BookingStatus.checked_in: frozenset({BookingStatus.checked_out}),
    BookingStatus.checked_out: frozenset({BookingStatus.completed}),
    BookingStatus.completed: frozenset(),
    BookingStatus.cancelled: frozenset(),
    BookingStatus.no_show: frozenset(),
}

# Statuses that only apply to one family of booking types
ROOM_ONLY_STATUSES = frozenset({BookingStatus.checked_in, BookingStatus.checked_out})

PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.pending: frozenset({
        PaymentStatus.processing, PaymentStatus.success,
        PaymentStatus.failed, PaymentStatus.cancelled,
    }),
    PaymentStatus.processing: frozenset({
        PaymentStatus.success, PaymentStatus.failed, PaymentStatus.cancelled,
    }),
    PaymentStatus.success: frozenset({PaymentStatus.refunded, PaymentStatus.partially_refunded}),
    PaymentStatus.partially_refunded: frozenset({
        PaymentStatus.partially_refunded, PaymentStatus.refunded,
    }),
    PaymentStatus.failed: frozenset(),
    PaymentStatus.cancelled: frozenset(),
    PaymentStatus.refunded: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({"pending", "confirmed"})
REVIEWABLE_ORDER_STATUSES = frozenset({OrderStatus.delivered.value, OrderStatus.served.value})
REVIEWABLE_BOOKING_STATUSES = frozenset({BookingStatus.checked_out.value, BookingStatus.completed.value})


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _actor_id(actor: Optional[User]):
    return actor.id if actor is not None else None


def _coerce(enum_cls, value, current: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidTransition(current, str(value), f"Invalid status: {value}")


# ---------------------------------------------------------------------------
# Core write path
# ---------------------------------------------------------------------------


def _history_row(entity, status: str, note: Optional[str], actor: Optional[User], now: datetime):
    if isinstance(entity, Booking):
        return BookingStatusHistory(status=status, timestamp=now, note=note, updated_by=_actor_id(actor))
    if isinstance(entity, Order):
        return OrderStatusHistory(status=status, timestamp=now, note=note, updated_by=_actor_id(actor))
    if isinstance(entity, Payment):
        return PaymentStatusHistory(status=status, timestamp=now, note=note)
    raise TypeError(f"Unsupported entity: {type(entity).__name__}")


def _apply_status(entity, status: str, note: Optional[str], actor: Optional[User], now: datetime) -> None:
    """Set ``entity.status`` and append the matching history row. Callers validate first."""
    previous = entity.status
    entity.status = status
    entity.status_history.append(_history_row(entity, status, note, actor, now))
    logger.info("%s %s: %s -> %s", type(entity).__name__, entity.reference, previous, status)


def record_creation(entity, actor: Optional[User] = None, note: Optional[str] = None,
                    now: Optional[datetime] = None):
    """Write the initial ``pending`` status and its history entry for a new entity."""
    if entity.status_history:
        raise InvalidTransition(entity.status, "pending", "Entity already has a status history")
    _apply_status(entity, "pending", note or "Created", actor, _now(now))
    return entity


def _refuse(entity, current: str, target: str, message: Optional[str] = None):
    logger.warning(
        "Refused %s %s transition: %s -> %s", type(entity).__name__, entity.reference, current, target
    )
    raise InvalidTransition(current, target, message)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def can_transition_order(current, target) -> bool:
    try:
        return OrderStatus(target) in ORDER_TRANSITIONS[OrderStatus(current)]
    except (ValueError, KeyError):
        return False


def transition_order_status(order: Order, target, actor: Optional[User] = None,
                            note: Optional[str] = None, now: Optional[datetime] = None) -> Order:
    now = _now(now)
    current = order.status
    target_status = _coerce(OrderStatus, target, current)
    if not can_transition_order(current, target_status):
        _refuse(order, current, target_status.value)

    _apply_status(order, target_status.value, note, actor, now)

    if target_status in (OrderStatus.delivered, OrderStatus.served):
        elapsed = now - _as_utc(order.created_at or now)
        order.actual_time = round(elapsed.total_seconds() / 60)
    elif target_status == OrderStatus.cancelled:
        _stamp_cancellation(order, note, actor, now)
    return order


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


def allowed_booking_targets(booking: Booking):
    """Allowed next statuses for ``booking``, taking its booking type into account."""
    try:
        allowed = BOOKING_TRANSITIONS[BookingStatus(booking.status)]
    except (ValueError, KeyError):
        return frozenset()
    if booking.booking_type == BookingType.room.value:
        # Rooms complete only after checking out
        if booking.status == BookingStatus.confirmed.value:
            allowed = allowed - {BookingStatus.completed}
    else:
        allowed = allowed - ROOM_ONLY_STATUSES
    return allowed


def transition_booking_status(booking: Booking, target, actor: Optional[User] = None,
                              note: Optional[str] = None, now: Optional[datetime] = None) -> Booking:
    now = _now(now)
    current = booking.status
    target_status = _coerce(BookingStatus, target, current)

    if target_status not in allowed_booking_targets(booking):
        if target_status in ROOM_ONLY_STATUSES and booking.booking_type != BookingType.room.value:
            _refuse(booking, current, target_status.value,
                    f"{target_status.value} only applies to room bookings")
        _refuse(booking, current, target_status.value)
    if target_status == BookingStatus.no_show and not (actor is not None and actor.is_admin):
        raise Unauthorized("Only an admin can mark a booking as no-show")

    _apply_status(booking, target_status.value, note, actor, now)

    if target_status == BookingStatus.checked_in:
        booking.actual_check_in = now
    elif target_status == BookingStatus.checked_out:
        booking.actual_check_out = now
    elif target_status == BookingStatus.cancelled:
        _stamp_cancellation(booking, note, actor, now)
    return booking


def check_in(booking: Booking, actor: Optional[User] = None, note: Optional[str] = None,
             now: Optional[datetime] = None) -> Booking:
    if booking.booking_type != BookingType.room.value:
        _refuse(booking, booking.status, BookingStatus.checked_in.value,
                "Check-in is only for room bookings")
    if booking.status != BookingStatus.confirmed.value:
        _refuse(booking, booking.status, BookingStatus.checked_in.value,
                "Can only check in confirmed bookings")
    return transition_booking_status(booking, BookingStatus.checked_in, actor, note, now)


def check_out(booking: Booking, actor: Optional[User] = None, note: Optional[str] = None,
              now: Optional[datetime] = None) -> Booking:
    if booking.booking_type != BookingType.room.value:
        _refuse(booking, booking.status, BookingStatus.checked_out.value,
                "Check-out is only for room bookings")
    if booking.status != BookingStatus.checked_in.value:
        _refuse(booking, booking.status, BookingStatus.checked_out.value,
                "Can only check out checked-in bookings")
    return transition_booking_status(booking, BookingStatus.checked_out, actor, note, now)


# ---------------------------------------------------------------------------
# Shared: cancellation, reviews
# ---------------------------------------------------------------------------


def _stamp_cancellation(entity, reason: Optional[str], actor: Optional[User], now: datetime) -> None:
    entity.cancellation_reason = reason or DEFAULT_CANCEL_REASON
    entity.cancelled_at = now
    entity.cancelled_by = _actor_id(actor)


def cancel(entity: Union[Booking, Order], reason: Optional[str] = None, actor: Optional[User] = None,
           now: Optional[datetime] = None):
    """Cancel a pending or confirmed booking/order, recording reason, actor and time."""
    if entity.status not in CANCELLABLE_STATUSES:
        _refuse(entity, entity.status, "cancelled", f"Cannot cancel with status: {entity.status}")
    reason = reason or DEFAULT_CANCEL_REASON
    if isinstance(entity, Booking):
        return transition_booking_status(entity, BookingStatus.cancelled, actor, reason, now)
    return transition_order_status(entity, OrderStatus.cancelled, actor, reason, now)


def add_review(entity: Union[Booking, Order], rating: int, comment: Optional[str] = None,
               now: Optional[datetime] = None):
    """Attach the one review an entity may carry."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    if entity.has_review:
        raise AlreadyReviewed(f"{type(entity).__name__} already has a review")

    eligible = REVIEWABLE_ORDER_STATUSES if isinstance(entity, Order) else REVIEWABLE_BOOKING_STATUSES
    if entity.status not in eligible:
        raise NotEligible(
            f"Can only review {'completed orders' if isinstance(entity, Order) else 'completed bookings'}",
            details={"status": entity.status},
        )

    entity.review_rating = rating
    entity.review_comment = comment
    entity.reviewed_at = _now(now)
    entity.has_review = True
    return entity


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


def set_payment_status(payment: Payment, target, note: Optional[str] = None,
                       now: Optional[datetime] = None) -> Payment:
    now = _now(now)
    current = payment.status
    target_status = _coerce(PaymentStatus, target, current)
    try:
        allowed = PAYMENT_TRANSITIONS[PaymentStatus(current)]
    except ValueError:
        allowed = frozenset()
    if target_status not in allowed:
        _refuse(payment, current, target_status.value)

    _apply_status(payment, target_status.value, note, None, now)

    if target_status == PaymentStatus.success:
        payment.processed_at = now
    elif target_status == PaymentStatus.failed:
        payment.failed_at = now
        payment.failure_message = note
    elif target_status in (PaymentStatus.refunded, PaymentStatus.partially_refunded):
        payment.refunded_at = now
    return payment
