"""
Payment collaborator.

Records payments against one booking or one order and processes refunds.
A payment and the payment status of its booking/order are written in the
same commit; entity status changes go through the lifecycle.
"""

import logging
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidTransition, NotEligible, NotFound, Unauthorized, ValidationError
from app.models.booking import Booking, BookingPaymentStatus, BookingStatus
from app.models.order import Order, OrderPaymentStatus, OrderStatus
from app.models.payment import Payment, PaymentStatus, PaymentType
from app.models.user import User
from app.services import lifecycle
from app.services.pricing import to_money
from app.utils.reference import PAYMENT_PREFIX, generate_unique_reference

logger = logging.getLogger(__name__)

REFUNDABLE_STATUSES = frozenset({PaymentStatus.success.value, PaymentStatus.partially_refunded.value})
CLOSED_STATUSES = frozenset({
    BookingStatus.cancelled.value,
    BookingStatus.no_show.value,
    OrderStatus.cancelled.value,
    OrderStatus.refunded.value,
})

# Order statuses a full refund cancels instead of refunding
ORDER_CANCEL_ON_REFUND = frozenset({
    OrderStatus.pending.value, OrderStatus.confirmed.value, OrderStatus.preparing.value,
})
BOOKING_CANCEL_ON_REFUND = frozenset({BookingStatus.pending.value, BookingStatus.confirmed.value})


def _load_target(db: Session, payment_type: PaymentType, data: Mapping[str, Any]):
    if payment_type == PaymentType.booking:
        target = db.query(Booking).filter(Booking.id == data.get("booking_id")).first()
        label = "Booking"
    else:
        target = db.query(Order).filter(Order.id == data.get("order_id")).first()
        label = "Order"
    if not target:
        raise NotFound(f"{label} not found")
    return target


def _booking_charge(booking: Booking, amount: Decimal) -> str:
    """Validate ``amount`` against what the booking owes and return its new payment status."""
    if booking.payment_status == BookingPaymentStatus.fully_paid.value:
        raise NotEligible("Booking is already fully paid")

    balance = to_money(Decimal(booking.total_amount) - Decimal(booking.amount_paid or 0))
    deposit = to_money(booking.deposit or 0)
    if amount == balance:
        return BookingPaymentStatus.fully_paid.value
    if deposit > 0 and not booking.deposit_paid and amount == deposit:
        return BookingPaymentStatus.deposit_paid.value
    raise ValidationError(
        "Payment amount does not match the amount due",
        details={"amount": str(amount), "amount_due": str(balance), "deposit": str(deposit)},
    )


def _order_charge(order: Order, amount: Decimal) -> str:
    if order.payment_status == OrderPaymentStatus.paid.value:
        raise NotEligible("Order is already paid")
    total = to_money(order.total_amount)
    if amount != total:
        raise ValidationError(
            "Payment amount does not match the order total",
            details={"amount": str(amount), "amount_due": str(total)},
        )
    return OrderPaymentStatus.paid.value


def process_payment(
    db: Session,
    data: Mapping[str, Any],
    user: User,
    reference_factory: Optional[Callable[[str], str]] = None,
) -> Payment:
    """
    Record a successful payment by ``user`` for their own booking or order.

    The booking/order payment status follows in the same commit, and a
    ``pending`` booking/order is confirmed.
    """
    payment_type = PaymentType(getattr(data["payment_type"], "value", data["payment_type"]))
    target = _load_target(db, payment_type, data)
    if target.user_id != user.id:
        raise Unauthorized("Not authorized to pay for this " + payment_type.value)
    if target.status in CLOSED_STATUSES:
        raise NotEligible(f"Cannot pay for a {payment_type.value} with status: {target.status}")

    amount = to_money(data["amount"])
    if payment_type == PaymentType.booking:
        new_payment_status = _booking_charge(target, amount)
    else:
        new_payment_status = _order_charge(target, amount)

    method = getattr(data.get("payment_method"), "value", data.get("payment_method"))
    payment = Payment(
        payment_number=generate_unique_reference(db, Payment.payment_number, PAYMENT_PREFIX, reference_factory),
        payment_type=payment_type.value,
        booking_id=target.id if payment_type == PaymentType.booking else None,
        order_id=target.id if payment_type == PaymentType.order else None,
        user_id=user.id,
        amount=amount,
        currency=settings.CURRENCY,
        payment_method=method,
        transaction_id=data.get("transaction_id"),
        description=f"Payment for {payment_type.value} {target.reference}",
        refund_amount=Decimal("0.00"),
    )
    lifecycle.record_creation(payment)
    lifecycle.set_payment_status(payment, PaymentStatus.success, note="Payment processed")

    target.payment_status = new_payment_status
    target.payment_method = method
    if isinstance(target, Booking):
        target.amount_paid = to_money(Decimal(target.amount_paid or 0) + amount)
        if new_payment_status == BookingPaymentStatus.deposit_paid.value or target.deposit:
            target.deposit_paid = True
        if target.status == BookingStatus.pending.value:
            lifecycle.transition_booking_status(target, BookingStatus.confirmed, actor=user, note="Payment received")
    elif target.status == OrderStatus.pending.value:
        lifecycle.transition_order_status(target, OrderStatus.confirmed, actor=user, note="Payment received")

    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(
        "Payment %s of %s %s recorded for %s %s (%s)",
        payment.payment_number, payment.amount, payment.currency,
        payment_type.value, target.reference, new_payment_status,
    )
    return payment


# ---------------------------------------------------------------------------
# Refunds
# ---------------------------------------------------------------------------


def _held_amount(target) -> Decimal:
    """Money the booking/order still holds across its successful payments."""
    held = Decimal("0.00")
    for payment in target.payments:
        if payment.status in REFUNDABLE_STATUSES:
            held += to_money(payment.amount) - to_money(payment.refund_amount or 0)
    return held


def _plan_refund_effect(target, full: bool):
    """
    Work out (new status or None, new payment status) before anything is written.

    ``full`` means nothing is left paid on the booking/order after this refund.
    """
    if isinstance(target, Order):
        if not full:
            return None, target.payment_status
        if target.status == OrderStatus.delivered.value:
            return OrderStatus.refunded, OrderPaymentStatus.refunded.value
        if target.status in ORDER_CANCEL_ON_REFUND:
            return OrderStatus.cancelled, OrderPaymentStatus.refunded.value
        if target.status == OrderStatus.cancelled.value:
            return None, OrderPaymentStatus.refunded.value
        raise InvalidTransition(
            target.status, OrderStatus.refunded.value,
            f"Cannot refund an order with status: {target.status}",
        )

    if not full:
        return None, BookingPaymentStatus.partially_refunded.value
    if target.status in BOOKING_CANCEL_ON_REFUND:
        return BookingStatus.cancelled, BookingPaymentStatus.refunded.value
    return None, BookingPaymentStatus.refunded.value


def process_refund(
    db: Session,
    payment: Payment,
    amount: Optional[Decimal] = None,
    reason: Optional[str] = None,
    actor: Optional[User] = None,
) -> Payment:
    """
    Refund ``amount`` (default: everything not yet refunded) of ``payment``.

    A refund that leaves nothing paid on the booking/order also moves it:
    delivered orders become ``refunded``, orders and bookings that have not
    started are cancelled. Otherwise only its payment status changes.
    Payment, booking/order status and payment status share one commit.
    """
    if payment.status not in REFUNDABLE_STATUSES:
        raise InvalidTransition(
            payment.status, PaymentStatus.refunded.value,
            f"Cannot refund a payment with status: {payment.status}",
        )

    already_refunded = to_money(payment.refund_amount or 0)
    remaining = to_money(payment.amount) - already_refunded
    amount = remaining if amount is None else to_money(amount)
    if amount <= 0:
        raise ValidationError("Refund amount must be greater than zero")
    if amount > remaining:
        raise ValidationError(
            "Refund amount exceeds the refundable balance",
            details={"amount": str(amount), "refundable": str(remaining)},
        )

    target = payment.target
    if target is None:
        raise NotFound(f"{payment.payment_type.capitalize()} for payment not found")
    # Another payment may still cover the booking/order
    full = _held_amount(target) - amount <= 0
    new_status, new_payment_status = _plan_refund_effect(target, full)
    reason = reason or "Refund requested"

    lifecycle.set_payment_status(
        payment,
        PaymentStatus.refunded if amount == remaining else PaymentStatus.partially_refunded,
        note=reason,
    )
    payment.refund_amount = already_refunded + amount
    payment.refund_reason = reason

    if isinstance(target, Booking):
        target.amount_paid = max(to_money(Decimal(target.amount_paid or 0) - amount), Decimal("0.00"))
        if new_status is not None:
            lifecycle.transition_booking_status(target, new_status, actor=actor, note=reason)
    elif new_status is not None:
        lifecycle.transition_order_status(target, new_status, actor=actor, note=reason)
    target.payment_status = new_payment_status

    db.commit()
    db.refresh(payment)
    logger.info(
        "Refunded %s of payment %s (%s); %s %s is now %s/%s",
        amount, payment.payment_number, payment.status,
        payment.payment_type, target.reference, target.status, target.payment_status,
    )
    return payment
