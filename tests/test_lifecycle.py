"""State machine tests on transient ORM objects (no database needed)."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import AlreadyReviewed, InvalidTransition, NotEligible, Unauthorized, ValidationError
from app.models.booking import Booking
from app.models.order import Order
from app.models.payment import Payment
from app.models.user import User
from app.services import lifecycle

NOW = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_user(role="customer"):
    return User(id=uuid.uuid4(), email=f"{role}@example.com", full_name=role.title(), role=role)


def make_booking(booking_type="room", status=None):
    booking = Booking(booking_number="BK-TEST", user_id=uuid.uuid4(), booking_type=booking_type)
    lifecycle.record_creation(booking, now=NOW)
    if status:
        booking.status = status
    return booking


def make_order(status=None, created_at=NOW):
    order = Order(order_number="ORD-TEST", user_id=uuid.uuid4(), order_type="dine-in", created_at=created_at)
    lifecycle.record_creation(order, now=NOW)
    if status:
        order.status = status
    return order


class TestRecordCreation:
    def test_initial_entry(self):
        booking = make_booking()
        assert booking.status == "pending"
        assert len(booking.status_history) == 1
        assert booking.status_history[0].status == "pending"
        assert booking.status_history[0].timestamp == NOW

    def test_only_once(self):
        booking = make_booking()
        with pytest.raises(InvalidTransition):
            lifecycle.record_creation(booking)


class TestOrderTransitions:
    def test_happy_path_grows_history(self):
        order = make_order()
        staff = make_user("staff")
        for step in ("confirmed", "preparing", "ready", "served"):
            before = len(order.status_history)
            lifecycle.transition_order_status(order, step, actor=staff, now=NOW)
            assert order.status == step
            assert len(order.status_history) == before + 1
            assert order.status_history[-1].status == step
            assert order.status_history[-1].updated_by == staff.id

    def test_skipping_a_step_is_refused(self):
        order = make_order()
        with pytest.raises(InvalidTransition) as exc:
            lifecycle.transition_order_status(order, "preparing")
        assert exc.value.current == "pending"
        assert exc.value.target == "preparing"
        assert order.status == "pending"
        assert len(order.status_history) == 1

    def test_unknown_status_is_refused(self):
        order = make_order()
        with pytest.raises(InvalidTransition):
            lifecycle.transition_order_status(order, "teleported")
        assert order.status == "pending"

    def test_terminal_statuses(self):
        for status in ("cancelled", "refunded"):
            order = make_order(status=status)
            with pytest.raises(InvalidTransition):
                lifecycle.transition_order_status(order, "confirmed")

    def test_actual_time_on_delivery(self):
        order = make_order(status="ready", created_at=NOW - timedelta(minutes=42))
        lifecycle.transition_order_status(order, "delivered", now=NOW)
        assert order.actual_time == 42

    def test_actual_time_with_naive_created_at(self):
        order = make_order(status="ready", created_at=(NOW - timedelta(minutes=30)).replace(tzinfo=None))
        lifecycle.transition_order_status(order, "served", now=NOW)
        assert order.actual_time == 30

    def test_can_transition_order(self):
        assert lifecycle.can_transition_order("ready", "delivered")
        assert not lifecycle.can_transition_order("delivered", "ready")
        assert not lifecycle.can_transition_order("nonsense", "ready")


class TestBookingTransitions:
    def test_room_stay(self):
        booking = make_booking()
        lifecycle.transition_booking_status(booking, "confirmed", now=NOW)
        lifecycle.check_in(booking, now=NOW)
        assert booking.actual_check_in == NOW
        lifecycle.check_out(booking, now=NOW + timedelta(days=2))
        assert booking.actual_check_out == NOW + timedelta(days=2)
        lifecycle.transition_booking_status(booking, "completed", now=NOW)
        assert [h.status for h in booking.status_history] == [
            "pending", "confirmed", "checked-in", "checked-out", "completed",
        ]

    def test_second_check_in_is_refused(self):
        booking = make_booking(status="confirmed")
        lifecycle.check_in(booking, now=NOW)
        with pytest.raises(InvalidTransition):
            lifecycle.check_in(booking, now=NOW)
        assert booking.status == "checked-in"
        assert len(booking.status_history) == 2

    def test_check_in_requires_confirmed(self):
        booking = make_booking()
        with pytest.raises(InvalidTransition):
            lifecycle.check_in(booking)

    def test_check_in_is_for_rooms_only(self):
        booking = make_booking(booking_type="table", status="confirmed")
        with pytest.raises(InvalidTransition):
            lifecycle.check_in(booking)
        with pytest.raises(InvalidTransition):
            lifecycle.transition_booking_status(booking, "checked-in")

    def test_room_cannot_complete_without_stay(self):
        booking = make_booking(status="confirmed")
        with pytest.raises(InvalidTransition):
            lifecycle.transition_booking_status(booking, "completed")

    def test_table_completes_from_confirmed(self):
        booking = make_booking(booking_type="table", status="confirmed")
        lifecycle.transition_booking_status(booking, "completed")
        assert booking.status == "completed"

    def test_no_show_needs_admin(self):
        booking = make_booking(status="confirmed")
        with pytest.raises(Unauthorized):
            lifecycle.transition_booking_status(booking, "no-show", actor=make_user("staff"))
        assert booking.status == "confirmed"

        lifecycle.transition_booking_status(booking, "no-show", actor=make_user("admin"))
        assert booking.status == "no-show"

    def test_allowed_targets(self):
        garden = make_booking(booking_type="garden", status="confirmed")
        assert {s.value for s in lifecycle.allowed_booking_targets(garden)} == {
            "completed", "cancelled", "no-show",
        }


class TestCancel:
    def test_cancel_pending_booking(self):
        booking = make_booking()
        guest = make_user()
        lifecycle.cancel(booking, actor=guest, now=NOW)
        assert booking.status == "cancelled"
        assert booking.cancellation_reason == "Customer cancelled"
        assert booking.cancelled_at == NOW
        assert booking.cancelled_by == guest.id

    def test_cancel_with_reason(self):
        order = make_order(status="confirmed")
        lifecycle.cancel(order, reason="Changed my mind")
        assert order.status == "cancelled"
        assert order.cancellation_reason == "Changed my mind"
        assert order.status_history[-1].note == "Changed my mind"

    def test_cannot_cancel_once_preparing(self):
        order = make_order(status="preparing")
        with pytest.raises(InvalidTransition):
            lifecycle.cancel(order)
        assert order.status == "preparing"


class TestReviews:
    def test_review_delivered_order(self):
        order = make_order(status="delivered")
        lifecycle.add_review(order, 5, "Great", now=NOW)
        assert order.has_review is True
        assert order.review_rating == 5
        assert order.reviewed_at == NOW

    def test_second_review_is_refused(self):
        order = make_order(status="served")
        lifecycle.add_review(order, 4, "Good")
        with pytest.raises(AlreadyReviewed):
            lifecycle.add_review(order, 1, "Changed my mind")
        assert order.review_rating == 4
        assert order.review_comment == "Good"

    def test_pending_order_not_eligible(self):
        with pytest.raises(NotEligible):
            lifecycle.add_review(make_order(), 5)

    def test_booking_needs_finished_stay(self):
        with pytest.raises(NotEligible):
            lifecycle.add_review(make_booking(status="confirmed"), 5)
        booking = make_booking(status="checked-out")
        lifecycle.add_review(booking, 3)
        assert booking.has_review is True

    @pytest.mark.parametrize("rating", [0, 6, "5", True])
    def test_rating_range(self, rating):
        with pytest.raises(ValidationError):
            lifecycle.add_review(make_order(status="delivered"), rating)


class TestPaymentStatus:
    def make_payment(self):
        payment = Payment(payment_number="PAY-TEST", payment_type="order", amount=10)
        lifecycle.record_creation(payment, now=NOW)
        return payment

    def test_success_then_refund(self):
        payment = self.make_payment()
        lifecycle.set_payment_status(payment, "success", now=NOW)
        assert payment.processed_at == NOW
        lifecycle.set_payment_status(payment, "partially-refunded", now=NOW)
        lifecycle.set_payment_status(payment, "refunded", now=NOW)
        assert payment.refunded_at == NOW
        assert len(payment.status_history) == 4

    def test_failed_is_terminal(self):
        payment = self.make_payment()
        lifecycle.set_payment_status(payment, "failed", note="Card declined")
        assert payment.failure_message == "Card declined"
        with pytest.raises(InvalidTransition):
            lifecycle.set_payment_status(payment, "success")
