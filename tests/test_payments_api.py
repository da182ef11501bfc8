"""Payments and refunds, and their effect on bookings and orders."""

from decimal import Decimal

import pytest

from app.models.booking import Booking
from app.models.order import Order

API = "/api/v1"


@pytest.fixture
def booking(client, auth_headers, test_room):
    response = client.post(
        f"{API}/bookings/room",
        json={
            "room_id": str(test_room.id),
            "check_in_date": "2030-06-01T14:00:00Z",
            "check_out_date": "2030-06-04T14:00:00Z",
            "number_of_guests": 2,
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def order(client, auth_headers, menu_items):
    response = client.post(
        f"{API}/orders/",
        json={
            "order_type": "takeout",
            "items": [{"menu_item_id": str(menu_items["burger"].id), "quantity": 2}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def pay(client, headers, **body):
    body.setdefault("payment_method", "card")
    return client.post(f"{API}/payments/", json=body, headers=headers)


class TestPayBooking:
    def test_deposit_confirms_booking(self, client, auth_headers, booking, db_session):
        response = pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="66.00")
        assert response.status_code == 201, response.text
        payment = response.json()
        assert payment["status"] == "success"
        assert payment["payment_number"].startswith("PAY-")
        assert [h["status"] for h in payment["status_history"]] == ["pending", "success"]

        stored = db_session.query(Booking).one()
        assert stored.status == "confirmed"
        assert stored.payment_status == "deposit-paid"
        assert stored.deposit_paid is True
        assert stored.amount_paid == Decimal("66.00")

    def test_then_pay_balance(self, client, auth_headers, booking, db_session):
        pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="66.00")
        response = pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="264.00")
        assert response.status_code == 201, response.text

        stored = db_session.query(Booking).one()
        assert stored.payment_status == "fully-paid"
        assert stored.amount_paid == Decimal("330.00")

        response = pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="1.00")
        assert response.status_code == 400
        assert response.json()["error"] == "NOT_ELIGIBLE"

    def test_wrong_amount(self, client, auth_headers, booking):
        response = pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="10.00")
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_only_owner_can_pay(self, client, other_headers, booking):
        response = pay(client, other_headers, payment_type="booking", booking_id=booking["id"], amount="330.00")
        assert response.status_code == 403

    def test_target_must_match_type(self, client, auth_headers, booking):
        response = pay(client, auth_headers, payment_type="order", booking_id=booking["id"], amount="330.00")
        assert response.status_code == 422


class TestPayOrder:
    def test_full_payment(self, client, auth_headers, order, db_session):
        response = pay(client, auth_headers, payment_type="order", order_id=order["id"], amount="27.50")
        assert response.status_code == 201, response.text

        stored = db_session.query(Order).one()
        assert stored.payment_status == "paid"
        assert stored.status == "confirmed"
        assert [h.status for h in stored.status_history] == ["pending", "confirmed"]

    def test_history(self, client, auth_headers, other_headers, order):
        pay(client, auth_headers, payment_type="order", order_id=order["id"], amount="27.50")
        assert client.get(f"{API}/payments/history", headers=auth_headers).json()["total"] == 1
        assert client.get(f"{API}/payments/history", headers=other_headers).json()["total"] == 0


class TestRefunds:
    def paid_order(self, client, auth_headers, order):
        response = pay(client, auth_headers, payment_type="order", order_id=order["id"], amount="27.50")
        return response.json()

    def test_refund_delivered_order(self, client, auth_headers, staff_headers, admin_headers, order, db_session):
        payment = self.paid_order(client, auth_headers, order)
        for status in ("preparing", "ready", "delivered"):
            client.patch(f"{API}/admin/orders/{order['id']}/status", json={"status": status}, headers=staff_headers)

        response = client.post(
            f"{API}/admin/payments/{payment['id']}/refund", json={"reason": "Cold food"}, headers=admin_headers,
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "refunded"
        assert Decimal(response.json()["refund_amount"]) == Decimal("27.50")

        stored = db_session.query(Order).one()
        assert stored.status == "refunded"
        assert stored.payment_status == "refunded"

    def test_refund_confirmed_order_cancels_it(self, client, auth_headers, admin_headers, order, db_session):
        payment = self.paid_order(client, auth_headers, order)
        response = client.post(f"{API}/admin/payments/{payment['id']}/refund", json={}, headers=admin_headers)
        assert response.status_code == 200
        stored = db_session.query(Order).one()
        assert stored.status == "cancelled"
        assert stored.payment_status == "refunded"

    def test_refund_ready_order_is_refused(self, client, auth_headers, staff_headers, admin_headers, order, db_session):
        payment = self.paid_order(client, auth_headers, order)
        for status in ("preparing", "ready"):
            client.patch(f"{API}/admin/orders/{order['id']}/status", json={"status": status}, headers=staff_headers)

        response = client.post(f"{API}/admin/payments/{payment['id']}/refund", json={}, headers=admin_headers)
        assert response.status_code == 409
        db_session.expire_all()
        stored = db_session.query(Order).one()
        assert stored.status == "ready"
        assert stored.payment_status == "paid"
        assert stored.payments[0].status == "success"

    def test_partial_then_full_refund_of_booking(self, client, auth_headers, admin_headers, booking, db_session):
        payment = pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="330.00").json()
        url = f"{API}/admin/payments/{payment['id']}/refund"

        response = client.post(url, json={"amount": "100.00"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "partially-refunded"
        stored = db_session.query(Booking).one()
        assert stored.status == "confirmed"
        assert stored.payment_status == "partially-refunded"

        response = client.post(url, json={"amount": "500.00"}, headers=admin_headers)
        assert response.status_code == 400

        response = client.post(url, json={}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "refunded"
        assert Decimal(response.json()["refund_amount"]) == Decimal("330.00")
        stored = db_session.query(Booking).one()
        assert stored.status == "cancelled"
        assert stored.payment_status == "refunded"
        assert stored.amount_paid == Decimal("0.00")

    def test_refunding_deposit_keeps_booking_paid_by_balance(
        self, client, auth_headers, admin_headers, booking, db_session,
    ):
        deposit = pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="66.00").json()
        balance = pay(client, auth_headers, payment_type="booking", booking_id=booking["id"], amount="264.00").json()

        response = client.post(f"{API}/admin/payments/{deposit['id']}/refund", json={}, headers=admin_headers)
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "refunded"
        stored = db_session.query(Booking).one()
        assert stored.status == "confirmed"
        assert stored.payment_status == "partially-refunded"
        assert stored.amount_paid == Decimal("264.00")

        response = client.post(f"{API}/admin/payments/{balance['id']}/refund", json={}, headers=admin_headers)
        assert response.status_code == 200, response.text
        stored = db_session.query(Booking).one()
        assert stored.status == "cancelled"
        assert stored.payment_status == "refunded"
        assert stored.amount_paid == Decimal("0.00")

    def test_refund_needs_admin(self, client, auth_headers, staff_headers, order):
        payment = self.paid_order(client, auth_headers, order)
        response = client.post(f"{API}/admin/payments/{payment['id']}/refund", json={}, headers=staff_headers)
        assert response.status_code == 403
