import re

import pytest

from app.core.exceptions import ReferenceExhausted
from app.models.booking import Booking
from app.utils.reference import MAX_REFERENCE_ATTEMPTS, ReferenceGenerator, generate_unique_reference

REFERENCE_RE = re.compile(r"^BK-[0-9A-Z]{9}-[0-9A-Z]{4}$")


def test_format():
    generate = ReferenceGenerator(clock=lambda: 1_700_000_000.0)
    assert REFERENCE_RE.match(generate("BK"))


def test_strictly_increasing_with_frozen_clock():
    generate = ReferenceGenerator(clock=lambda: 1_700_000_000.0)
    stamps = [generate("BK").split("-")[1] for _ in range(50)]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == 50


def test_clock_going_backwards_still_increases():
    ticks = iter([2_000_000_000.0, 1_000_000_000.0])
    generate = ReferenceGenerator(clock=lambda: next(ticks))
    first, second = generate("ORD"), generate("ORD")
    assert second.split("-")[1] > first.split("-")[1]


def test_skips_references_already_taken(db_session, test_user):
    taken = Booking(
        booking_number="BK-TAKEN",
        user_id=test_user.id,
        booking_type="room",
        subtotal=0,
        tax=0,
        total_amount=0,
        status="pending",
    )
    db_session.add(taken)
    db_session.commit()

    candidates = iter(["BK-TAKEN", "BK-FREE"])
    reference = generate_unique_reference(
        db_session, Booking.booking_number, "BK", generate=lambda prefix: next(candidates)
    )
    assert reference == "BK-FREE"


def test_gives_up_when_every_reference_is_taken(db_session, test_user):
    db_session.add(Booking(
        booking_number="BK-SAME",
        user_id=test_user.id,
        booking_type="room",
        subtotal=0,
        tax=0,
        total_amount=0,
        status="pending",
    ))
    db_session.commit()

    calls = []

    def same(prefix):
        calls.append(prefix)
        return "BK-SAME"

    with pytest.raises(ReferenceExhausted):
        generate_unique_reference(db_session, Booking.booking_number, "BK", generate=same)
    assert len(calls) == MAX_REFERENCE_ATTEMPTS
