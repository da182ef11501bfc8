import secrets
import string
import threading
import time
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ReferenceExhausted

BOOKING_PREFIX = "BK"
ORDER_PREFIX = "ORD"
PAYMENT_PREFIX = "PAY"

_ALPHABET = string.digits + string.ascii_uppercase
_STAMP_WIDTH = 9  # base36 milliseconds, good until year 5188
MAX_REFERENCE_ATTEMPTS = 10


def _base36(value: int, width: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits)).rjust(width, "0")


class ReferenceGenerator:
    """
    Produce human-readable, sortable references such as ``BK-LX2F9K0QA-7Q3Z``.

    The middle part is a base36 millisecond timestamp, forced strictly
    increasing within the process so references sort in creation order; the
    suffix is random to keep concurrent processes apart.
    """

    def __init__(self, clock: Callable[[], float] = time.time, suffix_length: int = 4):
        self._clock = clock
        self._suffix_length = suffix_length
        self._last_ms = 0
        self._lock = threading.Lock()

    def __call__(self, prefix: str) -> str:
        with self._lock:
            ms = int(self._clock() * 1000)
            if ms <= self._last_ms:
                ms = self._last_ms + 1
            self._last_ms = ms
        suffix = "".join(secrets.choice(_ALPHABET) for _ in range(self._suffix_length))
        return f"{prefix}-{_base36(ms, _STAMP_WIDTH)}-{suffix}"


default_reference_generator = ReferenceGenerator()


def generate_unique_reference(
    db: Session,
    column,
    prefix: str,
    generate: Optional[Callable[[str], str]] = None,
) -> str:
    """Generate a reference not yet present in ``column`` (e.g. ``Booking.booking_number``)."""
    generate = generate or default_reference_generator
    for _ in range(MAX_REFERENCE_ATTEMPTS):
        reference = generate(prefix)
        if not db.query(column).filter(column == reference).first():
            return reference
    raise ReferenceExhausted(
        f"Could not generate a unique {prefix} reference",
        details={"attempts": MAX_REFERENCE_ATTEMPTS},
    )
