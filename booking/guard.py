import logging
from datetime import date

from booking.errors import (
    BackendError,
    BackendFailure,
    BookingConflict,
    DateInPast,
    NoSlotSelected,
    SlotAlreadyBooked,
    Unauthenticated,
    UnknownSlot,
)

logger = logging.getLogger(__name__)


def submit_booking(backend, court_id, user_id, slot_label, booking_date: date, *, today: date, taken, catalog=None) -> dict:
    """
    Validate a booking request and issue the insert.

    ``taken`` is the caller's in-memory set of labels booked for ``today``;
    it short-circuits a request only when ``booking_date == today``. Other
    dates rely on the storage constraint alone.

    Returns the inserted booking row, raises a BookingError otherwise.
    """
    if not user_id:
        raise Unauthenticated()

    if not isinstance(slot_label, str):
        raise NoSlotSelected()
    slot_label = slot_label.strip()
    if not slot_label:
        raise NoSlotSelected()

    if booking_date < today:
        raise DateInPast()

    if catalog is not None and slot_label not in catalog:
        raise UnknownSlot()

    if booking_date == today and slot_label in taken:
        logger.info("Slot %r on court %s already taken today, not submitting", slot_label, court_id)
        raise SlotAlreadyBooked()

    try:
        row = backend.insert_booking(court_id, user_id, slot_label, booking_date)
    except BookingConflict as exc:
        logger.info("Booking conflict on court %s for %s %r", court_id, booking_date, slot_label)
        raise SlotAlreadyBooked() from exc
    except BackendError as exc:
        logger.error("Booking insert failed on court %s: %s", court_id, exc.message)
        raise BackendFailure(exc.message) from exc

    return row
