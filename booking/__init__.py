from .catalog import parse_catalog
from .availability import available_slots, mark_slots, taken_slots
from .errors import (
    BackendError,
    BackendFailure,
    BookingConflict,
    BookingError,
    DateInPast,
    NoSlotSelected,
    SlotAlreadyBooked,
    SubmissionInProgress,
    Unauthenticated,
    UnknownSlot,
)
from .backend import BookingBackend, SqlBookingBackend
from .guard import submit_booking
from .page import CourtBookingPage, SubmissionState
