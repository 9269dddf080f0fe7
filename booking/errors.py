class BackendError(Exception):
    """Failure reported by the storage backend."""

    def __init__(self, message: str = "Backend request failed"):
        super().__init__(message)
        self.message = message


class BookingConflict(BackendError):
    """Unique constraint on (court, date, slot) rejected the insert."""

    def __init__(self, message: str = "Booking conflicts with an existing booking"):
        super().__init__(message)


class BookingError(Exception):
    status = 400
    message = "Booking failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    @property
    def code(self) -> str:
        return type(self).__name__


class Unauthenticated(BookingError):
    status = 401
    message = "You must be signed in to book a court"


class NoSlotSelected(BookingError):
    message = "Please select a time slot."


class SlotAlreadyBooked(BookingError):
    status = 409
    message = "This time slot is already booked for the selected date."


class DateInPast(BookingError):
    message = "Bookings cannot be made for past dates."


class UnknownSlot(BookingError):
    message = "That time slot is not offered by this court."


class SubmissionInProgress(BookingError):
    status = 409
    message = "A booking is already being submitted."


class BackendFailure(BookingError):
    status = 502
    message = "Failed to book the court."
