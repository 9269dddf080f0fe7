"""
Storage contract used by the booking core.

The page controller and the guard only ever talk to a ``BookingBackend``;
``SqlBookingBackend`` is the implementation backed by the app database.
"""
import logging
from abc import ABC, abstractmethod
from datetime import date

from flask import g
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from booking.errors import BackendError, BookingConflict
from models import db
from models.booking import Booking
from models.court import Court

logger = logging.getLogger(__name__)


class BookingBackend(ABC):

    @abstractmethod
    def get_current_user(self):
        """Id of the signed-in user, or None. Never raises."""

    @abstractmethod
    def fetch_court(self, court_id: int) -> dict:
        """Court record; BackendError when it does not exist."""

    @abstractmethod
    def fetch_bookings(self, court_id: int, booking_date: date) -> list[dict]:
        """Ledger rows for exactly (court, date)."""

    @abstractmethod
    def insert_booking(self, court_id: int, user_id: int, slot_label: str, booking_date: date) -> dict:
        """Insert one booking. BookingConflict when (court, date, slot) is taken."""


class SqlBookingBackend(BookingBackend):

    def __init__(self, user_loader=None):
        self._user_loader = user_loader or (lambda: getattr(g, "user", None))

    def get_current_user(self):
        try:
            user = self._user_loader()
        except Exception as exc:
            logger.warning("Could not resolve current user: %s", exc)
            return None
        return user.id if user is not None else None

    def fetch_court(self, court_id: int) -> dict:
        try:
            court = db.session.get(Court, court_id)
        except SQLAlchemyError as exc:
            raise BackendError(f"Failed to fetch court: {exc}") from exc
        if court is None:
            raise BackendError("Court not found")
        return court.to_dict()

    def fetch_bookings(self, court_id: int, booking_date: date) -> list[dict]:
        try:
            rows = (
                Booking.query
                .filter_by(court_id=court_id, booking_date=booking_date)
                .order_by(Booking.id.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise BackendError(f"Failed to fetch bookings: {exc}") from exc
        return [b.to_dict() for b in rows]

    def insert_booking(self, court_id: int, user_id: int, slot_label: str, booking_date: date) -> dict:
        booking = Booking(
            court_id=court_id,
            user_id=user_id,
            booking_time=slot_label,
            booking_date=booking_date,
        )
        db.session.add(booking)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            # uq_booking_court_date_slot
            raise BookingConflict() from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise BackendError(f"Failed to book the court: {exc}") from exc
        return booking.to_dict()
