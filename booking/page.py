"""
Page-level controller for a court's booking view.

One instance backs one page session: ``load()`` runs once and captures
"today", the court record and today's ledger; ``submit()`` drives a single
booking attempt through IDLE -> SUBMITTING -> SUCCESS | FAILED.
"""
import logging
from datetime import date

from booking.availability import available_slots, mark_slots, taken_slots
from booking.errors import BackendError, BackendFailure, BookingError, SubmissionInProgress
from booking.guard import submit_booking
from utils.reducers import append_if_absent, apply_change, remove_by_id, upsert_by_id

logger = logging.getLogger(__name__)


class SubmissionState:
    IDLE = "IDLE"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class CourtBookingPage:

    def __init__(self, backend, court_id: int, today: date = None):
        self.backend = backend
        self.court_id = court_id
        # fixed for the lifetime of the page, never re-derived
        self.today = today or date.today()

        self.user_id = None
        self.court = None
        self.bookings: list[dict] = []
        self.taken: list[str] = []

        self.state = SubmissionState.IDLE
        self.error = None
        self.last_booking = None
        self.loaded = False
        self._subscription = None

    @property
    def channel(self) -> str:
        return f"bookings:{self.court_id}"

    def load(self) -> bool:
        self.user_id = self.backend.get_current_user()
        try:
            self.court = self.backend.fetch_court(self.court_id)
            self.bookings = self.backend.fetch_bookings(self.court_id, self.today)
        except BackendError as exc:
            logger.warning("Failed to load court %s: %s", self.court_id, exc.message)
            self.error = BackendFailure(exc.message)
            return False

        self.taken = sorted(taken_slots(self.bookings), key=self._catalog_position)
        self.loaded = True
        return True

    @property
    def catalog(self) -> list[str]:
        if not self.court:
            return []
        return list(self.court.get("available_times") or [])

    @property
    def available(self) -> list[str]:
        return available_slots(self.catalog, self.taken)

    def _catalog_position(self, label):
        catalog = self.catalog
        return catalog.index(label) if label in catalog else len(catalog)

    def submit(self, slot_label: str, booking_date: date) -> str:
        if self.state == SubmissionState.SUBMITTING:
            self.error = SubmissionInProgress()
            return self.state

        if not self.loaded:
            self.error = BackendFailure("Court details are not loaded")
            self.state = SubmissionState.FAILED
            return self.state

        self.state = SubmissionState.SUBMITTING
        self.error = None
        try:
            row = submit_booking(
                self.backend,
                self.court_id,
                self.user_id,
                slot_label,
                booking_date,
                today=self.today,
                taken=set(self.taken),
                catalog=self.catalog,
            )
        except BookingError as exc:
            self.error = exc
            self.state = SubmissionState.FAILED
            return self.state

        self.last_booking = row
        # other dates are not reflected until the next load
        if booking_date == self.today:
            self._record_booking(row)
        self.error = None
        self.state = SubmissionState.SUCCESS
        return self.state

    def _record_booking(self, row: dict):
        self.bookings = upsert_by_id(self.bookings, row)
        self.taken = append_if_absent(self.taken, row["booking_time"])

    # live updates

    def subscribe(self, feed):
        if self._subscription is None:
            self._subscription = feed.subscribe(self.channel, self._on_change)
        return self._subscription

    def _on_change(self, event):
        today = self.today.isoformat()
        if event.event_type == "DELETE":
            row = event.old or {}
        else:
            row = event.new or {}

        if row.get("booking_date") == today:
            self.bookings = apply_change(self.bookings, event)
        elif event.event_type == "UPDATE":
            # moved off today
            self.bookings = remove_by_id(self.bookings, row.get("id"))
        else:
            return

        if event.event_type == "INSERT":
            self.taken = append_if_absent(self.taken, row["booking_time"])
        else:
            self.taken = sorted(taken_slots(self.bookings), key=self._catalog_position)

    def close(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # presentation

    def render(self) -> dict:
        options = self.available
        return {
            "court": self.court,
            "date": self.today.isoformat(),
            "signed_in": self.user_id is not None,
            "slots": mark_slots(self.catalog, self.taken),
            "form": {
                "options": options,
                "min_date": self.today.isoformat(),
                "disabled": self.state == SubmissionState.SUBMITTING or not options,
                "empty_message": None if options else "No times available",
            },
            "state": self.state,
            "error": self.error.message if self.error else None,
        }
