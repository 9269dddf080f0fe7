from datetime import date

from flask import Blueprint, request, jsonify, g

from booking import (
    CourtBookingPage,
    SlotAlreadyBooked,
    SqlBookingBackend,
    SubmissionState,
    available_slots,
    mark_slots,
    taken_slots,
)
from booking.errors import BackendError, BackendFailure
from models import db
from models.court import Court
from utils.audit import log_event
from utils.realtime import publish_change

booking_bp = Blueprint("booking", __name__)


def _parse_date(date_str: str) -> date:
    # Expect ISO date like "2026-01-20"
    return date.fromisoformat(date_str)


def _open_page(court_id: int):
    page = CourtBookingPage(SqlBookingBackend(), court_id)
    page.load()
    return page


@booking_bp.get("/courts/<int:court_id>")
def court_page(court_id: int):
    if not db.session.get(Court, court_id):
        return jsonify(error="Court not found"), 404

    page = _open_page(court_id)
    if not page.loaded:
        return jsonify(error=page.error.message), page.error.status
    return jsonify(page.render()), 200


@booking_bp.get("/courts/<int:court_id>/availability")
def court_availability(court_id: int):
    date_str = request.args.get("date")
    try:
        target = _parse_date(date_str) if date_str else date.today()
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400

    if not db.session.get(Court, court_id):
        return jsonify(error="Court not found"), 404

    backend = SqlBookingBackend()
    try:
        court = backend.fetch_court(court_id)
        ledger = backend.fetch_bookings(court_id, target)
    except BackendError as exc:
        failure = BackendFailure(exc.message)
        return jsonify(error=failure.message, code=failure.code), failure.status

    catalog = court["available_times"]
    taken = taken_slots(ledger)
    return jsonify(
        court_id=court_id,
        date=target.isoformat(),
        slots=mark_slots(catalog, taken),
        available=available_slots(catalog, taken),
    ), 200


@booking_bp.post("/courts/<int:court_id>/bookings")
def create_booking(court_id: int):
    if not db.session.get(Court, court_id):
        return jsonify(error="Court not found"), 404

    data = request.get_json(silent=True) or {}
    date_str = data.get("date") or ""
    if not isinstance(date_str, str):
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400
    date_str = date_str.strip()
    try:
        booking_date = _parse_date(date_str) if date_str else date.today()
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400

    page = _open_page(court_id)
    state = page.submit(data.get("slot"), booking_date)
    user = getattr(g, "user", None)
    user_id = user.id if user else None

    if state != SubmissionState.SUCCESS:
        if isinstance(page.error, SlotAlreadyBooked):
            log_event(
                "BOOKING_FAIL_ALREADY_BOOKED",
                user_id=user_id,
                entity="court",
                entity_id=court_id,
                metadata={"slot": data.get("slot"), "date": booking_date.isoformat()},
            )
        return jsonify(error=page.error.message, code=page.error.code, page=page.render()), page.error.status

    row = page.last_booking
    log_event("BOOKING_CREATE", user_id=user_id, entity="booking", entity_id=row["id"], metadata={"court_id": court_id})
    publish_change(page.channel, "INSERT", "court_bookings", new=row)
    return jsonify(booking=row, page=page.render()), 201
