from flask import Blueprint, request, jsonify, current_app, g

from booking.catalog import parse_catalog
from models import db
from models.booking import Booking
from models.court import Court
from models.user import User
from utils.audit import log_event
from utils.auth_context import login_required, is_owner
from utils.realtime import publish_change
from utils.search import filter_rows

court_bp = Blueprint("court", __name__, url_prefix="/courts")

SEARCH_FIELDS = ("name", "description", "location", "city", "contact_number")
TEXT_FIELDS = ("name", "description", "location", "city", "contact_number", "price_per_hour", "color")


def _text(data: dict, key: str):
    return (data.get(key) or "").strip() or None


def _apply_fields(court: Court, data: dict):
    for key in TEXT_FIELDS:
        if key in data:
            setattr(court, key, _text(data, key))
    if "available_times" in data:
        court.available_times = parse_catalog(data.get("available_times"))
    if "amenities" in data:
        court.amenities = parse_catalog(data.get("amenities"))
    if "images" in data:
        court.images = parse_catalog(data.get("images"))


@court_bp.get("")
def list_courts():
    courts = Court.query.order_by(Court.id.asc()).all()
    rows = filter_rows([c.to_dict() for c in courts], request.args.get("q"), SEARCH_FIELDS)
    return jsonify(rows[: current_app.config.get("LIST_LIMIT", 200)]), 200


@court_bp.post("")
@login_required
def create_court():
    data = request.get_json(silent=True) or {}
    if not _text(data, "name") or not _text(data, "location"):
        return jsonify(error="name and location are required"), 400

    court = Court(created_by=g.user.id, rating=0, reviews=0)
    _apply_fields(court, data)
    if not court.color:
        court.color = "#4B5EAA"
    for key in ("available_times", "amenities", "images"):
        if getattr(court, key) is None:
            setattr(court, key, [])

    db.session.add(court)
    db.session.commit()

    log_event("COURT_CREATE", user_id=g.user.id, entity="court", entity_id=court.id)
    publish_change("courts", "INSERT", "courts", new=court.to_dict())
    return jsonify(court.to_dict()), 201


@court_bp.patch("/<int:court_id>")
@login_required
def update_court(court_id: int):
    court = db.session.get(Court, court_id)
    if not court:
        return jsonify(error="Court not found"), 404
    if not is_owner(court):
        return jsonify(error="Only the court's creator can edit it"), 403

    data = request.get_json(silent=True) or {}
    for key in ("name", "location"):
        if key in data and not _text(data, key):
            return jsonify(error=f"{key} cannot be empty"), 400

    _apply_fields(court, data)
    if not court.color:
        court.color = "#4B5EAA"
    db.session.commit()

    log_event("COURT_UPDATE", user_id=g.user.id, entity="court", entity_id=court.id, metadata={"fields": sorted(data)})
    publish_change("courts", "UPDATE", "courts", new=court.to_dict())
    return jsonify(court.to_dict()), 200


@court_bp.delete("/<int:court_id>")
@login_required
def delete_court(court_id: int):
    court = db.session.get(Court, court_id)
    if not court:
        return jsonify(error="Court not found"), 404
    if not is_owner(court):
        return jsonify(error="Only the court's creator can delete it"), 403

    removed = [b.to_dict() for b in court.bookings]
    db.session.delete(court)
    db.session.commit()

    log_event("COURT_DELETE", user_id=g.user.id, entity="court", entity_id=court_id)
    publish_change("courts", "DELETE", "courts", old={"id": court_id})
    # open court pages drop the removed bookings
    for row in removed:
        publish_change(f"bookings:{court_id}", "DELETE", "court_bookings", old=row)
    return jsonify(message="Court deleted"), 200


@court_bp.get("/<int:court_id>/bookings")
def list_court_bookings(court_id: int):
    if not db.session.get(Court, court_id):
        return jsonify(error="Court not found"), 404

    rows = (
        db.session.query(Booking, User.name)
        .outerjoin(User, Booking.user_id == User.id)
        .filter(Booking.court_id == court_id)
        .order_by(Booking.booking_date.asc(), Booking.booking_time.asc())
        .all()
    )
    return jsonify([
        {**b.to_dict(), "user_name": name or "Unknown"}
        for b, name in rows
    ]), 200
