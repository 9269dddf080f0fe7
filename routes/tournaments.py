from datetime import date

from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy.exc import IntegrityError

from models import db
from models.tournament import Tournament, Registration
from models.user import User
from utils.audit import log_event
from utils.auth_context import login_required, is_owner
from utils.realtime import publish_change
from utils.search import filter_rows

tournament_bp = Blueprint("tournaments", __name__, url_prefix="/tournaments")

SEARCH_FIELDS = ("name", "description", "location", "city")


def _validate(data: dict, partial: bool = False):
    """
    Returns (fields, error). ``partial`` only checks keys that are present.
    """
    fields = {}

    for key in ("name", "location"):
        if key in data or not partial:
            value = (data.get(key) or "").strip()
            if not value:
                return None, f"Tournament {key} is required."
            fields[key] = value

    if "date" in data or not partial:
        try:
            fields["date"] = date.fromisoformat((data.get("date") or "").strip())
        except ValueError:
            return None, "Tournament date is required (YYYY-MM-DD)."

    if "max_players" in data or not partial:
        try:
            max_players = int(data.get("max_players"))
        except (TypeError, ValueError):
            max_players = 0
        if max_players <= 0:
            return None, "Max players must be a positive number."
        fields["max_players"] = max_players

    for key in ("description", "category", "color"):
        if key in data:
            fields[key] = (data.get(key) or "").strip()
    if "city" in data:
        fields["city"] = (data.get("city") or "").strip() or None
    if "images" in data:
        images = data.get("images") or []
        fields["images"] = [images] if isinstance(images, str) else list(images)

    return fields, None


@tournament_bp.get("")
def list_tournaments():
    category = (request.args.get("category") or "all").strip()

    q = Tournament.query
    if category.lower() != "all":
        q = q.filter(Tournament.category == category)
    rows = [t.to_dict() for t in q.order_by(Tournament.id.asc()).all()]

    rows = filter_rows(rows, request.args.get("q"), SEARCH_FIELDS)
    return jsonify(rows[: current_app.config.get("LIST_LIMIT", 200)]), 200


@tournament_bp.post("")
@login_required
def create_tournament():
    fields, error = _validate(request.get_json(silent=True) or {})
    if error:
        return jsonify(error=error), 400

    fields.setdefault("description", "")
    if not fields.get("category"):
        fields["category"] = "Open"
    if not fields.get("color"):
        fields["color"] = "#4f46e5"
    tournament = Tournament(created_by=g.user.id, registered_players=0, **fields)
    db.session.add(tournament)
    db.session.commit()

    log_event("TOURNAMENT_CREATE", user_id=g.user.id, entity="tournament", entity_id=tournament.id)
    publish_change("tournaments", "INSERT", "tournaments", new=tournament.to_dict())
    return jsonify(tournament.to_dict()), 201


@tournament_bp.get("/<int:tournament_id>")
def get_tournament(tournament_id: int):
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return jsonify(error="Tournament not found"), 404

    out = {
        **tournament.to_dict(),
        "creator_name": tournament.creator.name if tournament.creator else "Unknown",
    }

    # registrations are only visible to signed-in players
    if getattr(g, "user", None) is not None:
        out["registrations"] = [
            {
                "id": r.id,
                "user_id": r.user_id,
                "user_name": r.user.name if r.user else "Unknown",
                "registered_at": r.registered_at.isoformat(),
            }
            for r in tournament.registrations
        ]
        out["is_registered"] = any(r.user_id == g.user.id for r in tournament.registrations)

    return jsonify(out), 200


@tournament_bp.patch("/<int:tournament_id>")
@login_required
def update_tournament(tournament_id: int):
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return jsonify(error="Tournament not found"), 404
    if not is_owner(tournament):
        return jsonify(error="Only the tournament's creator can edit it"), 403

    fields, error = _validate(request.get_json(silent=True) or {}, partial=True)
    if error:
        return jsonify(error=error), 400
    if fields.get("max_players", tournament.max_players) < tournament.registered_players:
        return jsonify(error="Max players cannot be below the number already registered."), 400

    for key, value in fields.items():
        setattr(tournament, key, value)
    db.session.commit()

    log_event("TOURNAMENT_UPDATE", user_id=g.user.id, entity="tournament", entity_id=tournament.id, metadata={"fields": sorted(fields)})
    publish_change("tournaments", "UPDATE", "tournaments", new=tournament.to_dict())
    return jsonify(tournament.to_dict()), 200


@tournament_bp.delete("/<int:tournament_id>")
@login_required
def delete_tournament(tournament_id: int):
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return jsonify(error="Tournament not found"), 404
    if not is_owner(tournament):
        return jsonify(error="Only the tournament's creator can delete it"), 403

    db.session.delete(tournament)
    db.session.commit()

    log_event("TOURNAMENT_DELETE", user_id=g.user.id, entity="tournament", entity_id=tournament_id)
    publish_change("tournaments", "DELETE", "tournaments", old={"id": tournament_id})
    return jsonify(message="Tournament deleted"), 200


@tournament_bp.post("/<int:tournament_id>/register")
def register(tournament_id: int):
    if getattr(g, "user", None) is None:
        return jsonify(error="You must be signed in to register."), 401

    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return jsonify(error="Tournament not found"), 404
    if tournament.is_full:
        return jsonify(error="This tournament is full."), 409

    registration = Registration(user_id=g.user.id, tournament_id=tournament.id)
    db.session.add(registration)
    tournament.registered_players = Tournament.registered_players + 1
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # uq_registration_user_tournament
        return jsonify(error="You are already registered for this tournament."), 409

    db.session.refresh(tournament)
    log_event("TOURNAMENT_REGISTER", user_id=g.user.id, entity="tournament", entity_id=tournament.id)
    publish_change("tournaments", "UPDATE", "tournaments", new=tournament.to_dict())
    return jsonify(
        registration={
            "id": registration.id,
            "user_id": registration.user_id,
            "user_name": g.user.name,
            "registered_at": registration.registered_at.isoformat(),
        },
        tournament=tournament.to_dict(),
    ), 201
