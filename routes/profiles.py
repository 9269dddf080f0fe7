from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.user import User
from models.court import Court
from models.post import Post
from models.tournament import Tournament, Registration
from utils.audit import log_event
from utils.auth_context import login_required
from utils.search import matches_query

profile_bp = Blueprint("profiles", __name__)

PROFILE_FIELDS = ("name", "phone", "avatar_url", "bio")


@profile_bp.get("/profile")
@login_required
def my_profile():
    user = g.user
    created = (
        Tournament.query
        .filter_by(created_by=user.id)
        .order_by(Tournament.date.asc())
        .all()
    )
    registered = (
        Tournament.query
        .join(Registration, Registration.tournament_id == Tournament.id)
        .filter(Registration.user_id == user.id)
        .order_by(Tournament.date.asc())
        .all()
    )
    courts = Court.query.filter_by(created_by=user.id).order_by(Court.id.asc()).all()

    return jsonify(
        profile={**user.to_profile(), "email": user.email, "phone": user.phone},
        created_tournaments=[t.to_dict() for t in created],
        registered_tournaments=[t.to_dict() for t in registered],
        courts=[c.to_dict() for c in courts],
    ), 200


@profile_bp.post("/profile")
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    updates = {k: data[k] for k in PROFILE_FIELDS if k in data}

    if "name" in updates:
        name = (updates["name"] or "").strip()
        if not name:
            return jsonify(error="Name cannot be empty"), 400
        updates["name"] = name

    for field, value in updates.items():
        if field != "name" and isinstance(value, str):
            # blank optional fields are cleared
            value = value.strip() or None
        setattr(g.user, field, value)
    db.session.commit()

    log_event("PROFILE_UPDATE", user_id=g.user.id, entity="user", entity_id=g.user.id, metadata={"fields": sorted(updates)})
    return jsonify(g.user.to_profile()), 200


@profile_bp.get("/users")
def list_users():
    query = request.args.get("q")
    limit = current_app.config.get("LIST_LIMIT", 200)

    rows = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    profiles = [u.to_profile() for u in rows if matches_query(query, u.name)]
    return jsonify(profiles[:limit]), 200


@profile_bp.get("/users/<int:user_id>")
def get_user(user_id: int):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify(error="User not found"), 404

    posts = (
        Post.query
        .filter_by(user_id=user.id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )
    return jsonify(profile=user.to_profile(), posts=[p.to_dict() for p in posts]), 200
