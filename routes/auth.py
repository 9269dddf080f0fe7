from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User
from security.password import hash_password, verify_password
from security.password_policy import validate_password
from security.session import create_session, revoke_session, set_session_cookie
from security.csrf import issue_csrf_token, clear_csrf_token
from utils.audit import log_event
from utils.auth_context import login_required


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def _me(user: User) -> dict:
    return {
        **user.to_profile(),
        "email": user.email,
        "phone": user.phone,
    }


@auth_bp.post("/signup")
def signup():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    name = (data.get("name") or "").strip()
    phone = (data.get("phone") or "").strip() or None

    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400
    if not name:
        return jsonify(error="Name is required"), 400
    valid, errors = validate_password(password)
    if not valid:
        return jsonify(error="Password does not meet policy", details=errors), 400

    if User.query.filter_by(email=email).first():
        log_event("SIGNUP_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered"), 409

    user = User(email=email, password_hash=hash_password(password), name=name, phone=phone)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Email already registered"), 409

    log_event("SIGNUP_SUCCESS", user_id=user.id, entity="user", entity_id=user.id)
    return jsonify(id=user.id, message="Signed up successfully"), 201


@auth_bp.post("/signin")
def signin():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("SIGNIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid email or password"), 401

    raw_token = create_session(user.id)

    resp = jsonify(message="Signed in", user=_me(user))
    set_session_cookie(resp, raw_token)
    issue_csrf_token(resp)

    log_event("SIGNIN_SUCCESS", user_id=user.id)
    return resp, 200


@auth_bp.post("/signout")
@login_required
def signout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "shuttlehub_session")
    revoke_session(request.cookies.get(cookie_name))
    log_event("SIGNOUT", user_id=g.user.id)

    resp = jsonify(message="Signed out")
    resp.delete_cookie(cookie_name, path="/")
    clear_csrf_token(resp)
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(_me(g.user)), 200
