from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.post import Post, Reply
from models.user import User
from utils.audit import log_event
from utils.auth_context import login_required
from utils.realtime import publish_change

community_bp = Blueprint("community", __name__, url_prefix="/posts")


def _with_author(row: dict, author: User) -> dict:
    return {
        **row,
        "user_name": author.name if author else "Unknown",
        "user_avatar": author.avatar_url if author else None,
    }


@community_bp.get("")
def list_posts():
    limit = current_app.config.get("LIST_LIMIT", 200)
    posts = (
        Post.query
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .all()
    )
    return jsonify([_with_author(p.to_dict(), p.author) for p in posts]), 200


@community_bp.post("")
@login_required
def create_post():
    data = request.get_json(silent=True) or {}
    content = (data.get("content") or "").strip()
    image = (data.get("image") or "").strip() or None
    if not content:
        return jsonify(error="content is required"), 400

    post = Post(user_id=g.user.id, content=content, image=image)
    db.session.add(post)
    db.session.commit()

    row = _with_author(post.to_dict(), g.user)
    log_event("POST_CREATE", user_id=g.user.id, entity="post", entity_id=post.id)
    publish_change("posts", "INSERT", "posts", new=row)
    return jsonify(row), 201


@community_bp.get("/<int:post_id>")
def get_post(post_id: int):
    post = db.session.get(Post, post_id)
    if not post:
        return jsonify(error="Post not found"), 404

    return jsonify(
        post=_with_author(post.to_dict(), post.author),
        replies=[_with_author(r.to_dict(), r.author) for r in post.replies],
    ), 200


@community_bp.post("/<int:post_id>/replies")
@login_required
def create_reply(post_id: int):
    post = db.session.get(Post, post_id)
    if not post:
        return jsonify(error="Post not found"), 404

    data = request.get_json(silent=True) or {}
    content = (data.get("content") or "").strip()
    if not content:
        return jsonify(error="content is required"), 400

    reply = Reply(post_id=post.id, user_id=g.user.id, content=content)
    db.session.add(reply)
    db.session.commit()

    row = _with_author(reply.to_dict(), g.user)
    log_event("REPLY_CREATE", user_id=g.user.id, entity="reply", entity_id=reply.id, metadata={"post_id": post.id})
    publish_change(f"replies:{post.id}", "INSERT", "replies", new=row)
    return jsonify(row), 201
