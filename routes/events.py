import json
import logging
import queue
import re

from flask import Blueprint, Response, current_app, jsonify

from utils.realtime import get_feed

logger = logging.getLogger(__name__)

events_bp = Blueprint("events", __name__, url_prefix="/events")

CHANNEL_PATTERN = re.compile(r"^(courts|tournaments|posts|replies:\d+|bookings:\d+)$")


def event_stream(feed, channel: str, keepalive_seconds: float):
    """Yield Server-Sent Events for ``channel`` until the client goes away."""
    inbox = queue.Queue()
    subscription = feed.subscribe(channel, inbox.put)
    try:
        yield f"event: ready\ndata: {json.dumps({'channel': channel})}\n\n"
        while True:
            try:
                event = inbox.get(timeout=keepalive_seconds)
            except queue.Empty:
                yield ": keep-alive\n\n"
                continue
            yield f"data: {json.dumps(event.to_dict(), default=str)}\n\n"
    finally:
        # runs when the response is closed
        subscription.unsubscribe()


@events_bp.get("/<path:channel>")
def stream(channel: str):
    if not CHANNEL_PATTERN.match(channel):
        return jsonify(error="Unknown channel"), 404

    keepalive = current_app.config.get("FEED_KEEPALIVE_SECONDS", 15)
    resp = Response(event_stream(get_feed(), channel, keepalive), mimetype="text/event-stream")
    resp.headers["Cache-Control"] = "no-cache"
    resp.headers["X-Accel-Buffering"] = "no"
    return resp
