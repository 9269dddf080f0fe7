from datetime import datetime
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True, index=True)  # null for signed-out events
    action = db.Column(db.String(80), nullable=False, index=True)  # e.g. SIGNIN_FAIL, BOOKING_CREATE
    entity = db.Column(db.String(40), nullable=True)  # court, booking, post ...
    entity_id = db.Column(db.String(40), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
