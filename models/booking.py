from datetime import datetime
from models.db import db

class Booking(db.Model):
    __tablename__ = "court_bookings"

    id = db.Column(db.Integer, primary_key=True)

    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    booking_time = db.Column(db.String(80), nullable=False)  # one of the court's slot labels
    booking_date = db.Column(db.Date, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    court = db.relationship("Court", back_populates="bookings")
    user = db.relationship("User")

    __table_args__ = (
        # one booking per court, day and slot; the only double-booking guard
        db.UniqueConstraint("court_id", "booking_date", "booking_time", name="uq_booking_court_date_slot"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "court_id": self.court_id,
            "user_id": self.user_id,
            "booking_time": self.booking_time,
            "booking_date": self.booking_date.isoformat(),
        }
