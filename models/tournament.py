from datetime import datetime
from models.db import db


class Tournament(db.Model):
    __tablename__ = "tournaments"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(160), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    date = db.Column(db.Date, nullable=False)
    location = db.Column(db.String(160), nullable=False)
    city = db.Column(db.String(80), nullable=True)
    category = db.Column(db.String(40), nullable=False, default="Open")
    color = db.Column(db.String(20), nullable=False, default="#4f46e5")
    images = db.Column(db.JSON, nullable=False, default=list)

    registered_players = db.Column(db.Integer, nullable=False, default=0)
    max_players = db.Column(db.Integer, nullable=False)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    creator = db.relationship("User")
    registrations = db.relationship(
        "Registration",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="Registration.registered_at",
    )

    @property
    def is_full(self):
        return self.registered_players >= self.max_players

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "date": self.date.isoformat(),
            "location": self.location,
            "city": self.city,
            "category": self.category,
            "color": self.color,
            "images": list(self.images or []),
            "registered_players": self.registered_players,
            "max_players": self.max_players,
            "created_by": self.created_by,
        }


class Registration(db.Model):
    __tablename__ = "registrations"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey("tournaments.id"), nullable=False, index=True)
    registered_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    tournament = db.relationship("Tournament", back_populates="registrations")
    user = db.relationship("User")

    __table_args__ = (
        db.UniqueConstraint("user_id", "tournament_id", name="uq_registration_user_tournament"),
    )
