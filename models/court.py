from datetime import datetime
from models.db import db

class Court(db.Model):
    __tablename__ = "courts"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(160), nullable=False)
    city = db.Column(db.String(80), nullable=True)
    contact_number = db.Column(db.String(30), nullable=True)

    # bookable slot labels, display order = insertion order
    available_times = db.Column(db.JSON, nullable=False, default=list)
    amenities = db.Column(db.JSON, nullable=False, default=list)
    images = db.Column(db.JSON, nullable=False, default=list)

    price_per_hour = db.Column(db.String(40), nullable=True)  # free text e.g. "Rs. 800"
    color = db.Column(db.String(20), nullable=False, default="#4B5EAA")
    rating = db.Column(db.Float, nullable=False, default=0)
    reviews = db.Column(db.Integer, nullable=False, default=0)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    bookings = db.relationship(
        "Booking",
        back_populates="court",
        cascade="all, delete-orphan",
    )

    @property
    def catalog(self):
        return list(self.available_times or [])

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "city": self.city,
            "contact_number": self.contact_number,
            "available_times": self.catalog,
            "amenities": list(self.amenities or []),
            "images": list(self.images or []),
            "price_per_hour": self.price_per_hour,
            "color": self.color,
            "rating": self.rating,
            "reviews": self.reviews,
            "created_by": self.created_by,
        }
