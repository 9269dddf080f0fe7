from datetime import date

import pytest

import security.password
from app import create_app
from booking.backend import BookingBackend
from booking.errors import BackendError, BookingConflict
from config import Config
from models import db

PASSWORD = "shuttle123"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    FEED_KEEPALIVE_SECONDS = 1
    LOG_LEVEL = "WARNING"


class FakeBackend(BookingBackend):
    """In-memory backend that records every call it receives."""

    def __init__(self, courts=None, bookings=None, user_id=1):
        self.courts = courts or {}
        self.bookings = list(bookings or [])
        self.user_id = user_id
        self.calls = []
        self.fail_with = None

    def get_current_user(self):
        self.calls.append(("get_current_user",))
        return self.user_id

    def fetch_court(self, court_id):
        self.calls.append(("fetch_court", court_id))
        if court_id not in self.courts:
            raise BackendError("Court not found")
        return self.courts[court_id]

    def fetch_bookings(self, court_id, booking_date):
        self.calls.append(("fetch_bookings", court_id, booking_date))
        return [
            b for b in self.bookings
            if b["court_id"] == court_id and b["booking_date"] == booking_date.isoformat()
        ]

    def insert_booking(self, court_id, user_id, slot_label, booking_date):
        self.calls.append(("insert_booking", court_id, user_id, slot_label, booking_date))
        if self.fail_with:
            raise self.fail_with
        for b in self.bookings:
            if (b["court_id"], b["booking_date"], b["booking_time"]) == (court_id, booking_date.isoformat(), slot_label):
                raise BookingConflict()
        row = {
            "id": len(self.bookings) + 1,
            "court_id": court_id,
            "user_id": user_id,
            "booking_time": slot_label,
            "booking_date": booking_date.isoformat(),
        }
        self.bookings.append(row)
        return row

    def inserts(self):
        return [c for c in self.calls if c[0] == "insert_booking"]


@pytest.fixture
def today():
    return date(2026, 3, 14)


@pytest.fixture
def fake_backend():
    court = {
        "id": 7,
        "name": "Smash Arena",
        "available_times": ["9-11am", "2-4pm"],
    }
    return FakeBackend(courts={7: court})


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(security.password, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def signup(client, email, name="Player", password=PASSWORD):
    resp = client.post("/auth/signup", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["id"]


def signin(client, email, password=PASSWORD):
    resp = client.post("/auth/signin", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"X-CSRF-Token": client.get_cookie("csrf_token").value}


@pytest.fixture
def make_player(app):
    """Returns a factory giving (client, user_id, csrf headers) for a fresh signed-in player."""
    def _make(email, name="Player"):
        player_client = app.test_client()
        user_id = signup(player_client, email, name)
        headers = signin(player_client, email)
        return player_client, user_id, headers
    return _make


@pytest.fixture
def player(make_player):
    return make_player("ana@example.com", "Ana")


@pytest.fixture
def court(player):
    player_client, _, headers = player
    resp = player_client.post(
        "/courts",
        json={
            "name": "Smash Arena",
            "location": "Jhamsikhel",
            "city": "Lalitpur",
            "description": "Four wooden courts",
            "available_times": "9-11am, 2-4pm ,",
            "amenities": "Showers, Parking",
            "price_per_hour": "Rs. 800",
            "contact_number": "9800000000",
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()
