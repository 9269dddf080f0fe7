from datetime import date, timedelta

from booking import BackendError, SqlBookingBackend
from models.audit_log import AuditLog


def test_create_court_normalises_slot_catalog(court):
    assert court["available_times"] == ["9-11am", "2-4pm"]
    assert court["amenities"] == ["Showers", "Parking"]
    assert court["color"] == "#4B5EAA"


def test_create_court_requires_sign_in(client):
    resp = client.post("/courts", json={"name": "X", "location": "Y"})
    assert resp.status_code == 401


def test_create_court_requires_name_and_location(player):
    player_client, _, headers = player
    resp = player_client.post("/courts", json={"name": "Nameless"}, headers=headers)
    assert resp.status_code == 400


def test_create_court_rejects_missing_csrf(player):
    player_client, _, _ = player
    resp = player_client.post("/courts", json={"name": "A", "location": "B"})
    assert resp.status_code == 403


def test_list_and_search_courts(client, court):
    assert [c["id"] for c in client.get("/courts").get_json()] == [court["id"]]
    assert len(client.get("/courts?q=lalitpur").get_json()) == 1
    assert client.get("/courts?q=pokhara").get_json() == []


def test_only_creator_can_edit_or_delete(court, make_player):
    other_client, _, headers = make_player("bikash@example.com", "Bikash")

    resp = other_client.patch(f"/courts/{court['id']}", json={"name": "Mine now"}, headers=headers)
    assert resp.status_code == 403
    resp = other_client.delete(f"/courts/{court['id']}", headers=headers)
    assert resp.status_code == 403


def test_creator_updates_court(player, court):
    player_client, _, headers = player
    resp = player_client.patch(
        f"/courts/{court['id']}",
        json={"available_times": ["6-7am", "7-8am"], "price_per_hour": "Rs. 900"},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["available_times"] == ["6-7am", "7-8am"]
    assert body["price_per_hour"] == "Rs. 900"
    assert body["name"] == "Smash Arena"


def test_creator_deletes_court(player, court, client):
    player_client, _, headers = player
    player_client.post(f"/courts/{court['id']}/bookings", json={"slot": "9-11am"}, headers=headers)

    assert player_client.delete(f"/courts/{court['id']}", headers=headers).status_code == 200
    assert client.get(f"/courts/{court['id']}").status_code == 404


def test_unknown_court_is_404(client, player):
    player_client, _, headers = player
    assert client.get("/courts/999").status_code == 404
    assert client.get("/courts/999/availability").status_code == 404
    assert player_client.patch("/courts/999", json={}, headers=headers).status_code == 404


def test_court_page_renders_slots(client, court):
    view = client.get(f"/courts/{court['id']}").get_json()

    assert view["court"]["name"] == "Smash Arena"
    assert view["date"] == date.today().isoformat()
    assert view["signed_in"] is False
    assert view["slots"] == [
        {"label": "9-11am", "taken": False},
        {"label": "2-4pm", "taken": False},
    ]
    assert view["form"]["options"] == ["9-11am", "2-4pm"]


def test_book_a_slot(player, court, app):
    player_client, user_id, headers = player
    resp = player_client.post(
        f"/courts/{court['id']}/bookings",
        json={"slot": "2-4pm", "date": date.today().isoformat()},
        headers=headers,
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["booking"]["booking_time"] == "2-4pm"
    assert body["booking"]["user_id"] == user_id
    assert body["page"]["form"]["options"] == ["9-11am"]
    assert body["page"]["state"] == "SUCCESS"
    assert AuditLog.query.filter_by(action="BOOKING_CREATE").count() == 1


def test_booking_defaults_to_today(player, court):
    player_client, _, headers = player
    resp = player_client.post(f"/courts/{court['id']}/bookings", json={"slot": "9-11am"}, headers=headers)
    assert resp.status_code == 201
    assert resp.get_json()["booking"]["booking_date"] == date.today().isoformat()


def test_signed_out_booking_is_rejected(client, court):
    resp = client.post(f"/courts/{court['id']}/bookings", json={"slot": "9-11am"})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "Unauthenticated"


def test_booking_validation_errors(player, court):
    player_client, _, headers = player
    url = f"/courts/{court['id']}/bookings"

    resp = player_client.post(url, json={"slot": ""}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Please select a time slot."

    yesterday = (date.today() - timedelta(days=1)).isoformat()
    resp = player_client.post(url, json={"slot": "9-11am", "date": yesterday}, headers=headers)
    assert resp.get_json()["code"] == "DateInPast"

    resp = player_client.post(url, json={"slot": "1-2am"}, headers=headers)
    assert resp.get_json()["code"] == "UnknownSlot"

    resp = player_client.post(url, json={"slot": "9-11am", "date": "14/03/2026"}, headers=headers)
    assert resp.status_code == 400

    resp = player_client.post(url, json={"slot": 5}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "NoSlotSelected"

    resp = player_client.post(url, json={"slot": "9-11am", "date": 20260314}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid date. Use YYYY-MM-DD"


def test_second_player_cannot_take_a_booked_slot(player, court, make_player):
    first_client, _, first_headers = player
    second_client, _, second_headers = make_player("bikash@example.com", "Bikash")
    url = f"/courts/{court['id']}/bookings"
    today = date.today().isoformat()

    assert first_client.post(url, json={"slot": "9-11am", "date": today}, headers=first_headers).status_code == 201

    resp = second_client.post(url, json={"slot": "9-11am", "date": today}, headers=second_headers)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "This time slot is already booked for the selected date."
    assert AuditLog.query.filter_by(action="BOOKING_FAIL_ALREADY_BOOKED").count() == 1


def test_future_date_conflict_is_caught_by_storage(player, court, make_player):
    first_client, _, first_headers = player
    second_client, _, second_headers = make_player("bikash@example.com", "Bikash")
    url = f"/courts/{court['id']}/bookings"
    tomorrow = (date.today() + timedelta(days=1)).isoformat()

    assert first_client.post(url, json={"slot": "2-4pm", "date": tomorrow}, headers=first_headers).status_code == 201
    resp = second_client.post(url, json={"slot": "2-4pm", "date": tomorrow}, headers=second_headers)
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "SlotAlreadyBooked"


def test_availability_for_a_given_date(player, court, client):
    player_client, _, headers = player
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    player_client.post(f"/courts/{court['id']}/bookings", json={"slot": "9-11am", "date": tomorrow}, headers=headers)

    body = client.get(f"/courts/{court['id']}/availability?date={tomorrow}").get_json()
    assert body["date"] == tomorrow
    assert body["available"] == ["2-4pm"]

    # today is untouched
    assert client.get(f"/courts/{court['id']}/availability").get_json()["available"] == ["9-11am", "2-4pm"]
    assert client.get(f"/courts/{court['id']}/availability?date=soon").status_code == 400


def test_bookings_list_includes_player_names(player, court, client):
    player_client, _, headers = player
    player_client.post(f"/courts/{court['id']}/bookings", json={"slot": "9-11am"}, headers=headers)

    rows = client.get(f"/courts/{court['id']}/bookings").get_json()
    assert [(r["booking_time"], r["user_name"]) for r in rows] == [("9-11am", "Ana")]


def test_availability_storage_failure_is_502(client, court, monkeypatch):
    def broken(self, court_id, booking_date):
        raise BackendError("database is locked")

    monkeypatch.setattr(SqlBookingBackend, "fetch_bookings", broken)

    resp = client.get(f"/courts/{court['id']}/availability")
    assert resp.status_code == 502
    assert resp.get_json()["code"] == "BackendFailure"


def test_deleting_a_court_tells_open_pages(player, court, app):
    player_client, _, headers = player
    player_client.post(f"/courts/{court['id']}/bookings", json={"slot": "9-11am"}, headers=headers)
    received = []
    app.extensions["change_feed"].subscribe(f"bookings:{court['id']}", received.append)

    player_client.delete(f"/courts/{court['id']}", headers=headers)

    assert [(e.event_type, e.old["booking_time"]) for e in received] == [("DELETE", "9-11am")]
