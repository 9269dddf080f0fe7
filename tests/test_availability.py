from booking import available_slots, mark_slots, parse_catalog, taken_slots


def test_nothing_taken_returns_catalog():
    assert available_slots(["9-11am", "2-4pm"], set()) == ["9-11am", "2-4pm"]


def test_taken_slot_is_removed():
    assert available_slots(["9-11am", "2-4pm"], {"9-11am"}) == ["2-4pm"]


def test_fully_booked_catalog_offers_nothing():
    catalog = ["6-7am", "7-8am", "5-6pm"]
    assert available_slots(catalog, set(catalog)) == []


def test_order_of_remaining_slots_is_kept():
    catalog = ["5-6pm", "6-7am", "12-1pm", "7-8am", "8-9pm"]
    assert available_slots(catalog, {"12-1pm", "6-7am"}) == ["5-6pm", "7-8am", "8-9pm"]


def test_same_inputs_give_same_output():
    catalog = ["a", "b", "c"]
    taken = {"b"}
    first = available_slots(catalog, taken)
    assert available_slots(catalog, taken) == first
    assert catalog == ["a", "b", "c"]
    assert taken == {"b"}


def test_taken_labels_outside_catalog_are_ignored():
    assert available_slots(["a", "b"], {"zzz"}) == ["a", "b"]


def test_empty_catalog():
    assert available_slots([], {"a"}) == []


def test_mark_slots_flags_taken_in_catalog_order():
    assert mark_slots(["9-11am", "2-4pm"], ["2-4pm"]) == [
        {"label": "9-11am", "taken": False},
        {"label": "2-4pm", "taken": True},
    ]


def test_taken_slots_from_ledger_rows():
    rows = [
        {"id": 1, "booking_time": "9-11am"},
        {"id": 2, "booking_time": "2-4pm"},
        {"id": 3, "booking_time": "9-11am"},
    ]
    assert taken_slots(rows) == {"9-11am", "2-4pm"}
    assert taken_slots([]) == set()


def test_parse_catalog_splits_and_trims():
    assert parse_catalog(" 10:00 AM - 12:00 PM,2:00 PM - 4:00 PM ") == [
        "10:00 AM - 12:00 PM",
        "2:00 PM - 4:00 PM",
    ]


def test_parse_catalog_drops_blank_entries():
    assert parse_catalog("") == []
    assert parse_catalog(None) == []
    assert parse_catalog(" , ,") == []
    assert parse_catalog("a,,b, ") == ["a", "b"]


def test_parse_catalog_keeps_duplicates_as_typed():
    assert parse_catalog("6am, 6am ,6AM") == ["6am", "6am", "6AM"]


def test_parse_catalog_accepts_a_list():
    assert parse_catalog([" 6am ", "", "7am"]) == ["6am", "7am"]
