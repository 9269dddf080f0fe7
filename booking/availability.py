from typing import Iterable


def taken_slots(bookings: Iterable[dict]) -> set[str]:
    """Slot labels already reserved, from ledger rows for one court and date."""
    return {b["booking_time"] for b in bookings if b.get("booking_time")}


def available_slots(catalog: Iterable[str], taken: Iterable[str]) -> list[str]:
    """
    Catalog minus taken labels, catalog order preserved.

    Pure function: no state is kept between calls.
    """
    taken = set(taken)
    return [label for label in catalog if label not in taken]


def mark_slots(catalog: Iterable[str], taken: Iterable[str]) -> list[dict]:
    taken = set(taken)
    return [{"label": label, "taken": label in taken} for label in catalog]
