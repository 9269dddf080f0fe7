"""
List updates applied after inserts and live change events.

Every function returns a new list and leaves its input untouched.
"""


def append_if_absent(items, item):
    if item in items:
        return list(items)
    return [*items, item]


def upsert_by_id(items, row, key="id"):
    # replace in place when present, otherwise append
    out = []
    replaced = False
    for existing in items:
        if existing.get(key) == row.get(key):
            out.append(row)
            replaced = True
        else:
            out.append(existing)
    if not replaced:
        out.append(row)
    return out


def remove_by_id(items, row_id, key="id"):
    return [existing for existing in items if existing.get(key) != row_id]


def apply_change(items, event, key="id"):
    """Merge one ChangeEvent into a list of row dicts."""
    if event.event_type in ("INSERT", "UPDATE"):
        return upsert_by_id(items, event.new, key=key)
    if event.event_type == "DELETE":
        return remove_by_id(items, (event.old or {}).get(key), key=key)
    raise ValueError(f"Unknown change event type: {event.event_type}")
