def matches_query(query, *values) -> bool:
    """Case-insensitive substring match of ``query`` against any of ``values``."""
    query = (query or "").strip().lower()
    if not query:
        return True
    return any(query in (v or "").lower() for v in values if isinstance(v, str) or v is None)


def filter_rows(rows, query, fields):
    return [row for row in rows if matches_query(query, *(row.get(f) for f in fields))]
