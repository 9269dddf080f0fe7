def parse_catalog(text) -> list[str]:
    """
    Turn the comma separated "available times" field of the court form
    into the ordered slot catalog.

    Entries are trimmed; blanks are dropped so an empty field gives an
    empty catalog. Duplicates and spelling variants are kept as typed.
    """
    if not text:
        return []
    if isinstance(text, (list, tuple)):
        parts = text
    else:
        parts = str(text).split(",")
    return [p.strip() for p in parts if isinstance(p, str) and p.strip()]
