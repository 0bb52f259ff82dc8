"""Row lookups by client-supplied ids."""

# largest value a SQLite / BIGINT primary key can hold
MAX_ID = 2 ** 63 - 1


def parse_id(raw):
    """Positive integer id, or None when ``raw`` cannot name a row."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not (raw.isascii() and raw.isdigit()):
            return None
        raw = int(raw)
    if not isinstance(raw, int) or raw < 1 or raw > MAX_ID:
        return None
    return raw


def get_by_id(model, raw):
    ident = parse_id(raw)
    if ident is None:
        return None
    return model.query.get(ident)
