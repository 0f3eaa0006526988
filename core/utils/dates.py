from __future__ import annotations

import datetime as dt
import re
from typing import Optional


def parse_date_flex(value) -> Optional[dt.date]:
    """Best-effort date parser shared across repositories, services and the API.

    Accepts ``date``/``datetime`` objects, ISO strings (``2024-02-05``,
    ``2024-02-05T10:00:00Z``) and loosely separated ``Y M D`` strings.
    Datetimes are reduced to their UTC calendar date; naive ones are taken as
    UTC. Returns ``None`` for anything that cannot be read as a date.
    """

    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return to_utc_date(value)
    if isinstance(value, dt.date):
        return value
    s = str(value).strip()
    if not s:
        return None
    try:
        return dt.date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return to_utc_date(dt.datetime.fromisoformat(s.replace("Z", "+00:00")))
    except ValueError:
        pass
    parts = [p for p in re.split(r"[^0-9]", s) if p]
    if len(parts) >= 3:
        try:
            y, m, d = map(int, parts[:3])
            return dt.date(y, m, d)
        except ValueError:
            return None
    return None


def to_utc_date(value: dt.datetime) -> dt.date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(dt.timezone.utc).date()
