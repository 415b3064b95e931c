"""
Relative timestamp labels shown next to messages.
"""

from datetime import datetime, timezone


def _as_utc(ts: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


def format_timestamp(ts: datetime, now: datetime | None = None) -> str:
    """
    Age of `ts` relative to `now`: `now` under a minute, then `Nm`, `Nh`, `Nd`,
    and the ISO date once a week or more has passed.

    Timestamps in the future read as `now`.
    """
    ts = _as_utc(ts)
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    seconds = (now - ts).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)
    if minutes < 1:
        return "now"
    if minutes < 60:
        return f"{minutes}m"
    if hours < 24:
        return f"{hours}h"
    if days < 7:
        return f"{days}d"
    return ts.date().isoformat()
