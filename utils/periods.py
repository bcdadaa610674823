"""Named time windows used to scope post statistics."""

from __future__ import annotations

from datetime import datetime, timedelta

PERIODS = ("daily", "weekly", "monthly", "yearly")


def period_start(period: str | None, now: datetime | None = None) -> datetime | None:
    """Return the start of the window ending at ``now``.

    ``daily`` starts at midnight, ``weekly`` at midnight of the most recent
    Sunday, ``monthly`` on day one and ``yearly`` on January 1st. Any other
    value (including ``None``) means all time and returns ``None``.

    Boundaries are UTC midnights, matching the naive UTC ``created_at``
    timestamps they are compared against; ``now`` is taken as UTC.
    """

    now = now or datetime.utcnow()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    period = (period or "").strip().lower()

    if period == "daily":
        return midnight
    if period == "weekly":
        # weekday(): Monday is 0, Sunday is 6
        return midnight - timedelta(days=(midnight.weekday() + 1) % 7)
    if period == "monthly":
        return midnight.replace(day=1)
    if period == "yearly":
        return midnight.replace(month=1, day=1)
    return None
