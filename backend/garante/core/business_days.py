"""Business Days - cooling-off arithmetic for undefended disputes.

Invariants:
    - Steps forward one calendar day at a time from the start instant
    - A step counts when its start instant is strictly before `end` and falls Mon-Fri
    - Pure: the caller supplies both instants
    - The start day is itself a step, so Monday 10:00 reaches 3 at Wednesday 10:01.
      "Created fewer than 3 business days ago" therefore means fewer than 3 weekday
      steps, not 72 elapsed weekday hours
"""

from datetime import datetime, timedelta

from garante.core.clock import as_utc

SATURDAY = 5


def count_business_days(start: datetime, end: datetime) -> int:
    """Number of weekday steps from start (inclusive) up to end (exclusive)."""
    cursor = as_utc(start)
    stop = as_utc(end)
    count = 0
    while cursor < stop:
        if cursor.weekday() < SATURDAY:
            count += 1
        cursor += timedelta(days=1)
    return count


def cooling_off_elapsed(
    created_at: datetime, now: datetime, required: int,
) -> tuple[bool, int]:
    """Return (elapsed, business_days) for a dispute created at created_at."""
    days = count_business_days(created_at, now)
    return days >= required, days
