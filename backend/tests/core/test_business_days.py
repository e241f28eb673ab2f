"""Business Days - tests for the dispute cooling-off arithmetic.

Tests cover:
    - weekdays counted, weekends skipped
    - start instant counts, end instant excluded
    - exactly 3 business days is eligible, 2 is not
    - naive datetimes treated as UTC
"""

from datetime import datetime, timedelta, timezone

from garante.core.business_days import count_business_days, cooling_off_elapsed

MONDAY = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
FRIDAY = datetime(2026, 2, 27, 10, 0, tzinfo=timezone.utc)


def test_same_instant_counts_zero():
    assert count_business_days(MONDAY, MONDAY) == 0


def test_monday_to_thursday_same_time_is_three():
    assert count_business_days(MONDAY, MONDAY + timedelta(days=3)) == 3


def test_monday_to_wednesday_same_time_is_two():
    assert count_business_days(MONDAY, MONDAY + timedelta(days=2)) == 2


def test_partial_day_counts_the_step():
    assert count_business_days(MONDAY, MONDAY + timedelta(days=2, minutes=1)) == 3


def test_weekend_skipped():
    # Fri, Sat, Sun -> only Friday counts
    assert count_business_days(FRIDAY, FRIDAY + timedelta(days=3)) == 1
    # Fri, Sat, Sun, Mon, Tue
    assert count_business_days(FRIDAY, FRIDAY + timedelta(days=5)) == 3


def test_dispute_created_on_saturday():
    saturday = FRIDAY + timedelta(days=1)
    # Sat, Sun, Mon, Tue -> 2
    assert count_business_days(saturday, saturday + timedelta(days=4)) == 2


def test_end_before_start_is_zero():
    assert count_business_days(MONDAY, MONDAY - timedelta(days=5)) == 0


def test_naive_datetimes_are_utc():
    naive = MONDAY.replace(tzinfo=None)
    assert count_business_days(naive, MONDAY + timedelta(days=3)) == 3


# ─── cooling_off_elapsed ─────────────────────────────────────────

def test_cooling_off_exactly_three_business_days():
    assert cooling_off_elapsed(MONDAY, MONDAY + timedelta(days=3), 3) == (True, 3)


def test_cooling_off_not_yet():
    assert cooling_off_elapsed(MONDAY, MONDAY + timedelta(days=2), 3) == (False, 2)


def test_cooling_off_across_weekend():
    eligible, days = cooling_off_elapsed(FRIDAY, FRIDAY + timedelta(days=4), 3)
    assert not eligible
    assert days == 2
