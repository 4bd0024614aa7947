"""
Opening-Hours Evaluator

Pure functions deciding whether the shop accepts orders at a given moment.

The weekly schedule maps a weekday (0 = Sunday ... 6 = Saturday) to a sorted
list of disjoint half-open intervals ``[start, end)`` in minutes since local
midnight. An administrative override ("open" / "closed") wins over the
schedule; no override means the schedule decides.

All timestamps passed in are expected to already be in the shop's local time.
"""

import enum
from datetime import datetime, timedelta
from typing import Optional


class ShopOverride(str, enum.Enum):
    """Administrative override of the opening hours."""
    OPEN = "open"
    CLOSED = "closed"


WeeklySchedule = dict[int, list[tuple[int, int]]]

MINUTES_PER_DAY = 24 * 60


def weekday_index(now: datetime) -> int:
    """Weekday with Sunday as 0, matching the schedule keys."""
    return (now.weekday() + 1) % 7


def minute_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def validate_schedule(schedule: WeeklySchedule) -> WeeklySchedule:
    """
    Check a weekly schedule and return it with intervals sorted.

    Raises:
        ValueError: On unknown weekdays, empty or out-of-range intervals,
            or overlapping intervals on the same day.
    """
    cleaned: WeeklySchedule = {}

    for day, intervals in schedule.items():
        if day not in range(7):
            raise ValueError(f"Invalid weekday {day}, expected 0 (Sunday) to 6")

        ordered = sorted((int(start), int(end)) for start, end in intervals)
        for start, end in ordered:
            if not 0 <= start < end <= MINUTES_PER_DAY:
                raise ValueError(
                    f"Invalid interval [{start}, {end}) on weekday {day}"
                )
        for (_, prev_end), (next_start, _) in zip(ordered, ordered[1:]):
            if next_start < prev_end:
                raise ValueError(f"Overlapping intervals on weekday {day}")

        cleaned[day] = ordered

    return cleaned


def is_within_schedule(now: datetime, schedule: WeeklySchedule) -> bool:
    minute = minute_of_day(now)
    return any(
        start <= minute < end
        for start, end in schedule.get(weekday_index(now), [])
    )


def is_open(
    now: datetime,
    override: Optional[ShopOverride],
    schedule: WeeklySchedule,
) -> bool:
    """
    Decide whether orders are accepted right now.

    Args:
        now: Current local time of the shop
        override: Forced state, or None to follow the schedule
        schedule: Weekly opening intervals

    Returns:
        bool: True if the shop is open
    """
    if override == ShopOverride.OPEN:
        return True
    if override == ShopOverride.CLOSED:
        return False
    return is_within_schedule(now, schedule)


def next_opening(now: datetime, schedule: WeeklySchedule) -> Optional[datetime]:
    """
    Find the start of the next opening interval strictly after ``now``.

    Looks ahead one full week. Returns None for an empty schedule.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    current = minute_of_day(now)
    today = weekday_index(now)

    for offset in range(8):
        day = (today + offset) % 7
        for start, _ in schedule.get(day, []):
            if offset == 0 and start <= current:
                continue
            return midnight + timedelta(days=offset, minutes=start)

    return None
