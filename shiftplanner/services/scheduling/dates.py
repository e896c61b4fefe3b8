"""
Calendar helpers shared by the generator and validators.

Weeks start on Monday. Weekday indexes follow the store convention
0=Sunday, 1=Monday ... 6=Saturday, which differs from date.weekday().
"""

from datetime import date, time, timedelta
import math


SUNDAY = 0
SATURDAY = 6
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def ensure_monday(week_start: date) -> None:
    if week_start.weekday() != 0:
        raise ValueError(f"week_start must be a Monday, got {week_start} ({week_start.strftime('%A')})")


def week_start_for(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def week_dates(week_start: date) -> list[date]:
    """Monday..Sunday of the week."""
    return [week_start + timedelta(days=i) for i in range(7)]


def weekday_index(day: date) -> int:
    return (day.weekday() + 1) % 7


def day_name(weekday: int) -> str:
    return DAY_NAMES[weekday]


def day_off_sort_key(weekday: int) -> int:
    # Mon..Sat first, Sunday last
    return 7 if weekday == SUNDAY else weekday


def sorted_weekdays(weekdays) -> list[int]:
    return sorted(weekdays, key=day_off_sort_key)


def weeks_between(reference: date, week_start: date) -> int:
    """Whole weeks from reference to week_start (negative before reference)."""
    return math.floor((week_start - reference).days / 7)


def expand_range(start: date, end: date) -> list[date]:
    """Inclusive list of days from start to end."""
    if end < start:
        return []
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Inclusive date ranges overlap."""
    return start1 <= end2 and start2 <= end1


def hours_between(start: time, end: time) -> float:
    return (end.hour + end.minute / 60) - (start.hour + start.minute / 60)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def round1(value: float) -> float:
    """Round to one decimal, halves towards +inf."""
    return math.floor(value * 10 + 0.5) / 10
