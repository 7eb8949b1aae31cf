"""
Schedule date expansion
Turns a route schedule's recurrence rule into the calendar dates on which a
trip should exist inside a requested window.
"""
from datetime import date, datetime, time
from typing import Any, Iterable, List, Mapping, Optional, Union

from dateutil.rrule import rrule, rruleset, DAILY, WEEKLY, SU, MO, TU, WE, TH, FR, SA

DateLike = Union[str, date]

# days_of_week numbering: 0 = Sunday ... 6 = Saturday
SUNDAY_FIRST = (SU, MO, TU, WE, TH, FR, SA)


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def window_days(window_start: DateLike, window_end: DateLike) -> int:
    """Number of calendar days in [window_start, window_end], 0 when reversed"""
    return max((_as_date(window_end) - _as_date(window_start)).days + 1, 0)


def effective_window(
    schedule: Mapping[str, Any],
    window_start: DateLike,
    window_end: DateLike,
) -> Optional[tuple]:
    """
    Intersect the requested window with the schedule's validity range.
    Returns (start, end) or None when they do not overlap.
    """
    start = _as_date(window_start)
    end = _as_date(window_end)

    valid_from = schedule.get("valid_from")
    valid_until = schedule.get("valid_until")
    if valid_from:
        start = max(start, _as_date(valid_from))
    if valid_until:
        end = min(end, _as_date(valid_until))

    if start > end:
        return None
    return start, end


def _weekly_days(days_of_week: Iterable[Any]) -> list:
    days = set()
    for day in days_of_week or []:
        if isinstance(day, int) and 0 <= day <= 6:
            days.add(day)
    return [SUNDAY_FIRST[day] for day in sorted(days)]


def _specific_set(specific_dates: Iterable[Any]) -> rruleset:
    dates = rruleset()
    for value in specific_dates or []:
        try:
            dates.rdate(_midnight(_as_date(value)))
        except (TypeError, ValueError):
            # Stored strings that are not dates match nothing
            continue
    return dates


def expand_schedule_dates(
    schedule: Mapping[str, Any],
    window_start: DateLike,
    window_end: DateLike,
) -> List[str]:
    """
    Return the ISO dates (ascending, unique) on which the schedule runs
    between window_start and window_end, both inclusive.
    """
    window = effective_window(schedule, window_start, window_end)
    if window is None:
        return []
    dtstart, until = _midnight(window[0]), _midnight(window[1])

    kind = schedule.get("recurrence_type")
    if kind == "daily":
        occurrences = rrule(DAILY, dtstart=dtstart, until=until)
    elif kind == "weekly":
        byweekday = _weekly_days(schedule.get("days_of_week"))
        if not byweekday:
            return []
        occurrences = rrule(WEEKLY, dtstart=dtstart, until=until, byweekday=byweekday)
    elif kind == "specific_dates":
        occurrences = _specific_set(schedule.get("specific_dates")).between(dtstart, until, inc=True)
    else:
        # Unknown kinds produce no dates
        return []

    return [occurrence.date().isoformat() for occurrence in occurrences]
