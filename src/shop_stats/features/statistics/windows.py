"""Date windows and period-over-period helpers shared by the statistics reports."""

import datetime
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status


@dataclass(frozen=True)
class DateWindow:
    """Half-open ``[start, end)`` range of aware UTC datetimes.

    ``end`` is midnight after the last included day, so every instant of that
    day is inside the window whatever the timestamp precision.
    """

    start: datetime.datetime
    end: datetime.datetime

    def contains(self, moment: datetime.datetime) -> bool:
        return self.start <= moment < self.end


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _midnight(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time(0, 0), tzinfo=datetime.timezone.utc)


def _day_after(day: datetime.date) -> datetime.datetime:
    if day == datetime.date.max:
        # No midnight after 9999-12-31
        return datetime.datetime.max.replace(tzinfo=datetime.timezone.utc)
    return _midnight(day + datetime.timedelta(days=1))


def resolve_date_range(
    start_date: Optional[datetime.date], end_date: Optional[datetime.date]
) -> DateWindow:
    """
    Build the window for range-mode reports.

    Starts at midnight UTC of ``start_date`` and covers ``end_date`` entirely.
    A ``start_date`` after ``end_date`` gives a window that matches nothing.

    Raises:
        HTTPException: 400 if either date is missing.
    """
    if start_date is None or end_date is None:
        raise _bad_request("startDate and endDate are required")
    return DateWindow(start=_midnight(start_date), end=_day_after(end_date))


def require_year(year: Optional[int]) -> int:
    if year is None:
        raise _bad_request("Year is required")
    return year


def year_window(year: int) -> DateWindow:
    """Jan 1 00:00 of ``year`` up to Jan 1 00:00 of the next year, UTC."""
    return DateWindow(
        start=_midnight(datetime.date(year, 1, 1)),
        end=_day_after(datetime.date(year, 12, 31)),
    )


def previous_year_window(year: int) -> DateWindow:
    if year <= datetime.MINYEAR:
        raise _bad_request(f"Year {year} has no previous year to compare with")
    return year_window(year - 1)


def percentage_diff(current: float, previous: float) -> float:
    """
    Relative change from ``previous`` to ``current`` in percent, rounded to 2 decimals.

    A zero baseline has no relative change: going from nothing to something
    counts as a full 100% gain and nothing to nothing as 0.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)
