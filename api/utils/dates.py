"""
Calendar helpers.

Weekdays are numbered 0=Sunday..6=Saturday and months 0..11 in every
distribution returned by the API.
"""
from datetime import date
from typing import Optional, Tuple

WEEKDAY_NAMES = ["Domenica", "Lunedì", "Martedì", "Mercoledì", "Giovedì", "Venerdì", "Sabato"]
MONTH_NAMES = [
    "gennaio", "febbraio", "marzo", "aprile", "maggio", "giugno",
    "luglio", "agosto", "settembre", "ottobre", "novembre", "dicembre",
]


def weekday_index(day: date) -> int:
    """Weekday of a date with Sunday as 0."""
    return day.isoweekday() % 7


def week_in_year(day: date, year: int) -> int:
    """
    ISO week of a date, clamped to the weeks of the given year.

    Early January days that belong to the previous ISO year count as week 1
    and late December days of the next ISO year count as the last week.
    """
    iso_year, week, _ = day.isocalendar()
    if iso_year < year:
        return 1
    if iso_year > year:
        return weeks_in_year(year)
    return week


def weeks_in_year(year: int) -> int:
    """Number of ISO weeks in a year (52 or 53)."""
    # Dec 28 always falls in the last ISO week of its year
    return date(year, 12, 28).isocalendar()[1]


def month_name(month: int) -> str:
    """Italian name of a 1-based month."""
    return MONTH_NAMES[month - 1]


def year_bounds(year: int) -> Tuple[date, date]:
    """Half-open [Jan 1, Jan 1 of next year)."""
    return date(year, 1, 1), date(year + 1, 1, 1)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Half-open bounds of a 1-based month."""
    start = date(year, month, 1)
    if month == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)


def selection_bounds(year: int, month: Optional[int] = None) -> Tuple[date, date]:
    """Bounds of a year, or of one of its months when month is given."""
    if month is None:
        return year_bounds(year)
    return month_bounds(year, month)
