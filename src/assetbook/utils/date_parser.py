"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_RELATIVE_DAYS = {
    "today": 0,
    "aujourd'hui": 0,
    "yesterday": -1,
    "hier": -1,
    "tomorrow": 1,
    "demain": 1,
}


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - Day-first dates as printed on French statements: "15/01/2024", "15.01.24"
    - Written dates: "January 15, 2024"
    - Relative dates: "today", "yesterday", "tomorrow" (and their French names)

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    if text in _RELATIVE_DAYS:
        return today + timedelta(days=_RELATIVE_DAYS[text])

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    # Anything that is not ISO is read day-first
    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: this-month, this-year, last-month or last-year

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()
    first_of_month = today.replace(day=1)
    first_of_year = today.replace(month=1, day=1)

    ranges = {
        "this-month": (first_of_month, today),
        "this-year": (first_of_year, today),
        "last-month": (first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1)),
        "last-year": (first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1)),
    }
    if period not in ranges:
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(ranges)}")
    return ranges[period]
