# franchise_ops/utils/date_utils.py
from datetime import date, datetime
from typing import Union
import calendar

def convert_to_date(value: Union[str, date, datetime], format_string: str = "%Y-%m-%d") -> date:
    """Convert a string, datetime or date to a date.

    Args:
        value: Date string, datetime or date
        format_string: Format string used for strings

    Returns:
        Date object
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, format_string).date()

def get_days_in_month(year: int, month: int) -> int:
    """Get number of days in a month."""
    return calendar.monthrange(year, month)[1]

def add_months(start_date: date, months: int) -> date:
    """Add (or subtract) whole months to a date.

    A start date on the last day of its month maps to the last day of the
    target month; otherwise the day is clamped to the target month's length.

    Args:
        start_date: Start date
        months: Number of months to add, negative to go back

    Returns:
        New date
    """
    month_index = start_date.month - 1 + months
    year = start_date.year + month_index // 12
    month = month_index % 12 + 1

    last_day = get_days_in_month(year, month)
    if start_date.day == get_days_in_month(start_date.year, start_date.month):
        return date(year, month, last_day)

    return date(year, month, min(start_date.day, last_day))

def days_between(start_date: date, end_date: date) -> int:
    """Calculate days between two dates.

    Args:
        start_date: Start date
        end_date: End date

    Returns:
        Number of days
    """
    delta = end_date - start_date
    return delta.days

def years_between(start_date: date, end_date: date, precision: int = 2) -> float:
    """Length of a date span in 365-day years, rounded."""
    return round(days_between(start_date, end_date) / 365, precision)
