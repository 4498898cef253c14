import calendar
import re
from datetime import date, datetime

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def normalize_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value_text = value.strip()
        if not value_text:
            return None
        try:
            return date.fromisoformat(value_text)
        except ValueError:
            return None
    return None


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def normalize_expiry_date(value):
    """Parse an expiry date; ``YYYY-MM`` means the last day of that month.

    Returns None when the value cannot be read as a date.
    """
    if isinstance(value, str):
        match = _YEAR_MONTH_RE.match(value.strip())
        if match:
            year, month = int(match.group(1)), int(match.group(2))
            if not 1 <= month <= 12:
                return None
            return last_day_of_month(year, month)
    return normalize_date(value)
