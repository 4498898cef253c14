from datetime import date

from pharmadesk.core.constants import EXPIRY_STATUSES, EXPIRY_TIER_LIMITS
from pharmadesk.core.dates import normalize_date


def days_to_expiry(expiry_date, today=None):
    expiry = normalize_date(expiry_date)
    if expiry is None:
        return None
    today = normalize_date(today) or date.today()
    return (expiry - today).days


def expiry_status(days):
    if days is None:
        return None
    for limit, status in EXPIRY_TIER_LIMITS:
        if days <= limit:
            return status
    return "NORMAL"


def classify_expiry(expiry_date, today=None):
    days = days_to_expiry(expiry_date, today=today)
    return days, expiry_status(days)


def describe_expiry(days):
    if days is None:
        return ""
    if days == 0:
        return "Expires today"
    if days > 0:
        return "Expires in {} day{}".format(days, "" if days == 1 else "s")
    overdue = -days
    return "Expired {} day{} ago".format(overdue, "" if overdue == 1 else "s")


def normalize_status(value):
    if value is None:
        return None
    key = str(value).strip().upper()
    if key in EXPIRY_STATUSES:
        return key
    return None
