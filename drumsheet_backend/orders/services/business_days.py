"""
PATH: orders/services/business_days.py

PREORDER TURNAROUND (Korea business days)

Transcribers work KST weekdays. Expected completion for a preorder paid at
`payment_dt`:

- Sat / Sun        -> next Monday
- Fri (any hour)   -> next Monday
- Mon - Thu        -> next day

All inputs are converted to Asia/Seoul before the weekday is read; naive
datetimes are treated as already being KST.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from django.utils import timezone

KST = ZoneInfo("Asia/Seoul")

MONDAY = 0
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6


def _to_kst(value) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if timezone.is_naive(value):
        return value.replace(tzinfo=KST)
    return value.astimezone(KST)


def _next_monday(d: date) -> date:
    d = d + timedelta(days=1)
    while d.weekday() != MONDAY:
        d += timedelta(days=1)
    return d


def is_weekend(value) -> bool:
    return _to_kst(value).weekday() in (SATURDAY, SUNDAY)


def calculate_expected_completion_date(payment_dt) -> date:
    kst_day = _to_kst(payment_dt).date()
    weekday = kst_day.weekday()

    if weekday in (SATURDAY, SUNDAY, FRIDAY):
        return _next_monday(kst_day)

    return kst_day + timedelta(days=1)


def calculate_next_business_day(payment_dt, business_days: int = 1) -> date:
    if business_days == 1:
        return calculate_expected_completion_date(payment_dt)

    current = _to_kst(payment_dt).date()
    added = 0
    while added < business_days:
        current += timedelta(days=1)
        if current.weekday() not in (SATURDAY, SUNDAY):
            added += 1
    return current


def format_date_ymd(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def format_date_korean(value) -> str:
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.year}. {value.month}. {value.day}"
