"""Helpers for "HH:MM" time-of-day strings and calendar values"""
from datetime import date, datetime


def to_minutes(value: str) -> int:
    """"09:30" -> 570. Input is assumed well formed."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    """570 -> "09:30" (zero padded, 24h)"""
    return f"{total // 60:02d}:{total % 60:02d}"


def format_hhmm(moment: datetime) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


def sunday_first_weekday(value: date) -> int:
    """Weekday with 0=Sunday ... 6=Saturday (Python's weekday() is 0=Monday)"""
    return (value.weekday() + 1) % 7


def as_date(value) -> date:
    """Drop the time-of-day component, if any"""
    if isinstance(value, datetime):
        return value.date()
    return value


def as_datetime(value) -> datetime:
    """Promote a plain date to midnight of that day"""
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)
