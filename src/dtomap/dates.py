"""Rendering of date/time values for string-typed fields.

Two kinds of format strings are accepted:

* strftime patterns, recognised by the presence of ``%``::

    format_date(datetime(2025, 6, 19), "%d/%m/%Y")  # "19/06/2025"

* PHP ``date()`` style patterns, where every letter is a token and a
  backslash escapes a literal character::

    format_date(datetime(2025, 6, 19, 14, 30), "D, d M Y H:i:s")
    # "Thu, 19 Jun 2025 14:30:00"
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timezone
from typing import Callable, Dict, Union

DateLike = Union[datetime, date, time]

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _utc_offset(value: datetime, separator: str) -> str:
    offset = value.utcoffset()
    if offset is None:
        return f"+00{separator}00"
    minutes = int(offset.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return str(int(value.timestamp()))


def _twelve_hour(value: datetime) -> int:
    return value.hour % 12 or 12


def _ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


TOKENS: Dict[str, Callable[[datetime], str]] = {
    # day
    "d": lambda v: f"{v.day:02d}",
    "D": lambda v: DAY_NAMES[v.weekday()][:3],
    "j": lambda v: str(v.day),
    "l": lambda v: DAY_NAMES[v.weekday()],
    "N": lambda v: str(v.isoweekday()),
    "S": lambda v: _ordinal_suffix(v.day),
    "w": lambda v: str(v.isoweekday() % 7),
    "z": lambda v: str(v.timetuple().tm_yday - 1),
    # week
    "W": lambda v: f"{v.isocalendar()[1]:02d}",
    # month
    "F": lambda v: MONTH_NAMES[v.month - 1],
    "m": lambda v: f"{v.month:02d}",
    "M": lambda v: MONTH_NAMES[v.month - 1][:3],
    "n": lambda v: str(v.month),
    "t": lambda v: str(calendar.monthrange(v.year, v.month)[1]),
    # year
    "L": lambda v: "1" if calendar.isleap(v.year) else "0",
    "Y": lambda v: f"{v.year:04d}",
    "y": lambda v: f"{v.year % 100:02d}",
    # time
    "a": lambda v: "am" if v.hour < 12 else "pm",
    "A": lambda v: "AM" if v.hour < 12 else "PM",
    "g": lambda v: str(_twelve_hour(v)),
    "G": lambda v: str(v.hour),
    "h": lambda v: f"{_twelve_hour(v):02d}",
    "H": lambda v: f"{v.hour:02d}",
    "i": lambda v: f"{v.minute:02d}",
    "s": lambda v: f"{v.second:02d}",
    "u": lambda v: f"{v.microsecond:06d}",
    "v": lambda v: f"{v.microsecond // 1000:03d}",
    # timezone
    "e": lambda v: str(v.tzinfo) if v.tzinfo else "UTC",
    "T": lambda v: v.tzname() or "UTC",
    "O": lambda v: _utc_offset(v, ""),
    "P": lambda v: _utc_offset(v, ":"),
    # full date/time
    "c": lambda v: format_date(v, "Y-m-d\\TH:i:sP"),
    "r": lambda v: format_date(v, "D, d M Y H:i:s O"),
    "U": _timestamp,
}


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    return datetime.combine(date(1970, 1, 1), value)


def format_date(value: DateLike, fmt: str) -> str:
    if "%" in fmt:
        return value.strftime(fmt)

    moment = _as_datetime(value)
    parts = []
    escaped = False
    for char in fmt:
        if escaped:
            parts.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in TOKENS:
            parts.append(TOKENS[char](moment))
        else:
            parts.append(char)
    return "".join(parts)
