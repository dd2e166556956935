from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta

from .errors import UnparsableDateError


DATE_PATTERN = re.compile(r"^\s*(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?(?:[T ].*)?\s*$")
SATURDAY = 5


@dataclass(frozen=True)
class RecordingDate:
    year: int
    month: int | None = None
    day: int | None = None

    @property
    def decade(self) -> int:
        return self.year // 10 * 10

    @property
    def yearless(self) -> tuple[int, int] | None:
        if self.month is None or self.day is None:
            return None
        return (self.month, self.day)

    def sort_key(self) -> tuple[int, int]:
        return (self.month or 0, self.day or 0)


def parse_recording_date(value: str, path: str = "") -> RecordingDate:
    match = DATE_PATTERN.match(value or "")
    if not match:
        raise UnparsableDateError(value, path)

    year = int(match.group(1))
    month = int(match.group(2)) if match.group(2) else None
    day = int(match.group(3)) if match.group(3) else None

    try:
        if day is not None:
            date(year, month, day)
        elif month is not None:
            date(year, month, 1)
    except ValueError:
        raise UnparsableDateError(value, path) from None

    return RecordingDate(year=year, month=month, day=day)


def yearless_sort_key(value: str) -> tuple[int, int]:
    try:
        return parse_recording_date(value).sort_key()
    except UnparsableDateError:
        return (0, 0)


def week_window(today: date) -> tuple[date, date]:
    start = today - timedelta(days=(today.weekday() - SATURDAY) % 7)
    return start, start + timedelta(days=6)


def in_week_window(month_day: tuple[int, int], today: date) -> bool:
    start, end = week_window(today)
    first = (start.month, start.day)
    last = (end.month, end.day)
    # A window crossing New Year wraps around in yearless space.
    if first <= last:
        return first <= month_day <= last
    return month_day >= first or month_day <= last


def on_or_after(month_day: tuple[int, int], today: date) -> bool:
    return month_day >= (today.month, today.day)
