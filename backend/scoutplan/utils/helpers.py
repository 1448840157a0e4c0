import re
from typing import Iterable, List, Optional

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


class InvalidTimeError(ValueError):
    """Raised when a clock value is not a valid HH:MM time."""


def parse_clock(value: str) -> int:
    """Parse ``HH:MM`` (or ``HH:MM:SS``) into minutes since midnight.

    Seconds are accepted because PostgreSQL ``time`` columns render them, but
    they are dropped.
    """
    if not isinstance(value, str):
        raise InvalidTimeError(f"Invalid time value: {value!r}")
    m = _CLOCK_RE.match(value.strip())
    if not m:
        raise InvalidTimeError(f"Invalid time format '{value}', expected HH:MM")
    hours, minutes = int(m.group(1)), int(m.group(2))
    seconds = int(m.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise InvalidTimeError(f"Time out of range: '{value}'")
    return hours * 60 + minutes


def format_clock(total_minutes: int) -> str:
    # Values past midnight keep counting (24:15, 25:30) instead of wrapping.
    total = max(int(total_minutes), 0)
    return f"{total // 60:02d}:{total % 60:02d}"


def normalize_clock(value: str) -> str:
    return format_clock(parse_clock(value))


def split_csv_param(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma separated query parameter, dropping empty items."""
    if value is None:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def parse_int_list(values: Optional[Iterable[str]]) -> Optional[List[int]]:
    if not values:
        return None
    result = []
    for raw in values:
        try:
            result.append(int(raw))
        except (TypeError, ValueError):
            continue
    return result or None
