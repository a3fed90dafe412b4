"""
Wall-clock helpers.

Shows of interest are scheduled from an "HH:MM" input; these helpers turn
that into the next absolute instant in the configured time zone.
"""

import re
from datetime import datetime, time, timedelta, tzinfo
from typing import Optional, Tuple

from django.utils import timezone

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_hhmm(value: str) -> Tuple[int, int]:
    """
    Parse an "HH:MM" string into (hour, minute).

    Raises:
        ValueError: if the string is not a valid 24-hour clock time
    """
    match = _HHMM_RE.match(value or "")
    if not match:
        raise ValueError(f"Expected HH:MM, got {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Clock time out of range: {value!r}")
    return hour, minute


def next_occurrence(hhmm: str, now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Return the next instant strictly after `now` whose local clock reads `hhmm`.

    A time equal to or earlier than the current local time rolls over to the
    following day.
    """
    hour, minute = parse_hhmm(hhmm)
    tz = tz or timezone.get_current_timezone()
    local_now = timezone.localtime(now, tz)

    candidate_date = local_now.date()
    candidate = datetime.combine(candidate_date, time(hour, minute), tzinfo=tz)
    if candidate <= local_now:
        candidate = datetime.combine(candidate_date + timedelta(days=1), time(hour, minute), tzinfo=tz)
    return candidate
