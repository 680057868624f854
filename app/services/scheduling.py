"""
Time-window computation and recipient bookkeeping for bookings.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, List, Optional

import pytz

logger = logging.getLogger(__name__)

TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p")
DISPLAY_FORMAT = "%A, %B %d, %Y at %I:%M %p"
FALLBACK_LEAD_TIME = timedelta(hours=1)


def ensure_utc(dt: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken as UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_storage(dt: datetime) -> datetime:
    """Naive UTC, the form MongoDB hands back"""
    return ensure_utc(dt).replace(tzinfo=None)


def format_in_zone(dt: datetime, tz_name: str) -> str:
    return ensure_utc(dt).astimezone(pytz.timezone(tz_name)).strftime(DISPLAY_FORMAT)


def parse_local_datetime(date_str: str, time_str: str, tz_name: str) -> Optional[datetime]:
    """Parse a form date + time in the given zone, or None if unparseable"""
    tz = pytz.timezone(tz_name)
    date_str = (date_str or "").strip()
    time_str = (time_str or "").strip().upper()
    for time_format in TIME_FORMATS:
        try:
            naive = datetime.strptime(f"{date_str} {time_str}", f"%Y-%m-%d {time_format}")
        except ValueError:
            continue
        return tz.localize(naive)
    return None


@dataclass(frozen=True)
class MeetingWindow:
    start: datetime
    end: datetime
    time_zone: str
    # True when the requested slot could not be parsed and "now + 1h" was used
    adjusted: bool = False

    @property
    def start_formatted(self) -> str:
        return format_in_zone(self.start, self.time_zone)

    @property
    def end_formatted(self) -> str:
        return format_in_zone(self.end, self.time_zone)


def compute_window(
    meeting_date: str,
    meeting_time: str,
    duration_minutes: int,
    tz_name: str,
    now: Optional[datetime] = None,
) -> MeetingWindow:
    """Resolve the requested slot into a [start, end) window.

    An unparseable date/time never fails the booking: the start falls back to
    one hour from now and the window is flagged as adjusted.
    """
    duration = timedelta(minutes=max(int(duration_minutes or 0), 1))
    tz = pytz.timezone(tz_name)

    start = parse_local_datetime(meeting_date, meeting_time, tz_name)
    adjusted = start is None
    if adjusted:
        logger.warning(
            f"Could not parse meeting slot {meeting_date!r} {meeting_time!r}; using now + 1 hour"
        )
        current = ensure_utc(now or datetime.now(timezone.utc))
        start = (current + FALLBACK_LEAD_TIME).astimezone(tz)

    end = tz.normalize(start + duration)
    return MeetingWindow(start=start, end=end, time_zone=tz_name, adjusted=adjusted)


class RecipientSet:
    """Ordered, case-insensitively deduplicated collection of email addresses.

    The first spelling of an address wins; blanks are ignored.
    """

    def __init__(self, addresses: Iterable[Optional[str]] = ()):
        self._addresses: List[str] = []
        self._seen = set()
        self.extend(addresses)

    def add(self, address: Optional[str]) -> None:
        if not address:
            return
        cleaned = address.strip()
        key = cleaned.lower()
        if not cleaned or key in self._seen:
            return
        self._seen.add(key)
        self._addresses.append(cleaned)

    def extend(self, addresses: Iterable[Optional[str]]) -> None:
        for address in addresses:
            self.add(address)

    def union(self, *groups: Iterable[Optional[str]]) -> "RecipientSet":
        merged = RecipientSet(self._addresses)
        for group in groups:
            merged.extend(group)
        return merged

    def as_list(self) -> List[str]:
        return list(self._addresses)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and address.strip().lower() in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __bool__(self) -> bool:
        return bool(self._addresses)

    def __repr__(self) -> str:
        return f"RecipientSet({self._addresses!r})"
