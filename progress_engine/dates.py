"""Canonical date keys and date-indexed lookups.

Every progress map is keyed by ``YYYY-MM-DDTHH:MM:SSZ`` strings in UTC, so
lexical and chronological ordering of keys coincide.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from progress_engine.errors import MalformedDateError

DateLike = Union[datetime, date, str]

KEY_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_ONE_DAY = timedelta(days=1)


def parse_date(value: DateLike) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive inputs are taken as UTC."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise MalformedDateError(value)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise MalformedDateError(value) from exc
    else:
        raise MalformedDateError(value, f"unsupported date type {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def date_key(value: DateLike) -> str:
    """Canonicalize a timestamp to its map key, truncating sub-second precision."""

    return parse_date(value).replace(microsecond=0).strftime(KEY_FORMAT)


def day_key(value: DateLike) -> str:
    """Return the canonical key of midnight UTC on the day of ``value``."""

    parsed = parse_date(value)
    return date_key(datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc))


def nearest_prior_date(keys: Iterable[str], target: DateLike) -> Optional[str]:
    """Return the latest key at or before ``target``, or ``None``.

    A key on the same UTC calendar day as ``target`` qualifies even when its
    time-of-day is later; among qualifying keys the chronologically latest wins.
    """

    target_dt = parse_date(target)
    target_day = target_dt.date()

    best_key = None
    best_dt = None
    for key in keys:
        key_dt = parse_date(key)
        if key_dt > target_dt and key_dt.date() != target_day:
            continue
        if best_dt is None or key_dt > best_dt:
            best_key, best_dt = key, key_dt
    return best_key


class DaysOfInterval:
    """Re-iterable sequence of whole days between ``start`` and ``end``.

    Days keep ``start``'s time-of-day. Saturdays and Sundays are skipped when
    ``include_weekends`` is false; ``end`` itself is yielded only when
    ``include_end_date`` is true.
    """

    def __init__(self, start: DateLike, end: DateLike, include_weekends: bool = True, include_end_date: bool = True):
        self.start = parse_date(start)
        self.end = parse_date(end)
        self.include_weekends = include_weekends
        self.include_end_date = include_end_date

    def __iter__(self) -> Iterator[datetime]:
        stop = self.end + _ONE_DAY if self.include_end_date else self.end
        current = self.start
        while current < stop:
            # weekday(): Saturday == 5, Sunday == 6
            if self.include_weekends or current.weekday() < 5:
                yield current
            current += _ONE_DAY

    def __repr__(self) -> str:
        return (
            f"DaysOfInterval({date_key(self.start)!r}, {date_key(self.end)!r}, "
            f"include_weekends={self.include_weekends}, include_end_date={self.include_end_date})"
        )


def days_of_interval(
    start: DateLike, end: DateLike, include_weekends: bool = True, include_end_date: bool = True
) -> DaysOfInterval:
    """Return the days between ``start`` and ``end`` as a lazy, restartable sequence."""

    return DaysOfInterval(start, end, include_weekends=include_weekends, include_end_date=include_end_date)
