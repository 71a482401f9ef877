"""Decide whether a scheduled collection should run now."""

from __future__ import annotations

from datetime import date, datetime

from logcollector.state import StatusStore


def local_date(moment: datetime) -> date:
    """Return the calendar date of ``moment`` in local time.

    Naive timestamps are taken to already be in local time.

    Args:
        moment: Timestamp to convert.

    Returns:
        date: Local calendar date.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone().date()


def should_collect(
    now: datetime,
    hour: int | None = None,
    status_store: StatusStore | None = None,
) -> bool:
    """Return whether a collection is due at ``now``.

    Collection is refused outside the configured hour of day, and refused when the
    status store already holds a collection from the same local calendar day.

    Args:
        now: Current time supplied by the caller.
        hour: Optional hour of day (0-23) to which collection is restricted.
        status_store: Optional store holding the last collection time.

    Returns:
        bool: True when the collection should proceed.

    Raises:
        StorageError: If the status store cannot be read.
    """
    if hour is not None and now.hour != hour:
        return False

    if status_store is not None:
        last = status_store.last_collection_time
        if last is not None and local_date(last) == local_date(now):
            return False

    return True


__all__ = ["should_collect", "local_date"]
