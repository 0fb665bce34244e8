"""Helpers for the naive-UTC datetime convention used by every model.

The ORM runs with use_tz=False, so values written to the database carry no
offset. Anything arriving with an offset is converted to UTC and stripped
before it is stored or used in a filter."""

import datetime
from typing import Callable, Optional

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    """Current time as a naive UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """FastAPI dependency returning the clock handlers should read "now" from.

    Tests override it through app.dependency_overrides to pin the date.
    """
    return utc_now
