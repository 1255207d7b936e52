"""Calendar helpers shared by the rollups and the scheduled triggers.

The scheduled monthly trigger has two conventions that differ only in the
window they pass to the rollup:

* progressive - any day except the 1st re-rolls the current month;
* closure     - on the 1st the whole previous month is rolled one last time.
"""
import datetime as dt
from zoneinfo import ZoneInfo

from salesync.core.config import settings


def local_today(tz: str | None = None) -> dt.date:
    return dt.datetime.now(ZoneInfo(tz or settings.TZ)).date()


def iter_days(start: dt.date, end: dt.date):
    d = start
    while d <= end:
        yield d
        d += dt.timedelta(days=1)


def month_start(d: dt.date) -> dt.date:
    return dt.date(d.year, d.month, 1)


def next_month(month: dt.date) -> dt.date:
    if month.month == 12:
        return dt.date(month.year + 1, 1, 1)
    return dt.date(month.year, month.month + 1, 1)


def month_end(d: dt.date) -> dt.date:
    return next_month(month_start(d)) - dt.timedelta(days=1)


def month_starts(d1: dt.date, d2: dt.date) -> list[dt.date]:
    d = month_start(d1)
    out = []
    while d <= d2:
        out.append(d)
        d = next_month(d)
    return out


def chunked(values: list, size: int):
    for i in range(0, len(values), size):
        yield values[i:i + size]


# -----------------------------
# Scheduled windows
# -----------------------------
def yesterday(today: dt.date) -> dt.date:
    return today - dt.timedelta(days=1)


def weekly_correction_window(today: dt.date) -> tuple[dt.date, dt.date]:
    end = yesterday(today)
    return end - dt.timedelta(days=6), end


def is_closure_day(today: dt.date) -> bool:
    return today.day == 1


def monthly_window(today: dt.date) -> tuple[dt.date, dt.date]:
    if is_closure_day(today):
        prev = yesterday(today)
        return month_start(prev), month_end(prev)
    return month_start(today), month_end(today)


def yearly_target(today: dt.date) -> int:
    start, _ = monthly_window(today)
    return start.year
