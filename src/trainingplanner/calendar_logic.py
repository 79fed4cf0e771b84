from datetime import date, timedelta
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta

from .holidays import HolidayCache
from .models import Day

WEEK_LENGTH = 7


def first_monday_of_month(any_date: date) -> date:
    """Erster Montag am oder nach dem 1. des Monats von `any_date`."""
    first = any_date.replace(day=1)
    delta_days = (0 - first.weekday() + 7) % 7
    return first + timedelta(days=delta_days)


def compute_end_date(start: date) -> date:
    """Letzter Tag des Fensters: der Tag vor demselben Tag zwei Monate später."""
    return start + relativedelta(months=2) - timedelta(days=1)


def each_day_inclusive(start: date, end: date) -> List[date]:
    out: List[date] = []
    current = start
    while current <= end:
        out.append(current)
        current += timedelta(days=1)
    return out


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5   # 5=Samstag, 6=Sonntag


def build_days(reference_date: date, holidays: Optional[HolidayCache] = None) -> List[Day]:
    """
    Erzeuge das komplette Kalenderfenster für `reference_date`:
      - Start auf den ersten Montag des Monats einrasten
      - bis einschließlich zwei Monate minus einen Tag
      - Wochenenden und Feiertage als arbeitsfrei markieren
    Jedes berührte Jahr wird höchstens einmal bei der Feiertagsquelle abgefragt.
    """
    start = first_monday_of_month(reference_date)
    end = compute_end_date(start)

    by_year: Dict[int, Dict[str, str]] = {}
    if holidays is not None:
        for year in range(start.year, end.year + 1):
            by_year[year] = holidays.holidays_for_year(year)

    days: List[Day] = []
    for d in each_day_inclusive(start, end):
        iso = d.isoformat()
        holiday_name = by_year.get(d.year, {}).get(iso)
        days.append(Day(
            id=iso,
            is_non_working=is_weekend(d) or holiday_name is not None,
            non_working_label=holiday_name,
        ))
    return days


def partition_weeks(days: List[Day], size: int = WEEK_LENGTH) -> List[List[Day]]:
    """Teile die Tagesfolge in aufeinanderfolgende Blöcke zu je `size` Tagen."""
    return [days[i:i + size] for i in range(0, len(days), size)]
