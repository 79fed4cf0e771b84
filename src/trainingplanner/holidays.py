"""Feiertagsquellen und ein sitzungsgebundener Cache pro Jahr."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

import requests

NAGER_API_BASE = "https://date.nager.at/api/v3"


class HolidaySourceUnavailable(Exception):
    """Die Feiertagsquelle konnte nicht abgefragt werden."""


@dataclass(frozen=True)
class Holiday:
    date: str          # ISO yyyy-mm-dd
    name: str
    local_name: str = ""

    @property
    def label(self) -> str:
        return self.local_name or self.name


class HolidaySource(ABC):
    """Liefert die gesetzlichen Feiertage eines Kalenderjahres."""

    @abstractmethod
    def fetch(self, year: int) -> List[Holiday]:
        """Feiertage für `year`; wirft HolidaySourceUnavailable bei Fehlern."""
        pass


class NagerDateHolidaySource(HolidaySource):
    """Öffentliche Feiertage über die freie API von date.nager.at."""

    def __init__(self, country_code: str = "NL", base_url: str = NAGER_API_BASE,
                 timeout: float = 10, session: Optional[requests.Session] = None):
        self.country_code = country_code
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, year: int) -> List[Holiday]:
        url = f"{self.base_url}/PublicHolidays/{year}/{self.country_code}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise HolidaySourceUnavailable(f"Failed to fetch holidays for {year}: {e}") from e
        except ValueError as e:
            raise HolidaySourceUnavailable(f"Invalid holiday payload for {year}: {e}") from e

        if not isinstance(payload, list):
            raise HolidaySourceUnavailable(f"Unexpected holiday payload for {year}")
        out = []
        for item in payload:
            try:
                out.append(Holiday(item['date'], item.get('name', ''), item.get('localName', '')))
            except (KeyError, TypeError) as e:
                raise HolidaySourceUnavailable(f"Malformed holiday entry for {year}: {item!r}") from e
        return out


class StaticHolidaySource(HolidaySource):
    """Feste Feiertagsliste, z.B. offline oder in Tests."""

    def __init__(self, holidays: Iterable[Holiday] = ()):
        self._holidays = list(holidays)

    @classmethod
    def from_mapping(cls, mapping: Dict[str, str]) -> 'StaticHolidaySource':
        return cls(Holiday(d, name) for d, name in mapping.items())

    def fetch(self, year: int) -> List[Holiday]:
        prefix = f"{year:04d}-"
        return [h for h in self._holidays if h.date.startswith(prefix)]


class HolidayCache:
    """
    Cache der Feiertage je Jahr für die Lebensdauer einer Sitzung.

    Ein Fehler der Quelle wird protokolliert und als "keine Feiertage bekannt"
    behandelt; fehlgeschlagene Jahre werden nicht gecacht und beim nächsten
    Aufruf erneut abgefragt.
    """

    def __init__(self, source: Optional[HolidaySource] = None):
        self.source = source
        self._by_year: Dict[int, Dict[str, str]] = {}

    def holidays_for_year(self, year: int) -> Dict[str, str]:
        """Mapping ISO-Datum -> Feiertagsname."""
        if year in self._by_year:
            return self._by_year[year]
        if self.source is None:
            return {}
        try:
            holidays = self.source.fetch(year)
        except Exception as e:
            logging.warning(f"Holiday lookup for {year} failed, using weekends only: {e}")
            return {}
        mapping = {h.date: h.label for h in holidays}
        self._by_year[year] = mapping
        return mapping

    def holiday_name(self, d: date) -> Optional[str]:
        return self.holidays_for_year(d.year).get(d.isoformat())

    def prefetch(self, start: date, end: date) -> None:
        for year in range(start.year, end.year + 1):
            self.holidays_for_year(year)

    def cached_years(self) -> List[int]:
        return sorted(self._by_year)

    def clear(self) -> None:
        self._by_year.clear()
